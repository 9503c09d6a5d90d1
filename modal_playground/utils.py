from typing import List

# d3 category10, indexed by state id
CATEGORY10: List[str] = [
    '#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
    '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf',
]


def state_color(state_id: int) -> str:
    return CATEGORY10[state_id % len(CATEGORY10)]


def _parse_hex(hex_color: str):
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def brighten_hex(hex_color: str, k: float = 1.0) -> str:
    """Brightens a hex color the way d3.rgb().brighter(k) does (channels / 0.7**k)."""
    factor = 1 / (0.7 ** k)
    r, g, b = (min(255, int(round(c * factor))) for c in _parse_hex(hex_color))
    return '#{:02x}{:02x}{:02x}'.format(r, g, b)


def darken_hex(hex_color: str, amount: float) -> str:
    """Darkens a hex color by mixing it with black. amount=0 is no change, amount=1 is black."""
    r, g, b = _parse_hex(hex_color)
    r = int(r * (1 - amount))
    g = int(g * (1 - amount))
    b = int(b * (1 - amount))
    return '#{:02x}{:02x}{:02x}'.format(r, g, b)
