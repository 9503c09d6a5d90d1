"""
ECharts options builder for the Kripke model diagram.

This module converts the GraphView of an EditorSession into a single force
layout 'graph' series, and normalizes the pointer payloads the chart bridge
sends back.

NetworkX holds the diagram while the options are assembled; the output is a
plain dict usable with ui.echart.
"""

from typing import Any, Callable, Dict, Optional, Tuple

import networkx as nx

from modal_playground.edit.constants import LINK_DISTANCE, NODE_RADIUS, REPULSION
from modal_playground.session import EditorSession, Mode
from modal_playground.utils import brighten_hex, darken_hex, state_color

LINK_COLOR = '#000000'
LINK_WIDTH = 4
REFLEXIVE_BORDER = ('#000000', 2.5)


def build_graph(session: EditorSession, label_for: Callable) -> nx.Graph:
    """Undirected NetworkX graph of the view; arrow flags ride on the edges."""
    G = nx.Graph()
    selection = session.selection
    for node in session.view:
        G.add_node(
            node.id,
            x=node.x,
            y=node.y,
            reflexive=node.reflexive,
            selected=selection.node_id == node.id,
            assignment=label_for(node),
        )
    for link in session.view.links:
        G.add_edge(
            link.source,
            link.target,
            left=link.left,
            right=link.right,
            selected=selection.link == link.key,
        )
    return G


def _node_item(node_id: int, attrs: Dict[str, Any]) -> Dict[str, Any]:
    base = state_color(node_id)
    fill = brighten_hex(base) if attrs['selected'] else base
    if attrs['reflexive']:
        border_color, border_width = REFLEXIVE_BORDER
    else:
        border_color, border_width = darken_hex(base, 0.3), 1.5
    return {
        'id': str(node_id),
        'name': str(node_id),
        'x': attrs['x'],
        'y': attrs['y'],
        'symbolSize': NODE_RADIUS * 2,
        'itemStyle': {'color': fill, 'borderColor': border_color, 'borderWidth': border_width},
        'label': {
            'show': True,
            'position': 'right',
            'formatter': f"{{id|{node_id}}} {{vals|{attrs['assignment']}}}",
            'rich': {
                'id': {'fontWeight': 'bold', 'color': '#000000'},
                'vals': {'color': '#333333'},
            },
        },
        'reflexive': attrs['reflexive'],
    }


def _link_item(source: int, target: int, attrs: Dict[str, Any]) -> Dict[str, Any]:
    lo, hi = min(source, target), max(source, target)
    return {
        'source': str(lo),
        'target': str(hi),
        'symbol': ['arrow' if attrs['left'] else 'none', 'arrow' if attrs['right'] else 'none'],
        'symbolSize': 10,
        'lineStyle': {
            'color': LINK_COLOR,
            'width': LINK_WIDTH,
            'type': 'dashed' if attrs['selected'] else 'solid',
            'opacity': 1.0,
        },
    }


def build_echart_options(session: EditorSession,
                         label_for: Optional[Callable] = None) -> Dict[str, Any]:
    """
    Build ECharts options for the session's diagram.

    Args:
        session: EditorSession to draw
        label_for: node -> assignment text shown next to the node

    Returns:
        ECharts options dict ready for ui.echart()
    """
    if label_for is None:
        label_for = lambda node: ''
    G = build_graph(session, label_for)

    data = [_node_item(n, attrs) for n, attrs in G.nodes(data=True)]
    links = [_link_item(u, v, attrs) for u, v, attrs in G.edges(data=True)]

    return {
        'animation': False,
        'tooltip': {'show': False},
        'series': [
            {
                'type': 'graph',
                'layout': 'force',
                'roam': False,
                'draggable': session.mode is Mode.EVALUATE,
                'data': data,
                'links': links,
                'force': {
                    'repulsion': REPULSION,
                    'edgeLength': LINK_DISTANCE,
                    'layoutAnimation': True,
                },
                'edgeSymbol': ['none', 'none'],
                'emphasis': {'disabled': True},
            }
        ],
    }


def normalize_pointer_payload(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Normalize a pointer event from the chart bridge.

    Accepts the dict sent by the bridge (or a NiceGUI event wrapping it) and
    returns {'kind', 'point', 'data_point', 'inside', 'positions', 'layout'}
    with node ids as ints, or None when the payload is unusable. 'positions'
    are screen pixels for hit testing, 'layout' the force layout coordinates.
    """
    if hasattr(raw, 'args'):
        raw = raw.args
    if not isinstance(raw, dict):
        return None

    kind = raw.get('kind')
    if kind not in ('down', 'move', 'up'):
        return None
    try:
        point = (float(raw['x']), float(raw['y']))
    except (KeyError, TypeError, ValueError):
        return None

    data_point: Optional[Tuple[float, float]] = None
    data = raw.get('data')
    if isinstance(data, (list, tuple)) and len(data) >= 2:
        try:
            data_point = (float(data[0]), float(data[1]))
        except (TypeError, ValueError):
            data_point = None

    positions: Dict[int, Tuple[float, float]] = {}
    layout: Dict[int, Tuple[float, float]] = {}
    for key, target in (('positions', positions), ('layout', layout)):
        for node_id, pos in (raw.get(key) or {}).items():
            try:
                target[int(node_id)] = (float(pos[0]), float(pos[1]))
            except (TypeError, ValueError, IndexError):
                continue

    return {
        'kind': kind,
        'point': point,
        'data_point': data_point,
        'inside': bool(raw.get('inside', True)),
        'positions': positions,
        'layout': layout,
    }

