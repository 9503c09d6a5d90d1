"""
Visual mirror of the Kripke model.

Nodes share their id with the model state they draw. Links are stored once
per unordered pair (source < target) with one arrow flag per direction.
Only the edit engine writes logical fields here; the renderer writes
positions.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from modal_playground.errors import ContractViolation

LinkKey = Tuple[int, int]


@dataclass
class Node:
    id: int
    x: float = 0.0
    y: float = 0.0
    valuation: List[bool] = field(default_factory=list)
    reflexive: bool = False

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Link:
    source: int
    target: int
    left: bool = False
    right: bool = False

    @property
    def key(self) -> LinkKey:
        return (self.source, self.target)

    def touches(self, node_id: int) -> bool:
        return node_id in (self.source, self.target)


def link_key(a: int, b: int) -> LinkKey:
    """Normalize an unordered node pair."""
    return (a, b) if a < b else (b, a)


class GraphView:
    """Nodes by id and links by normalized pair, in insertion order."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._links: Dict[LinkKey, Link] = {}

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def links(self) -> List[Link]:
        return list(self._links.values())

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def node(self, node_id: int) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise ContractViolation(f"Node {node_id} is not in the view") from None

    def find_node(self, node_id: int) -> Optional[Node]:
        return self._nodes.get(node_id)

    def add_node(self, node: Node) -> None:
        if node.id in self._nodes:
            raise ContractViolation(f"Node {node.id} already exists")
        self._nodes[node.id] = node

    def remove_node(self, node_id: int) -> Node:
        node = self.node(node_id)
        del self._nodes[node_id]
        return node

    def link_between(self, a: int, b: int) -> Optional[Link]:
        return self._links.get(link_key(a, b))

    def link(self, key: LinkKey) -> Link:
        try:
            return self._links[link_key(*key)]
        except KeyError:
            raise ContractViolation(f"Link {key} is not in the view") from None

    def add_link(self, link: Link) -> None:
        if link.source >= link.target:
            raise ContractViolation(f"Link {link.key} is not normalized")
        if link.key in self._links:
            raise ContractViolation(f"Link {link.key} already exists")
        self._links[link.key] = link

    def remove_link(self, key: LinkKey) -> Link:
        link = self.link(key)
        del self._links[link.key]
        return link

    def links_for(self, node_id: int) -> List[Link]:
        return [link for link in self._links.values() if link.touches(node_id)]

    def update_positions(self, positions: Dict[int, Tuple[float, float]]) -> None:
        """Copy layout coordinates reported by the renderer."""
        for node_id, (x, y) in positions.items():
            node = self._nodes.get(node_id)
            if node is not None:
                node.x, node.y = float(x), float(y)
