"""
EditorSession - the single mutable object behind one playground page.

It bundles the logical model, the visual view, the current selection and
the panel state (mode, variable count, formula text, last result) so the
engine and controllers receive it explicitly instead of sharing globals.
"""

import enum
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from modal_playground.graph_view import GraphView, Link, LinkKey, Node, link_key
from modal_playground.model import RelationalModel

DEFAULT_PROPVARS = ['p', 'q', 'r', 's', 't']
DEFAULT_VAR_COUNT = 2


class Mode(enum.Enum):
    EDIT = 'edit'
    EVALUATE = 'evaluate'


@dataclass(frozen=True)
class Selection:
    """At most one of node_id / link is set."""
    node_id: Optional[int] = None
    link: Optional[LinkKey] = None

    @classmethod
    def of_node(cls, node_id: int) -> 'Selection':
        return cls(node_id=node_id)

    @classmethod
    def of_link(cls, key: LinkKey) -> 'Selection':
        return cls(link=link_key(*key))

    @property
    def is_empty(self) -> bool:
        return self.node_id is None and self.link is None


class EditorSession:
    def __init__(self, model: RelationalModel, view: GraphView, var_count: int = DEFAULT_VAR_COUNT):
        self.model = model
        self.view = view
        self.selection = Selection()
        self.mode = Mode.EDIT
        self.var_count = max(1, min(var_count, len(model.propvars))) if model.propvars else 0
        self.formula_text = ''
        self.last_result: Optional[Any] = None

    @classmethod
    def from_model(cls, model: RelationalModel, var_count: int = DEFAULT_VAR_COUNT,
                   positions: Optional[Sequence[tuple]] = None) -> 'EditorSession':
        """Derive a consistent view from an existing model."""
        view = GraphView()
        for sid in model.live_states():
            x, y = positions[sid] if positions and sid < len(positions) else (0.0, 0.0)
            view.add_node(Node(
                id=sid, x=x, y=y,
                valuation=list(model.states[sid]),
                reflexive=model.has_transition(sid, sid),
            ))
        for source in model.live_states():
            for target in model.relation[source]:
                if target == source:
                    continue
                a, b = link_key(source, target)
                link = view.link_between(a, b)
                if link is None:
                    link = Link(source=a, target=b)
                    view.add_link(link)
                if source == a:
                    link.right = True
                else:
                    link.left = True
        return cls(model, view, var_count)

    @classmethod
    def demo(cls, propvars: Sequence[str] = DEFAULT_PROPVARS,
             var_count: int = DEFAULT_VAR_COUNT) -> 'EditorSession':
        """Three-state starter model shown when the page opens."""
        width = len(propvars)
        states = [[False] * width for _ in range(3)]
        if width > 0:
            states[1][0] = True
        if width > 1:
            states[2][1] = True
        model = RelationalModel.from_lists(propvars, states, [[1], [1, 2], []])
        return cls.from_model(model, var_count, positions=[(-150, 0), (0, 0), (150, 0)])

    @property
    def active_propvars(self) -> List[str]:
        return self.model.propvars[:self.var_count]

    @property
    def selected_node(self) -> Optional[Node]:
        if self.selection.node_id is None:
            return None
        return self.view.find_node(self.selection.node_id)

    @property
    def selected_link(self) -> Optional[Link]:
        if self.selection.link is None:
            return None
        return self.view.link_between(*self.selection.link)

    def select_node(self, node_id: Optional[int]) -> None:
        self.selection = Selection() if node_id is None else Selection.of_node(node_id)

    def select_link(self, key: Optional[LinkKey]) -> None:
        self.selection = Selection() if key is None else Selection.of_link(key)

    def clear_selection(self) -> None:
        self.selection = Selection()
