"""
Sync Engine - the only writer of the Kripke model and its graph view.

Every edit is a single call that updates the RelationalModel and the
GraphView together, so the arrow flags on links and the reflexive flags on
nodes always mirror the accessibility relation.
"""

import logging
from typing import Callable, List, Optional, Tuple

from modal_playground.edit import intents
from modal_playground.errors import ContractViolation, TransitionNotFound
from modal_playground.graph_view import GraphView, Link, LinkKey, Node, link_key
from modal_playground.model import RelationalModel
from modal_playground.session import EditorSession

logger = logging.getLogger(__name__)


def verify_consistency(model: RelationalModel, view: GraphView) -> None:
    """
    Check the structural invariants between model and view.

    Raises:
        ContractViolation: describing the first broken invariant
    """
    live = set(model.live_states())
    node_ids = {node.id for node in view}
    if node_ids != live:
        raise ContractViolation(f"Nodes {sorted(node_ids)} do not match live states {sorted(live)}")

    for node in view:
        if node.valuation != model.states[node.id]:
            raise ContractViolation(f"Node {node.id} valuation differs from its state")
        if node.reflexive != model.has_transition(node.id, node.id):
            raise ContractViolation(f"Node {node.id} reflexive flag differs from the relation")

    for link in view.links:
        if not (link.left or link.right):
            raise ContractViolation(f"Link {link.key} has no arrows")
        if link.left != model.has_transition(link.target, link.source):
            raise ContractViolation(f"Link {link.key} left arrow differs from the relation")
        if link.right != model.has_transition(link.source, link.target):
            raise ContractViolation(f"Link {link.key} right arrow differs from the relation")

    for source, targets in enumerate(model.relation):
        if len(set(targets)) != len(targets):
            raise ContractViolation(f"State {source} has duplicate transitions")
        for target in targets:
            if source not in live or target not in live:
                raise ContractViolation(f"Transition {source} -> {target} touches a deleted state")
            if target != source and view.link_between(source, target) is None:
                raise ContractViolation(f"Transition {source} -> {target} has no link")


class SyncEngine:
    """
    Executes edit operations against an EditorSession.

    Each public method is atomic: its preconditions are checked before the
    first write, and a broken precondition raises ContractViolation.
    """

    def __init__(self, session: EditorSession,
                 on_change: Optional[Callable[[], None]] = None,
                 check_invariants: bool = False):
        self.session = session
        self.on_change = on_change
        self.check_invariants = check_invariants

    @property
    def model(self) -> RelationalModel:
        return self.session.model

    @property
    def view(self) -> GraphView:
        return self.session.view

    def _committed(self, description: str) -> None:
        logger.debug(f"Applied edit: {description}")
        if self.check_invariants:
            self.verify()
        if self.on_change:
            self.on_change()

    def verify(self) -> None:
        verify_consistency(self.model, self.view)

    def _push(self, source: int, target: int) -> None:
        if not self.model.has_transition(source, target):
            self.model.add_transition(source, target)

    # --- Nodes ---

    def create_node(self, position: Tuple[float, float]) -> Node:
        """
        Create a new state with an all-false valuation and its node.

        Args:
            position: (x, y) in chart data coordinates

        Returns:
            The created Node
        """
        width = len(self.model.propvars)
        state_id = self.model.add_state([False] * width)
        node = Node(id=state_id, x=float(position[0]), y=float(position[1]),
                    valuation=[False] * width, reflexive=False)
        self.view.add_node(node)
        self._committed(f"create node {state_id}")
        return node

    def delete_node(self, node_id: int) -> None:
        """Remove a node, its incident links and their transitions, then tombstone the state."""
        self.view.node(node_id)
        self.model.valuation(node_id)

        links = list(self.view.links_for(node_id))
        for link in links:
            self._require_link_transitions(link)

        for link in links:
            self._drop_link(link)
        # Tombstoning clears the outgoing list, which also drops a self-loop.
        self.model.tombstone_state(node_id)
        self.view.remove_node(node_id)

        if self.session.selection.node_id == node_id:
            self.session.clear_selection()
        self._committed(f"delete node {node_id}")

    def toggle_reflexive(self, node_id: int) -> Node:
        node = self.view.node(node_id)
        self.model.valuation(node_id)
        if node.reflexive:
            self.model.remove_transition(node_id, node_id)
            node.reflexive = False
        else:
            self._push(node_id, node_id)
            node.reflexive = True
        self._committed(f"toggle reflexive {node_id} -> {node.reflexive}")
        return node

    def set_valuation(self, node_id: int, index: int, value: bool) -> None:
        """Write one variable of a state into both the node and the model."""
        node = self.view.node(node_id)
        state = self.model.valuation(node_id)
        if not 0 <= index < len(state):
            raise ContractViolation(f"Variable index {index} out of range")
        node.valuation[index] = bool(value)
        state[index] = bool(value)
        self._committed(f"set {self.model.propvars[index]}={bool(value)} at {node_id}")

    # --- Links ---

    def create_or_update_link(self, node_a: int, node_b: int,
                              dragged_from: Optional[int] = None,
                              dragged_to: Optional[int] = None) -> Optional[Link]:
        """
        Add the transition dragged_from -> dragged_to, creating or updating the
        link between the two nodes.

        Self-drags are ignored; reflexive states are toggled separately.

        Returns:
            The new or existing Link (now selected), or None for a self-drag
        """
        if dragged_from is None:
            dragged_from = node_a
        if dragged_to is None:
            dragged_to = node_b
        if {dragged_from, dragged_to} != {node_a, node_b}:
            raise ContractViolation(f"Drag {dragged_from}->{dragged_to} does not join {node_a} and {node_b}")
        if node_a == node_b:
            return None
        self.view.node(node_a)
        self.view.node(node_b)

        source, target = link_key(node_a, node_b)
        direction = 'right' if dragged_from < dragged_to else 'left'

        link = self.view.link_between(source, target)
        if link is None:
            link = Link(source=source, target=target)
            self.view.add_link(link)
        setattr(link, direction, True)
        self._push(dragged_from, dragged_to)

        self.session.select_link(link.key)
        self._committed(f"link {dragged_from} -> {dragged_to} ({direction})")
        return link

    def _require_transition(self, source: int, target: int) -> None:
        if not self.model.has_transition(source, target):
            raise TransitionNotFound(source, target)

    def _require_link_transitions(self, link: Link) -> None:
        if link.left:
            self._require_transition(link.target, link.source)
        if link.right:
            self._require_transition(link.source, link.target)

    def _drop_link(self, link: Link) -> None:
        if link.left:
            self.model.remove_transition(link.target, link.source)
        if link.right:
            self.model.remove_transition(link.source, link.target)
        self.view.remove_link(link.key)
        if self.session.selection.link == link.key:
            self.session.clear_selection()

    def delete_link(self, key: LinkKey) -> None:
        link = self.view.link(key)
        self._require_link_transitions(link)
        self._drop_link(link)
        self._committed(f"delete link {link.key}")

    def set_link_direction(self, key: LinkKey, left: bool, right: bool) -> Optional[Link]:
        """
        Make a link's arrows match (left, right), pushing or removing only the
        transitions whose flag actually changes.

        Returns:
            The updated Link, or None when both flags were cleared and the link removed
        """
        link = self.view.link(key)
        if link.left == left and link.right == right:
            return link
        if link.left and not left:
            self._require_transition(link.target, link.source)
        if link.right and not right:
            self._require_transition(link.source, link.target)

        if left and not link.left:
            self._push(link.target, link.source)
        elif link.left and not left:
            self.model.remove_transition(link.target, link.source)
        if right and not link.right:
            self._push(link.source, link.target)
        elif link.right and not right:
            self.model.remove_transition(link.source, link.target)
        link.left, link.right = bool(left), bool(right)

        if not (link.left or link.right):
            self.view.remove_link(link.key)
            if self.session.selection.link == link.key:
                self.session.clear_selection()
            self._committed(f"link {link.key} cleared")
            return None

        self._committed(f"link {link.key} direction left={link.left} right={link.right}")
        return link

    # --- Intents ---

    def apply(self, intent: 'intents.Intent'):
        """Execute one intent emitted by the interaction state machine."""
        if isinstance(intent, intents.CreateNode):
            return self.create_node(intent.position)
        if isinstance(intent, intents.DeleteNode):
            return self.delete_node(intent.node_id)
        if isinstance(intent, intents.CreateOrUpdateLink):
            return self.create_or_update_link(intent.dragged_from, intent.dragged_to,
                                              intent.dragged_from, intent.dragged_to)
        if isinstance(intent, intents.DeleteLink):
            return self.delete_link(intent.link)
        if isinstance(intent, intents.SetLinkDirection):
            return self.set_link_direction(intent.link, intent.left, intent.right)
        if isinstance(intent, intents.ToggleReflexive):
            return self.toggle_reflexive(intent.node_id)
        if isinstance(intent, intents.SetValuation):
            return self.set_valuation(intent.node_id, intent.index, intent.value)
        raise ContractViolation(f"Unknown intent {intent!r}")

    def apply_all(self, batch: List['intents.Intent']) -> list:
        return [self.apply(intent) for intent in batch]
