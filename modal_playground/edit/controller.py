"""
Interaction Controller - turns pointer and keyboard events into edit intents.

The state machine itself is a set of pure functions over an immutable
InteractionState snapshot. InteractionStateMachine wraps them, keeps the
current snapshot, writes the resulting selection into the session and hands
the intents to the SyncEngine.

States:
  IDLE            nothing pressed
  ARMED_ON_NODE   pointer went down on a node; releasing over another node links them

We never touch the model while a drag is in progress - only the drag
indicator moves.
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from modal_playground.edit import intents
from modal_playground.edit.constants import KEY_BOTH, KEY_DELETE, KEY_LEFT, KEY_RIGHT
from modal_playground.edit.hit_test import Target
from modal_playground.session import Mode, Selection

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class Phase(enum.Enum):
    IDLE = 'idle'
    ARMED_ON_NODE = 'armed_on_node'


@dataclass(frozen=True)
class InteractionState:
    """Immutable snapshot of the current gesture."""
    phase: Phase = Phase.IDLE
    candidate_id: Optional[int] = None
    indicator_start: Optional[Point] = None
    indicator_end: Optional[Point] = None

    @property
    def is_armed(self) -> bool:
        return self.phase is Phase.ARMED_ON_NODE

    @property
    def indicator_visible(self) -> bool:
        return self.indicator_start is not None


IDLE = InteractionState()


@dataclass(frozen=True)
class Step:
    """Result of one transition."""
    state: InteractionState
    selection: Selection
    emitted: Tuple[intents.Intent, ...] = ()


def pointer_down(state: InteractionState, selection: Selection, mode: Mode,
                 target: Target, point: Point) -> Step:
    if target.is_node:
        node_id = target.node_id
        if selection.node_id == node_id:
            new_selection = Selection()
        else:
            new_selection = Selection.of_node(node_id)
        if mode is not Mode.EDIT:
            return Step(IDLE, new_selection)
        anchor = target.position or point
        armed = InteractionState(Phase.ARMED_ON_NODE, node_id, anchor, anchor)
        return Step(armed, new_selection)

    if mode is not Mode.EDIT:
        return Step(IDLE, selection)

    if target.is_link:
        if selection.link == target.link:
            return Step(IDLE, Selection())
        return Step(IDLE, Selection.of_link(target.link))

    if target.is_canvas:
        return Step(IDLE, selection, (intents.CreateNode(target.data_point or point),))

    return Step(IDLE, selection)


def pointer_move(state: InteractionState, selection: Selection, point: Point) -> Step:
    if not state.is_armed:
        return Step(state, selection)
    return Step(replace(state, indicator_end=point), selection)


def pointer_up(state: InteractionState, selection: Selection, mode: Mode,
               target: Target) -> Step:
    if not state.is_armed or mode is not Mode.EDIT:
        return Step(IDLE, selection)
    if not target.is_node or target.node_id == state.candidate_id:
        return Step(IDLE, selection)
    link = intents.CreateOrUpdateLink(state.candidate_id, target.node_id)
    # The engine selects the resulting link.
    return Step(IDLE, Selection(), (link,))


def normalize_key(key: str) -> str:
    return key if len(key) > 1 else key.lower()


def key_down(state: InteractionState, selection: Selection, mode: Mode, key: str) -> Step:
    if mode is not Mode.EDIT:
        return Step(state, selection)
    node_id, link = selection.node_id, selection.link
    if (node_id is None) == (link is None):
        return Step(state, selection)

    key = normalize_key(key)
    if key == KEY_DELETE:
        intent = intents.DeleteNode(node_id) if node_id is not None else intents.DeleteLink(link)
        return Step(state, Selection(), (intent,))
    if key == KEY_RIGHT:
        if node_id is not None:
            return Step(state, selection, (intents.ToggleReflexive(node_id),))
        return Step(state, selection, (intents.SetLinkDirection(link, False, True),))
    if link is not None and key == KEY_BOTH:
        return Step(state, selection, (intents.SetLinkDirection(link, True, True),))
    if link is not None and key == KEY_LEFT:
        return Step(state, selection, (intents.SetLinkDirection(link, True, False),))
    return Step(state, selection)


class InteractionStateMachine:
    """Keeps the current gesture and applies transitions to a session."""

    def __init__(self, session, engine, renderer=None):
        self.session = session
        self.engine = engine
        self.renderer = renderer
        self._state = IDLE

    @property
    def state(self) -> InteractionState:
        return self._state

    def _run(self, step: Step) -> Step:
        previous = self._state
        selection_changed = step.selection != self.session.selection
        self._state = step.state
        self.session.selection = step.selection

        for intent in step.emitted:
            logger.debug(f"Intent: {intent}")
            self.engine.apply(intent)

        if self.renderer is not None:
            if step.state.indicator_visible:
                self.renderer.show_drag_indicator(step.state.indicator_start, step.state.indicator_end)
            elif previous.indicator_visible:
                self.renderer.hide_drag_indicator()
            if selection_changed and not step.emitted:
                self.renderer.redraw(self.session)
        return step

    def pointer_down(self, target: Target, point: Point) -> Step:
        return self._run(pointer_down(self._state, self.session.selection, self.session.mode, target, point))

    def pointer_move(self, point: Point) -> Step:
        return self._run(pointer_move(self._state, self.session.selection, point))

    def pointer_up(self, target: Target) -> Step:
        return self._run(pointer_up(self._state, self.session.selection, self.session.mode, target))

    def key_down(self, key: str) -> Step:
        return self._run(key_down(self._state, self.session.selection, self.session.mode, key))

    def reset(self) -> None:
        """Drop any half-finished gesture."""
        self._run(Step(IDLE, self.session.selection))
