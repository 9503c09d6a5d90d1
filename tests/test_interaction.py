"""
Tests for hit testing and the interaction state machine.

The transition functions are pure, so most tests call them directly with a
state, a selection and a hit Target. The InteractionStateMachine tests run
the full gesture against a real SyncEngine and a mocked renderer.
"""

from unittest.mock import MagicMock

import pytest

from modal_playground.edit import IDLE, InteractionStateMachine, SyncEngine, intents
from modal_playground.edit.controller import (
    Phase,
    Step,
    key_down,
    pointer_down,
    pointer_move,
    pointer_up,
)
from modal_playground.edit.hit_test import NOWHERE, Target, hit_test, point_to_segment_distance
from modal_playground.graph_view import Link
from modal_playground.model import RelationalModel
from modal_playground.session import EditorSession, Mode, Selection


def node_at(node_id, position=(0.0, 0.0)):
    return Target(kind='node', node_id=node_id, position=position)


def link_at(key):
    return Target(kind='link', link=key)


def canvas_at(data_point):
    return Target(kind='canvas', data_point=data_point)


class TestHitTest:

    positions = {0: (100.0, 100.0), 1: (300.0, 100.0), 2: (300.0, 300.0)}
    links = [Link(source=0, target=1, right=True)]

    def test_point_to_segment_distance_middle(self):
        dist, t = point_to_segment_distance((5, 5), (0, 0), (10, 10))
        assert abs(t - 0.5) < 0.01
        assert dist < 0.1

    def test_point_to_segment_distance_clamps(self):
        dist, t = point_to_segment_distance((-3, -4), (0, 0), (10, 0))
        assert t == 0.0
        assert dist == pytest.approx(5.0)

    def test_point_to_segment_distance_degenerate(self):
        dist, t = point_to_segment_distance((3, 4), (0, 0), (0, 0))
        assert (dist, t) == (5.0, 0.0)

    def test_node_hit(self):
        target = hit_test((104, 98), self.positions, self.links)
        assert target.is_node
        assert target.node_id == 0
        assert target.position == (100.0, 100.0)

    def test_node_wins_over_link(self):
        target = hit_test((112, 100), self.positions, self.links)
        assert target.is_node and target.node_id == 0

    def test_link_hit(self):
        target = hit_test((200, 105), self.positions, self.links)
        assert target.is_link
        assert target.link == (0, 1)

    def test_canvas_hit_keeps_data_point(self):
        target = hit_test((200, 200), self.positions, self.links, data_point=(-5.0, 7.0))
        assert target.is_canvas
        assert target.data_point == (-5.0, 7.0)

    def test_canvas_without_data_point_uses_pointer(self):
        target = hit_test((200, 200), self.positions, self.links)
        assert target.data_point == (200, 200)

    def test_outside_chart(self):
        assert hit_test((100, 100), self.positions, self.links, inside=False) is NOWHERE


class TestTransitions:

    def test_step_defaults_to_no_intents(self):
        step = Step(IDLE, Selection())
        assert step.emitted == ()
        assert Step(IDLE, Selection(), (intents.DeleteNode(0),)).emitted == (intents.DeleteNode(0),)

    def test_pointer_down_on_node_arms_and_selects(self):
        step = pointer_down(IDLE, Selection(), Mode.EDIT, node_at(0, (10.0, 20.0)), (11.0, 19.0))
        assert step.state.phase is Phase.ARMED_ON_NODE
        assert step.state.candidate_id == 0
        assert step.state.indicator_start == (10.0, 20.0)
        assert step.selection == Selection(node_id=0)
        assert step.emitted == ()

    def test_pointer_down_on_selected_node_deselects(self):
        step = pointer_down(IDLE, Selection(node_id=0), Mode.EDIT, node_at(0), (0.0, 0.0))
        assert step.selection.is_empty
        assert step.state.is_armed

    def test_pointer_down_on_canvas_creates_node(self):
        step = pointer_down(IDLE, Selection(node_id=1), Mode.EDIT, canvas_at((4.0, 5.0)), (40.0, 50.0))
        assert step.emitted == (intents.CreateNode((4.0, 5.0)),)
        assert step.state == IDLE

    def test_pointer_down_on_link_toggles_selection(self):
        step = pointer_down(IDLE, Selection(), Mode.EDIT, link_at((0, 1)), (0.0, 0.0))
        assert step.selection == Selection(link=(0, 1))
        step = pointer_down(IDLE, step.selection, Mode.EDIT, link_at((0, 1)), (0.0, 0.0))
        assert step.selection.is_empty

    def test_evaluate_mode_only_selects_nodes(self):
        step = pointer_down(IDLE, Selection(), Mode.EVALUATE, node_at(2), (0.0, 0.0))
        assert step.state == IDLE
        assert step.selection == Selection(node_id=2)

        for target in (canvas_at((1.0, 1.0)), link_at((0, 1))):
            step = pointer_down(IDLE, Selection(node_id=2), Mode.EVALUATE, target, (0.0, 0.0))
            assert step.emitted == ()
            assert step.selection == Selection(node_id=2)

    def test_pointer_move_only_moves_indicator_when_armed(self):
        assert pointer_move(IDLE, Selection(), (5.0, 5.0)).state == IDLE

        armed = pointer_down(IDLE, Selection(), Mode.EDIT, node_at(0, (1.0, 1.0)), (1.0, 1.0)).state
        moved = pointer_move(armed, Selection(node_id=0), (50.0, 60.0)).state
        assert moved.indicator_start == (1.0, 1.0)
        assert moved.indicator_end == (50.0, 60.0)
        assert moved.candidate_id == 0

    def test_pointer_up_on_other_node_links(self):
        armed = pointer_down(IDLE, Selection(), Mode.EDIT, node_at(0), (0.0, 0.0)).state
        step = pointer_up(armed, Selection(node_id=0), Mode.EDIT, node_at(1))
        assert step.state == IDLE
        assert step.emitted == (intents.CreateOrUpdateLink(0, 1),)
        assert step.selection.is_empty

    @pytest.mark.parametrize('target', [node_at(0), canvas_at((0.0, 0.0)), NOWHERE, link_at((0, 1))])
    def test_pointer_up_elsewhere_resets(self, target):
        armed = pointer_down(IDLE, Selection(), Mode.EDIT, node_at(0), (0.0, 0.0)).state
        step = pointer_up(armed, Selection(node_id=0), Mode.EDIT, target)
        assert step.state == IDLE
        assert step.emitted == ()
        assert step.selection == Selection(node_id=0)

    def test_pointer_up_without_gesture(self):
        step = pointer_up(IDLE, Selection(), Mode.EDIT, node_at(1))
        assert step.state == IDLE
        assert step.emitted == ()


class TestKeys:

    def test_delete_selected_node(self):
        step = key_down(IDLE, Selection(node_id=3), Mode.EDIT, 'Delete')
        assert step.emitted == (intents.DeleteNode(3),)
        assert step.selection.is_empty

    def test_delete_selected_link(self):
        step = key_down(IDLE, Selection(link=(0, 1)), Mode.EDIT, 'Delete')
        assert step.emitted == (intents.DeleteLink((0, 1)),)

    @pytest.mark.parametrize('key', ['r', 'R'])
    def test_r_on_node_toggles_reflexive(self, key):
        step = key_down(IDLE, Selection(node_id=1), Mode.EDIT, key)
        assert step.emitted == (intents.ToggleReflexive(1),)
        assert step.selection == Selection(node_id=1)

    @pytest.mark.parametrize('key, flags', [
        ('b', (True, True)),
        ('B', (True, True)),
        ('l', (True, False)),
        ('L', (True, False)),
        ('r', (False, True)),
        ('R', (False, True)),
    ])
    def test_direction_keys_on_link(self, key, flags):
        step = key_down(IDLE, Selection(link=(0, 1)), Mode.EDIT, key)
        assert step.emitted == (intents.SetLinkDirection((0, 1), *flags),)

    def test_direction_keys_ignored_for_nodes(self):
        assert key_down(IDLE, Selection(node_id=1), Mode.EDIT, 'b').emitted == ()
        assert key_down(IDLE, Selection(node_id=1), Mode.EDIT, 'l').emitted == ()

    def test_keys_need_a_selection(self):
        assert key_down(IDLE, Selection(), Mode.EDIT, 'Delete').emitted == ()

    def test_other_keys_ignored(self):
        assert key_down(IDLE, Selection(node_id=1), Mode.EDIT, 'x').emitted == ()
        assert key_down(IDLE, Selection(node_id=1), Mode.EDIT, 'Enter').emitted == ()

    def test_keys_ignored_in_evaluate_mode(self):
        step = key_down(IDLE, Selection(node_id=1), Mode.EVALUATE, 'Delete')
        assert step.emitted == ()
        assert step.selection == Selection(node_id=1)


@pytest.fixture
def session():
    model = RelationalModel.from_lists(['p', 'q'], [[False, False], [True, False]], [[], []])
    return EditorSession.from_model(model, positions=[(0, 0), (150, 0)])


@pytest.fixture
def renderer():
    return MagicMock()


@pytest.fixture
def machine(session, renderer):
    engine = SyncEngine(session, on_change=lambda: renderer.redraw(session), check_invariants=True)
    return InteractionStateMachine(session, engine, renderer)


class TestInteractionStateMachine:

    def test_drag_between_nodes_creates_link(self, machine, session, renderer):
        machine.pointer_down(node_at(0, (100.0, 100.0)), (100.0, 100.0))
        assert session.selection == Selection(node_id=0)
        renderer.show_drag_indicator.assert_called_with((100.0, 100.0), (100.0, 100.0))

        machine.pointer_move((200.0, 120.0))
        renderer.show_drag_indicator.assert_called_with((100.0, 100.0), (200.0, 120.0))
        # Nothing is committed while dragging
        assert session.model.relation == [[], []]

        machine.pointer_up(node_at(1, (250.0, 100.0)))
        renderer.hide_drag_indicator.assert_called_once()
        assert machine.state == IDLE
        assert session.model.relation == [[1], []]
        assert session.selection == Selection(link=(0, 1))

    def test_b_key_after_drag(self, machine, session):
        machine.pointer_down(node_at(0), (0.0, 0.0))
        machine.pointer_up(node_at(1))
        machine.key_down('B')
        assert session.model.relation == [[1], [0]]
        link = session.view.link((0, 1))
        assert (link.left, link.right) == (True, True)

    def test_click_canvas_creates_node(self, machine, session, renderer):
        machine.pointer_down(canvas_at((30.0, -10.0)), (300.0, 200.0))
        machine.pointer_up(canvas_at((30.0, -10.0)))
        assert session.view.node(2).position == (30.0, -10.0)
        renderer.redraw.assert_called()
        renderer.show_drag_indicator.assert_not_called()

    def test_selection_only_change_redraws(self, machine, session, renderer):
        machine.pointer_down(link_at((0, 1)), (0.0, 0.0))
        assert session.selection == Selection(link=(0, 1))
        renderer.redraw.assert_called_once_with(session)

    def test_delete_selected_node_by_key(self, machine, session):
        machine.pointer_down(node_at(1), (0.0, 0.0))
        machine.pointer_up(node_at(1))
        machine.key_down('Delete')
        assert not session.view.has_node(1)
        assert session.selection.is_empty

    def test_reset_hides_indicator(self, machine, renderer):
        machine.pointer_down(node_at(0), (0.0, 0.0))
        machine.reset()
        assert machine.state == IDLE
        renderer.hide_drag_indicator.assert_called_once()
