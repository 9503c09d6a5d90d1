"""
Tests for the logical model and its visual mirror.
"""

import pytest

from modal_playground.errors import ContractViolation, TransitionNotFound
from modal_playground.graph_view import GraphView, Link, Node, link_key
from modal_playground.model import RelationalModel
from modal_playground.session import EditorSession, Mode, Selection


@pytest.fixture
def model():
    return RelationalModel.from_lists(
        ['p', 'q'],
        [[False, False], [True, False], [False, True]],
        [[1], [1, 2], []],
    )


class TestRelationalModel:

    def test_from_lists(self, model):
        assert model.propvars == ['p', 'q']
        assert model.size == 3
        assert model.relation == [[1], [1, 2], []]
        assert model.live_states() == [0, 1, 2]

    def test_from_lists_rejects_mismatched_shapes(self):
        with pytest.raises(ContractViolation):
            RelationalModel.from_lists(['p'], [[False]], [[], []])

    def test_from_lists_rejects_dangling_transition(self):
        with pytest.raises(ContractViolation):
            RelationalModel.from_lists(['p'], [[False]], [[3]])

    def test_from_lists_rejects_duplicate_transition(self):
        with pytest.raises(ContractViolation):
            RelationalModel.from_lists(['p'], [[False], [True]], [[1, 1], []])

    def test_add_state_checks_width(self, model):
        with pytest.raises(ContractViolation):
            model.add_state([True])
        assert model.add_state([True, True]) == 3

    def test_tombstone_keeps_slot(self, model):
        model.tombstone_state(2)
        assert model.size == 3
        assert not model.is_live(2)
        assert model.states[2] == []
        assert model.live_states() == [0, 1]
        # A new state gets a fresh id, never the tombstoned one
        assert model.add_state([False, False]) == 3

    def test_tombstoned_state_is_rejected(self, model):
        model.tombstone_state(0)
        with pytest.raises(ContractViolation):
            model.valuation(0)
        with pytest.raises(ContractViolation):
            model.add_transition(1, 0)
        with pytest.raises(ContractViolation):
            model.tombstone_state(0)

    def test_remove_missing_transition(self, model):
        with pytest.raises(TransitionNotFound) as exc:
            model.remove_transition(2, 0)
        assert (exc.value.source, exc.value.target) == (2, 0)
        assert isinstance(exc.value, AssertionError)

    def test_value_of(self, model):
        assert model.value_of(1, 'p') is True
        assert model.value_of(1, 'q') is False
        assert model.value_of(1, 'z') is None


class TestGraphView:

    def test_link_key_normalizes(self):
        assert link_key(3, 1) == (1, 3)
        assert link_key(1, 3) == (1, 3)

    def test_add_link_requires_normalized_pair(self):
        view = GraphView()
        with pytest.raises(ContractViolation):
            view.add_link(Link(source=2, target=1, right=True))

    def test_one_link_per_pair(self):
        view = GraphView()
        view.add_link(Link(source=0, target=1, right=True))
        with pytest.raises(ContractViolation):
            view.add_link(Link(source=0, target=1, left=True))
        assert view.link_between(1, 0) is view.link((0, 1))

    def test_missing_node_and_link(self):
        view = GraphView()
        assert view.find_node(4) is None
        with pytest.raises(ContractViolation):
            view.node(4)
        with pytest.raises(ContractViolation):
            view.link((0, 4))

    def test_update_positions_ignores_unknown_nodes(self):
        view = GraphView()
        view.add_node(Node(id=0))
        view.update_positions({0: (10, 20), 7: (1, 1)})
        assert view.node(0).position == (10.0, 20.0)
        assert len(view) == 1

    def test_links_for(self):
        view = GraphView()
        view.add_link(Link(source=0, target=1, right=True))
        view.add_link(Link(source=1, target=2, left=True))
        view.add_link(Link(source=2, target=3, right=True))
        assert [link.key for link in view.links_for(1)] == [(0, 1), (1, 2)]


class TestEditorSession:

    def test_from_model_mirrors_relation(self, model):
        session = EditorSession.from_model(model)
        view = session.view
        assert [node.id for node in view] == [0, 1, 2]
        assert view.node(1).reflexive is True
        assert view.node(0).reflexive is False
        assert view.link((0, 1)).right is True
        assert view.link((0, 1)).left is False
        assert view.link((1, 2)).right is True

    def test_from_model_copies_valuations(self, model):
        session = EditorSession.from_model(model)
        assert session.view.node(1).valuation == model.states[1]
        assert session.view.node(1).valuation is not model.states[1]

    def test_demo(self):
        session = EditorSession.demo()
        assert session.model.propvars == ['p', 'q', 'r', 's', 't']
        assert session.var_count == 2
        assert session.active_propvars == ['p', 'q']
        assert session.model.relation == [[1], [1, 2], []]
        assert session.model.states[1] == [True, False, False, False, False]
        assert session.model.states[2] == [False, True, False, False, False]
        assert session.mode is Mode.EDIT
        assert session.selection.is_empty

    def test_var_count_is_clamped(self, model):
        assert EditorSession.from_model(model, var_count=9).var_count == 2
        assert EditorSession.from_model(model, var_count=0).var_count == 1

    def test_selection_holds_one_item(self, model):
        session = EditorSession.from_model(model)
        session.select_node(1)
        assert session.selected_node.id == 1
        assert session.selected_link is None
        session.select_link((2, 1))
        assert session.selection == Selection(link=(1, 2))
        assert session.selected_node is None
        assert session.selected_link.key == (1, 2)
        session.clear_selection()
        assert session.selection.is_empty
