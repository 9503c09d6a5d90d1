"""
Tests for the pointer/keyboard handlers that connect the chart bridge to
the interaction machine. The machine is mocked; hit testing is real.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from modal_playground.chart_builder import normalize_pointer_payload
from modal_playground.edit import setup_edit_handlers
from modal_playground.edit.controller import Step
from modal_playground.session import EditorSession, Selection


@pytest.fixture
def session():
    return EditorSession.demo()


@pytest.fixture
def machine():
    mock = MagicMock()
    mock.key_down.return_value = Step(None, Selection())
    return mock


@pytest.fixture
def refresh():
    return MagicMock()


@pytest.fixture
def handlers(session, machine, refresh):
    return setup_edit_handlers(session, machine, normalize_pointer_payload, refresh_panel=refresh)


def pointer(kind, x, y, **extra):
    return SimpleNamespace(args={"kind": kind, "x": x, "y": y, **extra})


def key_event(name, keydown=True, repeat=False):
    return SimpleNamespace(key=SimpleNamespace(name=name),
                           action=SimpleNamespace(keydown=keydown, repeat=repeat))


class TestPointer:

    def test_down_on_node(self, handlers, machine, refresh):
        handlers["handle_pointer"](pointer("down", 101, 99, positions={"0": [100, 100], "1": [300, 100]}))
        target, point = machine.pointer_down.call_args[0]
        assert target.is_node and target.node_id == 0
        assert point == (101.0, 99.0)
        refresh.assert_called_once()

    def test_down_on_canvas_uses_data_point(self, handlers, machine):
        handlers["handle_pointer"](pointer("down", 500, 500, data=[12, -3], positions={"0": [100, 100]}))
        target, _ = machine.pointer_down.call_args[0]
        assert target.is_canvas
        assert target.data_point == (12.0, -3.0)

    def test_move(self, handlers, machine):
        handlers["handle_pointer"](pointer("move", 5, 6))
        machine.pointer_move.assert_called_once_with((5.0, 6.0))
        machine.pointer_down.assert_not_called()

    def test_up_syncs_layout(self, handlers, machine, session):
        handlers["handle_pointer"](pointer("up", 0, 0, positions={}, layout={"2": [40, 50]}))
        assert session.view.node(2).position == (40.0, 50.0)
        machine.pointer_up.assert_called_once()

    def test_up_outside_chart(self, handlers, machine):
        handlers["handle_pointer"](pointer("up", -20, 0, inside=False, positions={"0": [-20, 0]}))
        target = machine.pointer_up.call_args[0][0]
        assert not (target.is_node or target.is_link or target.is_canvas)

    def test_garbage_is_ignored(self, handlers, machine, refresh):
        handlers["handle_pointer"](SimpleNamespace(args={"kind": "wheel"}))
        machine.pointer_down.assert_not_called()
        refresh.assert_not_called()


class TestKeyboard:

    def test_keydown_is_forwarded(self, handlers, machine):
        handlers["handle_keyboard"](key_event("Delete"))
        machine.key_down.assert_called_once_with("Delete")

    def test_keyup_and_repeat_are_ignored(self, handlers, machine):
        handlers["handle_keyboard"](key_event("b", keydown=False))
        handlers["handle_keyboard"](key_event("b", repeat=True))
        machine.key_down.assert_not_called()

    def test_refresh_only_after_edits(self, handlers, machine, refresh):
        handlers["handle_keyboard"](key_event("x"))
        refresh.assert_not_called()
        machine.key_down.return_value = Step(None, Selection(), ("edit",))
        handlers["handle_keyboard"](key_event("r"))
        refresh.assert_called_once()
