"""
Edit Handlers - Event handlers wiring the chart bridge to the editor.

This module keeps the pointer and keyboard plumbing out of app.py so the
page function stays focused on layout.
"""

import logging
from typing import Any, Callable, Optional

from nicegui import ui

from modal_playground.edit.controller import InteractionStateMachine
from modal_playground.edit.hit_test import hit_test
from modal_playground.errors import ContractViolation, PlaygroundError

logger = logging.getLogger(__name__)


def setup_edit_handlers(
    session,
    machine: InteractionStateMachine,
    normalize_pointer_payload: Callable,
    refresh_panel: Optional[Callable] = None,
):
    """
    Set up pointer and keyboard handlers for the diagram.

    Args:
        session: EditorSession shown on the page
        machine: InteractionStateMachine driving the gesture
        normalize_pointer_payload: Function to normalize bridge payloads
        refresh_panel: Called after every handled event so side panels follow
            the selection and valuations

    Returns:
        Dict with handler functions for binding to UI events
    """

    def _refresh():
        if refresh_panel is not None:
            refresh_panel()

    def _fail(context: str, error: Exception):
        logger.exception(f"{context} failed")
        ui.notify(f'{context} failed: {error}', type='negative', position='bottom')
        machine.reset()

    def handle_pointer(event):
        """Route a bridge event to the interaction machine."""
        payload = normalize_pointer_payload(event)
        if payload is None:
            logger.debug(f"Ignoring pointer payload: {getattr(event, 'args', event)!r}")
            return

        kind = payload['kind']
        try:
            if kind == 'move':
                machine.pointer_move(payload['point'])
                return

            if payload['layout']:
                session.view.update_positions(payload['layout'])
            target = hit_test(
                payload['point'],
                payload['positions'],
                session.view.links,
                data_point=payload['data_point'],
                inside=payload['inside'],
            )
            if kind == 'down':
                machine.pointer_down(target, payload['point'])
            else:
                machine.pointer_up(target)
        except (PlaygroundError, ContractViolation) as e:
            _fail('Edit', e)
        _refresh()

    def handle_keyboard(e):
        """Delete / R / B / L act on the selected node or link."""
        if not e.action.keydown or e.action.repeat:
            return
        key: Any = getattr(e.key, 'name', e.key)
        try:
            step = machine.key_down(str(key))
        except (PlaygroundError, ContractViolation) as err:
            _fail('Edit', err)
            _refresh()
            return
        if step.emitted:
            _refresh()

    return {
        'handle_pointer': handle_pointer,
        'handle_keyboard': handle_keyboard,
    }
