"""
Editing system for the Kripke diagram.

This package provides click-and-drag editing:
- SyncEngine: the only writer of the model and its view
- InteractionStateMachine: gesture state and hit-tested transitions
- DragOverlay: HTML/JS drag indicator and pointer bridge
- setup_edit_handlers: Event handlers for app.py integration

Usage:
    from modal_playground.edit import SyncEngine, InteractionStateMachine, DragOverlay
    from modal_playground.edit.handlers import setup_edit_handlers
"""

from modal_playground.edit.constants import (
    CHART_HEIGHT,
    CHART_WIDTH,
    LINK_HIT_TOLERANCE,
    NODE_HIT_SLACK,
    NODE_RADIUS,
    POINTER_EVENT,
)
from modal_playground.edit import intents
from modal_playground.edit.hit_test import Target, hit_test
from modal_playground.edit.actions import SyncEngine, verify_consistency
from modal_playground.edit.controller import IDLE, InteractionState, InteractionStateMachine, Step
from modal_playground.edit.overlay import DragOverlay
from modal_playground.edit.handlers import setup_edit_handlers

__all__ = [
    'intents',
    'SyncEngine',
    'verify_consistency',
    'InteractionStateMachine',
    'InteractionState',
    'IDLE',
    'Step',
    'Target',
    'hit_test',
    'DragOverlay',
    'setup_edit_handlers',
    'NODE_RADIUS',
    'NODE_HIT_SLACK',
    'LINK_HIT_TOLERANCE',
    'POINTER_EVENT',
    'CHART_WIDTH',
    'CHART_HEIGHT',
]
