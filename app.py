"""
Main NiceGUI application for the modal logic playground.

Builds one EditorSession per page, renders the Kripke model with ui.echart,
and provides the Edit/Evaluate controls with ui.card / ui.row.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

load_dotenv()

from modal_playground.chart_builder import build_echart_options, normalize_pointer_payload
from modal_playground.config import get_propvars, get_setting, get_var_count
from modal_playground.edit import DragOverlay, InteractionStateMachine, SyncEngine, setup_edit_handlers
from modal_playground.edit.constants import CHART_HEIGHT, CHART_WIDTH, POINTER_EVENT
from modal_playground.errors import PlaygroundError
from modal_playground.logic import MPLChecker
from modal_playground.mode import ModeController
from modal_playground.renderer import EChartRenderer
from modal_playground.session import EditorSession, Mode

logging.basicConfig(
    level=get_setting('log_level'),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

# Global Styles
ui.add_head_html('''
    <style>
        .kripke-chart canvas {
            cursor: crosshair;
        }
        .mono {
            font-family: ui-monospace, SFMono-Regular, Menlo, monospace;
        }
    </style>
''', shared=True)

HELP_TEXT = (
    'Click empty space to add a state. Drag from one state to another to add a transition. '
    'Select a state and press R to toggle its self-loop, Delete to remove it. '
    'Select a link and press L, R or B to set its direction, Delete to remove it.'
)


@ui.page('/')
def main_page():
    session = EditorSession.demo(get_propvars(), get_var_count())
    checker = MPLChecker()
    mode = ModeController(session, checker)

    state = {'renderer': None}

    def on_model_change():
        if state['renderer'] is not None:
            state['renderer'].redraw(session)

    engine = SyncEngine(session, on_change=on_model_change,
                        check_invariants=get_setting('check_invariants'))
    machine = InteractionStateMachine(session, engine)
    mode.interaction = machine

    # --- Side panel content ---

    @ui.refreshable
    def variables_panel():
        node = session.selected_node
        ui.label(mode.selected_label()).classes('text-sm font-bold')
        editable = node is not None and session.mode is Mode.EDIT
        with ui.column().classes('gap-1'):
            for index, name in enumerate(session.active_propvars):
                with ui.row().classes('items-center gap-2'):
                    ui.label(name).classes('mono w-6')
                    value = bool(node.valuation[index]) if node is not None else None
                    for flag, text in ((True, 'T'), (False, 'F')):
                        color = 'primary' if value is flag else 'grey'
                        btn = ui.button(text, on_click=lambda i=index, f=flag: set_valuation(i, f))
                        btn.props(f'dense unelevated color={color}')
                        if not editable:
                            btn.disable()

    @ui.refreshable
    def result_panel():
        result = session.last_result
        if result is None:
            return
        color = 'text-green-700' if result.ok and result.value else 'text-red-700'
        if not result.ok:
            color = 'text-orange-700'
        ui.label(result.message).classes(f'mono text-lg {color}')

    def refresh_panels():
        variables_panel.refresh()
        evaluate_button.text = mode.evaluate_label()
        result_panel.refresh()

    def set_valuation(index: int, value: bool):
        try:
            mode.set_selected_valuation(engine, index, value)
        except PlaygroundError as e:
            ui.notify(e.message, type='warning', position='bottom')
            return
        refresh_panels()

    def set_var_count(e):
        try:
            mode.set_var_count(int(e.value))
        except PlaygroundError as err:
            ui.notify(err.message, type='warning', position='bottom')
        refresh_panels()

    def switch_mode(e):
        mode.set_mode(Mode(e.value))
        formula_input.value = ''
        evaluate_row.set_visibility(session.mode is Mode.EVALUATE)
        refresh_panels()

    def evaluate():
        result = mode.evaluate(formula_input.value)
        if not result.ok:
            ui.notify(result.message, type='warning', position='bottom')
        result_panel.refresh()

    # --- Layout Construction ---

    with ui.row().classes('w-full items-center gap-4 p-2'):
        ui.icon('hub', size='md').classes('text-primary')
        ui.label(get_setting('title')).classes('text-lg font-bold')
        ui.toggle({Mode.EDIT.value: 'Edit', Mode.EVALUATE.value: 'Evaluate'},
                  value=session.mode.value, on_change=switch_mode)

    with ui.row().classes('w-full items-start gap-4 no-wrap'):
        chart = ui.echart(build_echart_options(session, mode.assignment_label))
        chart.classes('kripke-chart border rounded')
        chart.style(f'width: {CHART_WIDTH}px; height: {CHART_HEIGHT}px;')

        with ui.card().classes('w-80 gap-3'):
            ui.label('Variables').classes('text-md font-bold')
            count_options = {n: str(n) for n in range(1, len(session.model.propvars) + 1)}
            ui.toggle(count_options, value=session.var_count, on_change=set_var_count).props('dense')
            variables_panel()

            ui.separator()
            evaluate_row = ui.column().classes('w-full gap-2')
            with evaluate_row:
                formula_input = ui.input('Formula', placeholder='e.g. [](p -> <>q)').classes('w-full mono')
                formula_input.on('keydown.enter', lambda: evaluate())
                evaluate_button = ui.button(mode.evaluate_label(), on_click=evaluate).props('color=primary')
                result_panel()
            evaluate_row.set_visibility(False)

            ui.separator()
            ui.label(HELP_TEXT).classes('text-xs text-gray-500')

    overlay = DragOverlay()
    overlay.setup(chart.id)
    renderer = EChartRenderer(chart, overlay, mode.assignment_label)
    state['renderer'] = renderer
    machine.renderer = renderer
    mode.renderer = renderer

    handlers = setup_edit_handlers(
        session=session,
        machine=machine,
        normalize_pointer_payload=normalize_pointer_payload,
        refresh_panel=refresh_panels,
    )
    ui.on(POINTER_EVENT, handlers['handle_pointer'])
    ui.keyboard(on_key=handlers['handle_keyboard'])

    logger.info(f"Page opened with {len(session.view)} states, vars={session.active_propvars}")


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title=get_setting('title'),
        host=get_setting('host'),
        port=get_setting('port'),
        reload=not getattr(sys, 'frozen', False),
        storage_secret=get_setting('storage_secret'),
    )
