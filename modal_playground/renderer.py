"""
Renderer for the Kripke diagram.

GraphRenderer is the interface the interaction machine and mode controller
talk to. EChartRenderer draws with ui.echart: redraws push the new series
through setOption, keeping the live layout position of nodes ECharts already
shows so the force layout does not restart on every edit.
"""

import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from nicegui import ui

from modal_playground.chart_builder import build_echart_options
from modal_playground.session import EditorSession

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@runtime_checkable
class GraphRenderer(Protocol):
    """Drawing surface for an EditorSession."""

    def redraw(self, session: EditorSession) -> None:
        """Redraw nodes, links, selection and labels from the session."""
        ...

    def set_node_drag(self, enabled: bool) -> None:
        """Enable or disable dragging nodes around the canvas."""
        ...

    def show_drag_indicator(self, start: Point, end: Point) -> None:
        """Show the dashed line drawn while a link is being dragged out."""
        ...

    def hide_drag_indicator(self) -> None:
        ...


class EChartRenderer:
    """
    GraphRenderer backed by a ui.echart element and a DragOverlay.

    Args:
        chart: the ui.echart element
        overlay: DragOverlay drawing the drag indicator
        label_for: node -> assignment text (usually ModeController.assignment_label)
    """

    def __init__(self, chart, overlay, label_for: Optional[Callable] = None):
        self.chart = chart
        self.overlay = overlay
        self.label_for = label_for

    def options(self, session: EditorSession) -> Dict[str, Any]:
        return build_echart_options(session, self.label_for)

    def redraw(self, session: EditorSession) -> None:
        options = self.options(session)
        series = options['series'][0]
        # Keep the python-side copy current for a full reload of the element
        self.chart.options.update(options)

        nodes_json = json.dumps({item['id']: item for item in series['data']})
        links_json = json.dumps(series['links'])
        draggable = 'true' if series['draggable'] else 'false'

        js_code = f'''
            (function() {{
                let chart = null;
                try {{
                    const vueComponent = getElement({self.chart.id});
                    chart = vueComponent && vueComponent.chart;
                }} catch(e) {{}}
                if (!chart) return;

                const nodesById = {nodes_json};
                const layout = {{}};
                try {{
                    chart.getModel().getSeriesByIndex(0).getGraph().eachNode(function(node) {{
                        const l = node.getLayout();
                        if (l && !isNaN(l[0]) && !isNaN(l[1])) layout[node.id] = l;
                    }});
                }} catch(e) {{}}

                // Existing nodes keep their live position; new nodes start where they were created
                const data = Object.values(nodesById).map(function(item) {{
                    const l = layout[item.id];
                    return l ? Object.assign({{}}, item, {{ x: l[0], y: l[1] }}) : item;
                }});

                chart.setOption({{
                    series: [{{
                        data: data,
                        links: {links_json},
                        draggable: {draggable}
                    }}]
                }}, {{ notMerge: false, lazyUpdate: true }});
            }})();
        '''
        ui.run_javascript(js_code)
        logger.debug(f"Redraw: {len(series['data'])} nodes, {len(series['links'])} links, "
                     f"mode={session.mode.value}")

    def set_node_drag(self, enabled: bool) -> None:
        series = self.chart.options.get('series') or [{}]
        series[0]['draggable'] = enabled
        flag = 'true' if enabled else 'false'
        ui.run_javascript(f'''
            (function() {{
                try {{
                    const chart = getElement({self.chart.id}).chart;
                    if (chart) chart.setOption({{ series: [{{ draggable: {flag} }}] }});
                }} catch(e) {{}}
            }})();
        ''')

    def show_drag_indicator(self, start: Point, end: Point) -> None:
        self.overlay.show(start, end)

    def hide_drag_indicator(self) -> None:
        self.overlay.hide()
