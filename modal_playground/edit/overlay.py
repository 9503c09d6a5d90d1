"""
Drag Overlay - SVG layer for the link drag indicator, plus the pointer bridge.

The overlay sits on top of the ECharts canvas and draws the dashed line from
the armed node to the pointer. Moving an SVG line is much faster than
pushing new chart options on every mouse move.

The bridge hooks the chart's zrender mouse events and emits them to Python
as POINTER_EVENT with the pointer in screen pixels, the pointer in data
coordinates and the current node positions queried from ECharts, so hit
testing accounts for the live force layout.
"""

from typing import Optional, Tuple

from nicegui import ui

from modal_playground.edit.constants import POINTER_EVENT

Point = Tuple[float, float]


class DragOverlay:
    """
    Renders the drag indicator as an HTML overlay.

    The overlay follows the chart's bounding rect, so coordinates passed to
    show() are chart-relative pixels, the same ones the bridge reports.
    """

    def __init__(self):
        """Initialize overlay - call setup() after chart is created."""
        self._overlay_id = 'drag-overlay-container'
        self._line_id = 'drag-indicator'
        self._chart_element_id: Optional[int] = None
        self._is_setup = False
        self._visible = False

    @property
    def visible(self) -> bool:
        return self._visible

    def setup(self, chart_element_id: int):
        """Create the overlay DOM elements and attach the bridge. Call once after chart exists."""
        if self._is_setup:
            return

        self._chart_element_id = chart_element_id

        ui.add_body_html(f'''
            <div id="{self._overlay_id}" style="
                position: fixed;
                top: 0; left: 0;
                width: 0; height: 0;
                pointer-events: none;
                z-index: 100;
            ">
                <svg style="position: absolute; top: 0; left: 0; width: 100%; height: 100%; overflow: visible;">
                    <line id="{self._line_id}"
                        x1="0" y1="0" x2="0" y2="0"
                        stroke="#000000" stroke-width="4" stroke-dasharray="10,2"
                        opacity="0" />
                </svg>
            </div>

            <script>
                (function() {{
                    const chartId = {chart_element_id};
                    const st = {{ pressed: false, frame: null, lastMove: null }};

                    function getChart() {{
                        try {{
                            const vueComponent = getElement(chartId);
                            return vueComponent && vueComponent.chart ? vueComponent.chart : null;
                        }} catch(e) {{
                            return null;
                        }}
                    }}

                    function localPoint(ev, chart) {{
                        const rect = chart.getDom().getBoundingClientRect();
                        const x = ev.clientX - rect.left, y = ev.clientY - rect.top;
                        return [x, y, x >= 0 && y >= 0 && x <= rect.width && y <= rect.height];
                    }}

                    function snapshot(chart) {{
                        const positions = {{}}, layout = {{}};
                        try {{
                            const graph = chart.getModel().getSeriesByIndex(0).getGraph();
                            graph.eachNode(function(node) {{
                                const l = node.getLayout();
                                if (!l || isNaN(l[0]) || isNaN(l[1])) return;
                                const px = chart.convertToPixel({{seriesIndex: 0}}, [l[0], l[1]]);
                                if (px && !isNaN(px[0]) && !isNaN(px[1])) {{
                                    positions[node.id] = [px[0], px[1]];
                                }}
                                layout[node.id] = [l[0], l[1]];
                            }});
                        }} catch(e) {{}}
                        return {{ positions: positions, layout: layout }};
                    }}

                    function send(kind, x, y, inside, withNodes) {{
                        const chart = getChart();
                        if (!chart) return;
                        let data = null;
                        try {{
                            data = chart.convertFromPixel({{seriesIndex: 0}}, [x, y]);
                        }} catch(e) {{}}
                        const payload = {{ kind: kind, x: x, y: y, inside: inside, data: data }};
                        if (withNodes) {{
                            const snap = snapshot(chart);
                            payload.positions = snap.positions;
                            payload.layout = snap.layout;
                        }}
                        emitEvent('{POINTER_EVENT}', payload);
                    }}

                    window.kripkeOverlay = {{
                        place: function() {{
                            const chart = getChart();
                            const overlay = document.getElementById('{self._overlay_id}');
                            if (!chart || !overlay) return;
                            const rect = chart.getDom().getBoundingClientRect();
                            overlay.style.left = rect.left + 'px';
                            overlay.style.top = rect.top + 'px';
                            overlay.style.width = rect.width + 'px';
                            overlay.style.height = rect.height + 'px';
                        }},
                        show: function(x1, y1, x2, y2) {{
                            this.place();
                            const line = document.getElementById('{self._line_id}');
                            if (!line) return;
                            line.setAttribute('x1', x1);
                            line.setAttribute('y1', y1);
                            line.setAttribute('x2', x2);
                            line.setAttribute('y2', y2);
                            line.setAttribute('opacity', '1');
                        }},
                        hide: function() {{
                            const line = document.getElementById('{self._line_id}');
                            if (line) line.setAttribute('opacity', '0');
                        }}
                    }};

                    function attach() {{
                        const chart = getChart();
                        if (!chart) {{
                            setTimeout(attach, 100);
                            return;
                        }}
                        chart.getZr().on('mousedown', function(e) {{
                            if (e.event && e.event.button !== undefined && e.event.button !== 0) return;
                            st.pressed = true;
                            send('down', e.offsetX, e.offsetY, true, true);
                        }});
                        // Moves and releases are tracked on the window so a drag can leave the canvas
                        window.addEventListener('mousemove', function(ev) {{
                            if (!st.pressed) return;
                            st.lastMove = ev;
                            if (st.frame) return;
                            st.frame = requestAnimationFrame(function() {{
                                st.frame = null;
                                const p = localPoint(st.lastMove, chart);
                                send('move', p[0], p[1], p[2], false);
                            }});
                        }});
                        window.addEventListener('mouseup', function(ev) {{
                            if (!st.pressed) return;
                            st.pressed = false;
                            const p = localPoint(ev, chart);
                            send('up', p[0], p[1], p[2], true);
                        }});
                    }}
                    attach();
                }})();
            </script>
        ''')

        self._is_setup = True

    def show(self, start: Point, end: Point):
        """Draw the indicator from start to end (chart pixels). Called on every move - must be fast!"""
        self._visible = True
        (x1, y1), (x2, y2) = start, end
        ui.run_javascript(
            f'if (window.kripkeOverlay) window.kripkeOverlay.show({x1:.1f}, {y1:.1f}, {x2:.1f}, {y2:.1f});'
        )

    def hide(self):
        """Hide the indicator."""
        self._visible = False
        ui.run_javascript('if (window.kripkeOverlay) window.kripkeOverlay.hide();')
