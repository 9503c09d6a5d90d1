"""
Shared constants for the editing system.

These values are used by both Python (hit testing, chart options) and the
JavaScript pointer bridge. Keep them in sync!
"""

# Rendered node radius in pixels (ECharts symbolSize is the diameter)
NODE_RADIUS = 12

# Extra slack around a node that still counts as a hit
NODE_HIT_SLACK = 4

# Distance in pixels to detect a pointer over a link
LINK_HIT_TOLERANCE = 8

# Force layout: edge length and node repulsion
LINK_DISTANCE = 150
REPULSION = 500

# Chart canvas size
CHART_WIDTH = 640
CHART_HEIGHT = 540

# Keys accepted while a node or link is selected
KEY_DELETE = 'Delete'
KEY_BOTH = 'b'
KEY_LEFT = 'l'
KEY_RIGHT = 'r'

# Custom event name emitted by the pointer bridge
POINTER_EVENT = 'kripke_pointer'
