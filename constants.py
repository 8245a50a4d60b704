# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They belong to the rendering shell: window size, colors and the geometry
of the field arrows. Anything that changes the physics lives in
config.json instead.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (WINDOW_WIDTH x WINDOW_HEIGHT).
FULLSCREEN = False
WINDOW_WIDTH = 800
WINDOW_HEIGHT = 600
WINDOW_TITLE = "Vector Field Generator"
FPS = 60
BACKGROUND_COLOR = (245, 245, 245) # Ray White
TEXT_COLOR = (80, 80, 80) # Dark Gray
FPS_TEXT_COLOR = (0, 158, 47) # Lime
DEFAULT_PARTICLE_RADIUS = 5
DEFAULT_PARTICLE_COLOR = (230, 41, 55) # Red

# --- Field Overlay ---
# Number of arrows across and down the display.
DEFAULT_FIELD_GRID_WIDTH = 60
DEFAULT_FIELD_GRID_HEIGHT = 45
# Every arrow is drawn at this length; only its direction carries information.
FIELD_VECTOR_LENGTH = 15.0
FIELD_ARROW_SIZE = 6.0
# Half-angle between the arrowhead strokes, in radians.
FIELD_ARROW_ANGLE = 0.4
FIELD_COLOR = (0, 121, 241) # Blue

# Alpha for the parameter panel background
UI_BACKGROUND_ALPHA = 160
