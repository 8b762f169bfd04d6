from __future__ import annotations

"""Constants for the scoreboard window.

The default window keeps the proportions of a watch face so the layout stays
readable when shrunk. Layout code works in fractions of the window size.
"""

# Colors (R,G,B)
BG_COLOR = (0, 0, 0)
CHIP_COLOR = (40, 40, 44)
CHIP_SERVER_COLOR = (36, 90, 66)
TEXT_COLOR = (245, 245, 245)
MUTED_TEXT_COLOR = (150, 150, 150)
SERVER_DOT_COLOR = (242, 214, 0)
PLAYER_A_COLOR = (66, 135, 245)  # blue for Player A
PLAYER_B_COLOR = (236, 88, 64)   # red for Player B
BUTTON_COLOR = (58, 58, 64)
BUTTON_DISABLED_COLOR = (30, 30, 32)
RESET_COLOR = (150, 40, 32)

# Rendering
DEFAULT_WINDOW = (396, 484)
MIN_WINDOW = (198, 242)
TARGET_FPS = 30

# Fraction of the window height taken by each band, top to bottom
NAME_BAND = 0.14
POINT_BAND = 0.30
METRIC_BAND = 0.22
BUTTON_BAND = 0.34

PADDING_PX = 8
