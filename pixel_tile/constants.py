# pixel_tile/constants.py
"""
Tunables used across the project.

- Grid geometry (GRID_SIZE, PREVIEW_SCALE)
- Transparency threshold and the allowed colour counts
- Palette extraction knobs (near-black/white bounds, push amounts, diversity)
- Editor history bound
"""
from __future__ import annotations

from typing import Tuple

# =========================
# Grid
# =========================

# Output tile is always GRID_SIZE x GRID_SIZE cells.
GRID_SIZE = 16

# Nearest-neighbour magnification for on-screen previews (16 -> 256 px).
PREVIEW_SCALE = 16

# Pixels with alpha below this are treated as transparent during extraction.
ALPHA_THRESHOLD = 128

# Colour counts a caller may request.
COLOUR_COUNTS: Tuple[int, ...] = (2, 4, 8, 16, 32, 64, 128, 256)

DEFAULT_COLOUR_COUNT = 8

# =========================
# Palette extraction
# =========================

BLACK: Tuple[int, int, int] = (0, 0, 0)
WHITE: Tuple[int, int, int] = (255, 255, 255)

# A colour counts as near black when every channel is below this.
NEAR_BLACK_MAX = 30
# A colour counts as near white when every channel is above this.
NEAR_WHITE_MIN = 225

# Palettes up to this size always carry a near-black and a near-white entry.
CONTRAST_GUARANTEE_MAX_K = 16

# Two-colour mode: how far the anchors get pushed towards black / white.
TWO_COLOUR_PUSH = 60
TWO_COLOUR_DARK_MAX = 60
TWO_COLOUR_LIGHT_MIN = 200

# Frequency mode: quantisation step for 64 <= K < 256.
MEDIUM_QUANT_STEP = 16

# Adaptive mode (K >= 256).
ADAPTIVE_TARGET = 256
ADAPTIVE_SAMPLE_STRIDE = 4
ADAPTIVE_MIN_LEVELS = 6
ADAPTIVE_LEVEL_SPAN = 42
ADAPTIVE_FREQUENT_SHARE = 0.67
ADAPTIVE_MIN_DISTANCE = 0.05
ADAPTIVE_MIN_GRAY_STEP = 5

# =========================
# Quantisation
# =========================

# Palettes at least this large are applied with Floyd-Steinberg diffusion.
DITHER_MIN_PALETTE = 128

# Channel weights for the nearest-colour metric (green weighted highest).
RGB_WEIGHTS: Tuple[float, float, float] = (0.3, 0.59, 0.11)

# =========================
# Editor
# =========================

# Maximum number of snapshots kept in the undo/redo history.
HISTORY_LIMIT = 100
