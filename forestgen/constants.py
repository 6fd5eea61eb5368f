"""Configuration constants, paths, and environment overrides."""

import os
import pathlib

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure base paths
BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()
OUTPUT_DIR = pathlib.Path(
    os.environ.get("FORESTGEN_OUTPUT_DIR", str(BASE_DIR / "output")))

LOG_LEVEL = os.environ.get("FORESTGEN_LOG_LEVEL", "INFO").strip().upper()
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# ── Placement ────────────────────────────────────────────────────────
# Rejection attempts allowed per requested tree.  Heuristic only: dense
# requests (small radius, large min distance) under-fill at this cap.
ATTEMPT_FACTOR = int(os.environ.get("FORESTGEN_ATTEMPT_FACTOR", "200"))

# ── Tree geometry (local space, before tree scale) ───────────────────
TRUNK_HEIGHT = 1.8          # trunk base at y=0, top at y=1.8
TRUNK_RADIUS_TOP = 0.12
TRUNK_RADIUS_BOTTOM = 0.18
TRUNK_SIDES = 8
CANOPY_GAP = 0.12           # leaves never intersect the trunk top
CANOPY_BASE_HEIGHT = TRUNK_HEIGHT + CANOPY_GAP
LEAF_WIDTH = 0.5
LEAF_HEIGHT = 0.65
CROWN_RADIUS = 1.05
CROWN_OFFSET = 0.35         # crown centre above trunk top

# ── Canopy sampling ──────────────────────────────────────────────────
LEAF_HEIGHT_RANGE = 0.6
LEAF_HEIGHT_MIN = 0.1
LEAF_RADIUS_SCALE = 0.9
LEAF_SPREAD_MIN = 0.6
LEAF_SPREAD_RANGE = 1.2
LEAF_TILT_JITTER = 0.6
LEAF_SCALE_MIN = 0.6
LEAF_SCALE_RANGE = 0.9
LEAF_HUE = 0.33             # green
LEAF_HUE_JITTER = 0.05
LEAF_SATURATION = 0.6
LEAF_LIGHTNESS = 0.5
LEAF_LIGHTNESS_RANGE = 0.1

# ── Default scene parameters ─────────────────────────────────────────
DEFAULT_SEED = 12345
DEFAULT_TREE_COUNT = 20
DEFAULT_RADIUS = 55.0
DEFAULT_MIN_DISTANCE = 3.5
DEFAULT_TREE_SCALE = 1.2
DEFAULT_LEAF_COUNT = 80

# River bed running along x; nothing may spawn inside it.
RIVER_ZONE = {'x': 0.0, 'z': -10.0, 'half_length': 90.0, 'half_width': 5.0}

# Solid PBR colours per layer (RGBA, 0-1)
LAYER_COLORS = {
    'tree_trunk': [0.42, 0.24, 0.10, 1.0],   # bark brown
    'tree_crown': [0.16, 0.65, 0.36, 1.0],   # foliage green
    'ground':     [0.30, 0.45, 0.22, 1.0],   # grass
    'exclusion':  [0.25, 0.52, 0.85, 1.0],   # river blue
}
