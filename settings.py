"""
Orbit Aim - Settings & Constants
All tunable game parameters in one place.
"""
import math

# ── Display ──────────────────────────────────────────────
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720
FPS = 60
WINDOW_TITLE = "Orbit Aim"
FOV_DEG = 45.0                              # vertical field of view
FOV_RAD = math.radians(FOV_DEG)
# Focal length for projection (pixels per unit at z=1)
FOCAL = (SCREEN_HEIGHT / 2.0) / math.tan(FOV_RAD / 2.0)
NEAR_CLIP = 0.1

# ── Camera ───────────────────────────────────────────────
CAMERA_START_POS = (0.0, 0.0, 0.0)
PITCH_RATE      = 0.01                      # radians per frame
ROLL_RATE       = 0.02                      # radians per frame
DEBUG_MOVE_RATE = 0.01                      # units per frame
FIXED_DT        = 1.0 / 64.0                # orientation renormalise tick (s)
MAX_FRAME_DT    = 0.05                      # clamp to avoid spiral of death

# ── Targets ──────────────────────────────────────────────
MAX_RADIUS              = 20.0              # aim ray length
TARGET_RADIUS           = 1.0
TARGET_DISTANCE         = 8.0               # sphere shell radius
DEADZONE_RADIUS_SQUARED = 4.0
DEADZONE_ADJ_THETA      = -0.02             # radians, single nudge

# ── Colors ───────────────────────────────────────────────
COL_BACKGROUND  = (18, 20, 28)
COL_BRIGHT      = (250, 170, 40)
COL_FADED       = (95, 90, 80)
COL_OUTLINE     = (30, 30, 30)
COL_CROSSHAIR   = (230, 230, 230)
COL_POINTER     = (0, 0, 0)
COL_HUD_TEXT    = (200, 200, 200)
COL_AXIS_X      = (220, 60, 60)
COL_AXIS_Y      = (60, 200, 60)
COL_AXIS_Z      = (70, 110, 230)
COL_HIT         = (255, 240, 180)

# ── Gizmos ───────────────────────────────────────────────
AXES_LENGTH          = 2.0                  # world units
CROSSHAIR_RADIUS     = 0.2                  # world units, drawn at crosshair depth
CROSSHAIR_DEPTH      = 4.0
CROSSHAIR_SWEEP      = math.pi * 3.0 / 4.0  # arc angle
POINTER_RIGHT_SLERP  = 0.05                 # pointer base offset from forward
POINTER_DOWN_SLERP   = 0.03

# ── Effects ──────────────────────────────────────────────
EFFECT_DURATION = 0.6                       # seconds
EFFECT_BASE_RADIUS = 1.6                    # world units at full expansion

# ── Logging ──────────────────────────────────────────────
LOG_LEVEL = "INFO"

# ── Input ────────────────────────────────────────────────
# Logical actions consumed by the simulation.
PITCH_UP    = "pitch_up"
PITCH_DOWN  = "pitch_down"
ROLL_LEFT   = "roll_left"
ROLL_RIGHT  = "roll_right"
MOVE_LEFT   = "move_left"
MOVE_RIGHT  = "move_right"
MOVE_UP     = "move_up"
MOVE_DOWN   = "move_down"
MOVE_FWD    = "move_forward"
MOVE_BACK   = "move_back"

# pygame key names, resolved with pygame.key.key_code at start-up
KEY_BINDINGS = {
    PITCH_UP:   "up",
    PITCH_DOWN: "down",
    ROLL_LEFT:  "left",
    ROLL_RIGHT: "right",
    MOVE_LEFT:  "a",
    MOVE_RIGHT: "t",
    MOVE_UP:    "s",
    MOVE_DOWN:  "r",
    MOVE_FWD:   "c",
    MOVE_BACK:  "d",
}
