# Log-domain floor: values <= 0 on a log10 axis are clamped to this
LOG_DOMAIN_EPS = 1e-12

# Background image scale bounds
SCALE_MIN = 0.05
SCALE_MAX = 50.0

# Wheel zoom multipliers
WHEEL_ZOOM_IN = 1.05
WHEEL_ZOOM_OUT = 0.95

# Resize divisor guard (anchor fraction at 0 or 1)
RESIZE_DIVISOR_EPS = 1e-6

# Zero-width segment guard for interpolation
SEGMENT_EPS = 1e-12

# Pointer tolerances in surface pixels
HANDLE_HIT_PX = 12
IMAGE_HIT_PAD_PX = 14
PLOT_HIT_PAD_PX = 14

# Arrow-key nudge steps in surface pixels
NUDGE_STEP_PX = 1
NUDGE_STEP_LARGE_PX = 10

# Display smoothing
DEFAULT_SMOOTH_ALPHA = 0.5
SMOOTH_SAMPLES_PER_SEGMENT = 16

# Default axes on a fresh document
DEFAULT_X_MIN = 10.0
DEFAULT_X_MAX = 1_000_000.0
DEFAULT_X_LOG = True
DEFAULT_Y_MIN = 0.0001
DEFAULT_Y_MAX = 1_000_000.0
DEFAULT_Y_LOG = True

# Default series (name, color)
DEFAULT_SERIES = (
    ("A", "#2563EB"),
    ("B", "#10B981"),
)

# Background slots "A" and "B"
BACKGROUND_SLOTS = 2
DEFAULT_OPACITY = (1.0, 0.6)

# Preset format marker
PRESET_VERSION = 1
SHARE_FRAGMENT_PREFIX = "#s="
