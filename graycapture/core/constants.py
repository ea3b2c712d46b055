"""
Constants shared by the capture, projector and pattern modules.
"""

# ==================== PATTERN CONSTANTS ====================
# Projector render size used when nothing else is configured
DEFAULT_PATTERN_WIDTH = 640
DEFAULT_PATTERN_HEIGHT = 480

# Brightness (0-255)
MAX_BRIGHTNESS = 255
DEFAULT_MAX_BRIGHTNESS = 255
DEFAULT_FLAT_FIELD_BRIGHTNESS = 150

# Sinusoid defaults
DEFAULT_SINUSOID_PERIOD = 32
DEFAULT_SINUSOID_SHIFT = 0.0

# ==================== GRAY CODE CONSTANTS ====================
# Word size used by the Gray -> binary XOR fold
GRAY_WORD_BITS = 32

# Default bit range (8 bits = 256 distinguishable columns)
DEFAULT_LOW_BIT = 0
DEFAULT_HIGH_BIT = 7

# Bit ranges wider than this produce uint32 decoded frames
UINT16_MAX_BITS = 16

# ==================== CAPTURE CONSTANTS ====================
# Seconds to wait after a pattern change before grabbing a frame
DEFAULT_SETTLE_TIME = 0.0
# Frames discarded from the OpenCV capture buffer before the real exposure
DEFAULT_FLUSH_FRAMES = 2
DEFAULT_CAMERA_INDEX = 0
# Horizontal offset of the projector in the virtual desktop
DEFAULT_SCREEN_OFFSET_X = 0
DEFAULT_SCREEN_OFFSET_Y = 0
# Milliseconds the projection window gets to repaint
PROJECTION_WAIT_MS = 50

PROJECTION_WINDOW_NAME = "graycapture projection"

# ==================== QUALITY PRESETS ====================
QUALITY_PRESETS = {
    'coarse': {
        'low_bit': 0,
        'high_bit': 5,
    },
    'standard': {
        'low_bit': 0,
        'high_bit': 7,
    },
    'fine': {
        'low_bit': 0,
        'high_bit': 9,
    }
}

# ==================== LOGGING CONSTANTS ====================
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEBUG_DIR_PREFIX = 'graycapture_debug'

# ==================== ERROR MESSAGES ====================
ERROR_INVALID_BIT_RANGE = "Invalid bit range: low bit {} must be below high bit {}"
ERROR_CAPTURE_BUSY = "A capture is already in progress (session {})"
ERROR_UNSUPPORTED_FRAME_TYPE = "Frame type {} is not supported by this camera"
ERROR_PREMATURE_COMPILE = "Cannot compile: {} of {} exposures stored"
