"""
graycapture core module - base definitions that do not depend on other modules.
"""

from .constants import (
    DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT,
    DEFAULT_MAX_BRIGHTNESS, DEFAULT_FLAT_FIELD_BRIGHTNESS,
    DEFAULT_LOW_BIT, DEFAULT_HIGH_BIT, GRAY_WORD_BITS
)

from .events import EventType, EventEmitter
from .exceptions import (
    GrayCaptureException, ConfigurationError, InvalidConfigurationError,
    CaptureError, CaptureBusyError, UnsupportedFrameTypeError,
    ExposureError, PrematureCompileError,
    CameraError, CameraCaptureError, ProjectorError, PatternError
)
from .logging_config import setup_logging, get_logger, debug_mode

__all__ = [
    # Constants
    'DEFAULT_PATTERN_WIDTH', 'DEFAULT_PATTERN_HEIGHT',
    'DEFAULT_MAX_BRIGHTNESS', 'DEFAULT_FLAT_FIELD_BRIGHTNESS',
    'DEFAULT_LOW_BIT', 'DEFAULT_HIGH_BIT', 'GRAY_WORD_BITS',

    # Events
    'EventType', 'EventEmitter',

    # Exceptions
    'GrayCaptureException', 'ConfigurationError', 'InvalidConfigurationError',
    'CaptureError', 'CaptureBusyError', 'UnsupportedFrameTypeError',
    'ExposureError', 'PrematureCompileError',
    'CameraError', 'CameraCaptureError', 'ProjectorError', 'PatternError',

    # Logging
    'setup_logging', 'get_logger', 'debug_mode'
]
