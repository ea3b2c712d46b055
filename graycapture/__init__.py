"""
graycapture - structured-light Gray-code capture.

A projector shows Gray-code bit planes, a camera takes one exposure per
plane, and the exposures are decoded into a per-pixel projector column index.

Quick start:
    from graycapture import (OpenCVCamera, OpenCVProjectionSurface,
                             PatternSequencer, StructuredLightCapture, FrameType)
    sequencer = PatternSequencer(OpenCVProjectionSurface(screen_offset=(1920, 0)))
    capture = StructuredLightCapture(OpenCVCamera(0), sequencer)
    capture.on(EventType.DECODED_FRAME, handle_frame)
    capture.request_frame(FrameType.BINARY)
"""

# Import version from package metadata to maintain single source of truth
try:
    import importlib.metadata
    __version__ = importlib.metadata.version("graycapture")
except (ImportError, importlib.metadata.PackageNotFoundError):
    # Fallback for development checkouts
    __version__ = "0.1.0"

from .core.events import EventType, EventEmitter
from .core.exceptions import GrayCaptureException
from .patterns import Pattern, PatternKind, binary_to_gray, gray_to_binary
from .projector import ProjectionSurface, OpenCVProjectionSurface, PatternSequencer
from .camera import FrameType, CaptureCamera, OpenCVCamera
from .scanning import (
    BitRange,
    CaptureConfig,
    CaptureQuality,
    BitPlaneAccumulator,
    RawExposure,
    StructuredLightCapture,
    CaptureState,
    DecodedFrame
)

__all__ = [
    '__version__',

    # Core types
    'EventType',
    'EventEmitter',
    'GrayCaptureException',

    # Patterns
    'Pattern',
    'PatternKind',
    'binary_to_gray',
    'gray_to_binary',

    # Devices
    'ProjectionSurface',
    'OpenCVProjectionSurface',
    'PatternSequencer',
    'FrameType',
    'CaptureCamera',
    'OpenCVCamera',

    # Capture
    'BitRange',
    'CaptureConfig',
    'CaptureQuality',
    'BitPlaneAccumulator',
    'RawExposure',
    'StructuredLightCapture',
    'CaptureState',
    'DecodedFrame'
]
