"""
Structured-light capture: configuration, bit-plane accumulation and the
capture state machine.
"""

from .capture_config import BitRange, CaptureConfig, CaptureQuality
from .accumulator import BitPlaneAccumulator, RawExposure, to_intensity
from .binary_capture import (
    StructuredLightCapture,
    CaptureState,
    CaptureSession,
    DecodedFrame
)
from .preview import decoded_to_preview

__all__ = [
    'BitRange',
    'CaptureConfig',
    'CaptureQuality',
    'BitPlaneAccumulator',
    'RawExposure',
    'to_intensity',
    'StructuredLightCapture',
    'CaptureState',
    'CaptureSession',
    'DecodedFrame',
    'decoded_to_preview'
]
