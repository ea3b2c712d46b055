"""
Custom exceptions for graycapture.

This module defines the exceptions raised by the capture pipeline, the
pattern codec and the device adapters.
"""

from typing import Optional, Any

from .constants import (
    ERROR_CAPTURE_BUSY, ERROR_UNSUPPORTED_FRAME_TYPE, ERROR_PREMATURE_COMPILE
)


class GrayCaptureException(Exception):
    """Base exception for all graycapture errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize graycapture exception.

        Args:
            message: Error message
            details: Optional additional details
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(GrayCaptureException):
    """Base exception for configuration errors."""
    pass


class InvalidConfigurationError(ConfigurationError, ValueError):
    """Raised when a configuration value (e.g. a bit range) is invalid."""

    def __init__(self, parameter: str, reason: str):
        message = f"Invalid configuration for '{parameter}': {reason}"
        super().__init__(message, details={'parameter': parameter, 'reason': reason})


class CaptureError(GrayCaptureException):
    """Base exception for structured-light capture errors."""
    pass


class CaptureBusyError(CaptureError):
    """Raised when a capture is requested while another one is in flight."""

    def __init__(self, session_id: str):
        message = ERROR_CAPTURE_BUSY.format(session_id)
        super().__init__(message, details={'session_id': session_id})


class UnsupportedFrameTypeError(CaptureError):
    """Raised when a frame type the camera cannot produce is requested."""

    def __init__(self, frame_type: Any):
        message = ERROR_UNSUPPORTED_FRAME_TYPE.format(frame_type)
        super().__init__(message, details={'frame_type': frame_type})


class ExposureError(CaptureError):
    """Raised when an exposure cannot be stored (wrong bit, wrong shape)."""
    pass


class PrematureCompileError(CaptureError):
    """Raised when compile() is called before every bit plane is stored."""

    def __init__(self, stored: int, required: int):
        message = ERROR_PREMATURE_COMPILE.format(stored, required)
        super().__init__(message, details={'stored': stored, 'required': required})


class CameraError(GrayCaptureException):
    """Base exception for camera-related errors."""
    pass


class CameraCaptureError(CameraError):
    """Raised when camera capture fails."""

    def __init__(self, camera_id: str, reason: str):
        message = f"Failed to capture from camera '{camera_id}': {reason}"
        super().__init__(message, details={'camera_id': camera_id, 'reason': reason})


class ProjectorError(GrayCaptureException):
    """Base exception for projector-related errors."""
    pass


class PatternError(ProjectorError):
    """Raised when pattern generation or projection fails."""

    def __init__(self, pattern_type: str, reason: str):
        message = f"Pattern '{pattern_type}' error: {reason}"
        super().__init__(message, details={'pattern_type': pattern_type, 'reason': reason})
