"""
Camera interfaces.
"""

from .camera import FrameType, CaptureCamera, OpenCVCamera

__all__ = [
    'FrameType',
    'CaptureCamera',
    'OpenCVCamera'
]
