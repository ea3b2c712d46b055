"""
Camera capability interface and the OpenCV camera.

Every camera, including the structured-light capture itself, exposes the same
two-part interface: request_frame(frame_type) asks for one frame, and the frame
is delivered later through EventType.FRAME_READY.
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

import cv2
import numpy as np

from graycapture.core.constants import (
    DEFAULT_CAMERA_INDEX, DEFAULT_SETTLE_TIME, DEFAULT_FLUSH_FRAMES
)
from graycapture.core.events import EventEmitter, EventType
from graycapture.core.exceptions import CameraError, CameraCaptureError

logger = logging.getLogger(__name__)


class FrameType(Enum):
    """Kinds of frame a camera can be asked for."""
    COLOR = "color"
    GRAYSCALE = "grayscale"
    BINARY = "binary"  # decoded structured-light frame


class CaptureCamera(EventEmitter, ABC):
    """
    Abstract camera.

    Events emitted:
        FRAME_READY(image): a requested frame is available
    """

    camera_id = "camera"

    @abstractmethod
    def request_frame(self, frame_type: FrameType) -> bool:
        """
        Ask for one frame of `frame_type`.

        Returns:
            True if the camera will emit FRAME_READY for this request
        """

    def _deliver_frame(self, image: np.ndarray) -> None:
        self.emit(EventType.FRAME_READY, image)


class OpenCVCamera(CaptureCamera):
    """
    Camera backed by cv2.VideoCapture.

    Frames are grabbed synchronously inside request_frame(), so FRAME_READY
    is emitted before the call returns.
    """

    def __init__(self, source: Union[int, str] = DEFAULT_CAMERA_INDEX,
                 settle_time: float = DEFAULT_SETTLE_TIME,
                 flush_frames: int = DEFAULT_FLUSH_FRAMES,
                 resolution: Optional[tuple] = None):
        """
        Args:
            source: Device index or video path/URL
            settle_time: Seconds to wait before grabbing (lets the projector settle)
            flush_frames: Buffered frames to discard so the exposure is fresh
            resolution: Optional (width, height) to request from the device
        """
        super().__init__()
        self.source = source
        self.camera_id = str(source)
        self.settle_time = settle_time
        self.flush_frames = flush_frames
        self.resolution = resolution
        self.cap: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        self.cap = cv2.VideoCapture(self.source)
        if not self.cap.isOpened():
            self.cap = None
            raise CameraError(f"Could not open camera {self.source}")

        if self.resolution:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
        logger.info(f"Opened camera {self.source}")

    def close(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Closed camera {self.source}")

    def grab(self, frame_type: FrameType = FrameType.GRAYSCALE) -> np.ndarray:
        """
        Grab one frame now.

        Raises:
            CameraCaptureError: if the device returns no frame
        """
        if self.cap is None:
            self.open()

        if self.settle_time > 0:
            time.sleep(self.settle_time)
        for _ in range(self.flush_frames):
            self.cap.grab()

        ok, frame = self.cap.read()
        if not ok or frame is None:
            raise CameraCaptureError(self.camera_id, "no frame returned")

        if frame_type == FrameType.GRAYSCALE and frame.ndim == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        return frame

    def request_frame(self, frame_type: FrameType) -> bool:
        if frame_type not in (FrameType.COLOR, FrameType.GRAYSCALE):
            logger.warning(f"Camera {self.camera_id} cannot produce {frame_type.value} frames")
            return False

        try:
            frame = self.grab(frame_type)
        except CameraError as e:
            logger.error(f"Capture failed: {e}")
            return False

        self._deliver_frame(frame)
        return True
