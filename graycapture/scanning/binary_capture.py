"""
Structured-light binary capture.

StructuredLightCapture is a camera in its own right: ask it for a
FrameType.BINARY frame and it drives a PatternSequencer and an ordinary
capturing camera through every Gray-code bit plane (normal, then inverted),
then emits one decoded frame of projector column indices.

Expect this to be slow. Every bit plane costs a projector update plus a full
camera exposure, so a frame takes tens of seconds on typical hardware.

The capture is single-threaded and driven entirely by notifications:

    request_frame  -> sequencer.request((low, normal))
    PATTERN_PROJECTED matching the current step -> hold the pattern on screen,
        camera.request_frame()
    camera FRAME_READY -> store exposure, step the walk, request the next
        pattern, release the held one
    last exposure stored -> compile, emit FRAME_READY and DECODED_FRAME

Notifications that do not match the step the capture is waiting for (another
capture's pattern on a shared sequencer) are ignored. A frame the camera still
owes an aborted session is dropped when it arrives.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from graycapture.camera.camera import CaptureCamera, FrameType
from graycapture.core.events import EventType
from graycapture.core.exceptions import (
    CaptureError, CaptureBusyError, UnsupportedFrameTypeError,
    CameraError, ExposureError, InvalidConfigurationError
)
from graycapture.patterns.pattern import Pattern
from graycapture.projector.sequencer import PatternSequencer
from .accumulator import BitPlaneAccumulator, RawExposure, Slot, to_intensity
from .capture_config import BitRange, CaptureConfig
from .preview import decoded_to_preview

logger = logging.getLogger(__name__)


class CaptureState(Enum):
    """States of a structured-light capture."""
    IDLE = "idle"
    AWAITING_PROJECTION = "awaiting_projection"
    AWAITING_EXPOSURE = "awaiting_exposure"
    COMPILING = "compiling"
    DONE = "done"


@dataclass
class CaptureSession:
    """Mutable state of one in-flight capture."""
    bit_range: BitRange
    frame_type: FrameType
    accumulator: BitPlaneAccumulator
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    current_bit: int = -1
    current_inverted: bool = False
    completed: bool = False
    started_at: float = field(default_factory=time.time)
    exposures_requested: int = 0
    exposure_pending: bool = False
    patterns_requested: List[Slot] = field(default_factory=list)

    def __post_init__(self):
        if self.current_bit < 0:
            self.current_bit = self.bit_range.low_bit

    @property
    def current_slot(self) -> Slot:
        return (self.current_bit, self.current_inverted)

    def advance_walk(self) -> bool:
        """
        Step to the next (bit, polarity): inverted after normal, then the next bit.

        Returns:
            False once the walk has gone past the high bit
        """
        if not self.current_inverted:
            self.current_inverted = True
        else:
            self.current_inverted = False
            self.current_bit += 1
        return self.current_bit <= self.bit_range.high_bit


@dataclass
class DecodedFrame:
    """Result of a completed capture."""
    image: np.ndarray
    bit_range: BitRange
    session_id: str
    exposure_count: int
    timestamp: float = field(default_factory=time.time)

    @property
    def num_columns(self) -> int:
        return self.bit_range.num_columns


class StructuredLightCapture(CaptureCamera):
    """
    A "binary camera" that builds a decoded frame from a capturing camera and
    a pattern sequencer.

    Several captures may share one sequencer; each needs its own camera.

    Events emitted:
        CAPTURE_STARTED(session_id)
        INTERMEDIATE_FRAME(image): advisory preview after each exposure
        FRAME_READY(image): decoded column-index image
        DECODED_FRAME(DecodedFrame): the same result with metadata
        DUPLICATE_EXPOSURE(bit, inverted)
        CAPTURE_ABORTED(session_id, reason)
        CONFIG_CHANGED(config)
        ERROR(exception)
    """

    camera_id = "structured_light"

    def __init__(self,
                 camera: Optional[CaptureCamera] = None,
                 sequencer: Optional[PatternSequencer] = None,
                 config: Optional[CaptureConfig] = None):
        super().__init__()
        self.config = config or CaptureConfig()
        self.camera: Optional[CaptureCamera] = None
        self.sequencer: Optional[PatternSequencer] = None
        self._state = CaptureState.IDLE
        self._session: Optional[CaptureSession] = None
        self._stale_frames = 0
        self.completed_sessions = 0

        if camera is not None:
            self.set_capturing_camera(camera)
        if sequencer is not None:
            self.set_sequencer(sequencer)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state != CaptureState.IDLE

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    @property
    def bit_range(self) -> BitRange:
        return self.config.bit_range

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_bit_range(self, low_bit: int, high_bit: int) -> bool:
        """
        Set high and low bits simultaneously.

        Returns:
            True if the bits were set, False if not: low_bit >= high_bit, or
            a capture is in progress. The previous range is kept on failure.
        """
        if self.is_busy:
            logger.warning("Cannot change bit range while a capture is in progress")
            return False

        try:
            self.config.set_bit_range(low_bit, high_bit)
        except InvalidConfigurationError as e:
            logger.warning(f"Bit range rejected: {e}")
            return False

        logger.info(f"Bit range set to {low_bit}-{high_bit} "
                    f"({self.config.bit_range.num_columns} columns)")
        self.emit(EventType.CONFIG_CHANGED, self.config)
        return True

    def set_capturing_camera(self, camera: CaptureCamera) -> bool:
        """Set the camera that takes the raw exposures."""
        if self.is_busy:
            logger.warning("Cannot change camera while a capture is in progress")
            return False
        if camera is self:
            logger.error("A structured-light capture cannot capture through itself")
            return False

        if self.camera is not None:
            self.camera.off(EventType.FRAME_READY, self._on_camera_frame)
        self.camera = camera
        self._stale_frames = 0
        camera.on(EventType.FRAME_READY, self._on_camera_frame)
        return True

    def set_sequencer(self, sequencer: PatternSequencer) -> bool:
        """
        Set the sequencer that projects the bit planes.

        Another capture already using the same sequencer keeps working; both
        receive every PATTERN_PROJECTED notification.
        """
        if self.is_busy:
            logger.warning("Cannot change sequencer while a capture is in progress")
            return False

        if self.sequencer is not None:
            self.sequencer.unsubscribe(self.on_pattern_projected)
            self.sequencer.off(EventType.PATTERN_FAILED, self._on_pattern_failed)
        self.sequencer = sequencer
        sequencer.subscribe(self.on_pattern_projected)
        sequencer.on(EventType.PATTERN_FAILED, self._on_pattern_failed)
        return True

    # ------------------------------------------------------------------
    # Capture control
    # ------------------------------------------------------------------

    def request_frame(self, frame_type: FrameType) -> bool:
        """
        Capture a frame and emit when ready.

        Only FrameType.BINARY is supported.

        Returns:
            True if the capture will emit the frame, False for a
            non-binary request, a capture already in progress, or missing
            camera/sequencer
        """
        if frame_type != FrameType.BINARY:
            logger.warning(f"Frame type {frame_type.value} is not supported by a binary capture")
            return False
        if self.is_busy:
            logger.warning(f"Capture already in progress (session {self._session.session_id})")
            return False
        if self.camera is None or self.sequencer is None:
            logger.error("Capturing camera and sequencer must be set before capturing")
            return False

        session = CaptureSession(
            bit_range=self.config.bit_range,
            frame_type=frame_type,
            accumulator=BitPlaneAccumulator(self.config.bit_range)
        )
        self._session = session
        self._state = CaptureState.AWAITING_PROJECTION

        logger.info(f"Starting binary capture {session.session_id}: bits "
                    f"{session.bit_range.low_bit}-{session.bit_range.high_bit}, "
                    f"{session.bit_range.exposure_count} exposures")
        self.emit(EventType.CAPTURE_STARTED, session.session_id)

        self._request_pattern(session)
        return True

    def require_frame(self, frame_type: FrameType = FrameType.BINARY) -> None:
        """
        Like request_frame(), but raises instead of returning False.

        Raises:
            UnsupportedFrameTypeError, CaptureBusyError, CaptureError
        """
        if frame_type != FrameType.BINARY:
            raise UnsupportedFrameTypeError(frame_type)
        if self.is_busy:
            raise CaptureBusyError(self._session.session_id)
        if not self.request_frame(frame_type):
            raise CaptureError("Capturing camera and sequencer must be set before capturing")

    def abort(self) -> bool:
        """
        Discard the in-flight capture and return to idle.

        Returns:
            False if no capture was in progress
        """
        if not self.is_busy:
            return False
        self._abort_session("aborted")
        return True

    def close(self) -> None:
        """Abort any capture and detach from the camera and sequencer."""
        if self.is_busy:
            self._abort_session("closed")
        if self.camera is not None:
            self.camera.off(EventType.FRAME_READY, self._on_camera_frame)
            self.camera = None
        if self.sequencer is not None:
            self.sequencer.unsubscribe(self.on_pattern_projected)
            self.sequencer.off(EventType.PATTERN_FAILED, self._on_pattern_failed)
            self.sequencer = None

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------


    def on_pattern_projected(self, pattern: Pattern) -> None:
        """A particular pattern has been projected."""
        if self._state != CaptureState.AWAITING_PROJECTION:
            logger.debug(f"Ignoring projected {pattern}: state is {self._state.value}")
            return

        session = self._session
        if not pattern.matches(session.current_bit, session.current_inverted):
            logger.debug(f"Ignoring projected {pattern}: waiting for bit "
                         f"{session.current_bit} inv={session.current_inverted}")
            return

        # Keep the pattern on screen until our exposure is in
        self.sequencer.hold(self)
        self._state = CaptureState.AWAITING_EXPOSURE
        session.exposures_requested += 1
        session.exposure_pending = True

        # The camera may deliver the frame before request_frame() returns
        try:
            accepted = self.camera.request_frame(FrameType.GRAYSCALE)
        except Exception as e:
            session.exposure_pending = False
            if self._session is not session:
                raise
            logger.error(f"Camera {self.camera.camera_id} failed on {pattern}: {e}")
            self._abort_session("camera request failed", e)
            return

        if not accepted:
            session.exposure_pending = False
            if self._session is session and self._state == CaptureState.AWAITING_EXPOSURE:
                self._abort_session(
                    "camera refused exposure request",
                    CameraError(f"Camera {self.camera.camera_id} refused exposure for {pattern}"))

    def on_exposure_ready(self, exposure: RawExposure) -> bool:
        """
        Handle a raw exposure for the current step.

        Returns:
            True if the exposure was stored and the walk advanced
        """
        if self._state != CaptureState.AWAITING_EXPOSURE:
            logger.debug(f"Ignoring exposure for bit {exposure.bit}: state is {self._state.value}")
            return False

        session = self._session
        if exposure.slot != session.current_slot:
            logger.debug(f"Discarding exposure for {exposure.slot}, expected {session.current_slot}")
            return False

        try:
            stored = session.accumulator.store(exposure.bit, exposure.inverted, exposure.image)
        except ExposureError as e:
            logger.error(f"Bad exposure in session {session.session_id}: {e}")
            self._abort_session("bad exposure", e)
            return False

        if not stored:
            self.emit(EventType.DUPLICATE_EXPOSURE, exposure.bit, exposure.inverted)
            return False

        self._emit_preview(session, exposure)

        if session.advance_walk():
            self._state = CaptureState.AWAITING_PROJECTION
            # Queue the next plane first so it goes up as soon as the screen is free
            self._request_pattern(session)
            self.sequencer.release(self)
        else:
            self._finish_session(session)
        return True

    def _on_camera_frame(self, image: np.ndarray) -> None:
        if self._stale_frames:
            self._stale_frames -= 1
            logger.debug(f"Dropping late camera frame from an aborted capture "
                         f"({self._stale_frames} more expected)")
            return
        if self._state != CaptureState.AWAITING_EXPOSURE:
            logger.debug("Ignoring camera frame: no exposure requested")
            return

        session = self._session
        session.exposure_pending = False
        bit, inverted = session.current_slot
        try:
            self.on_exposure_ready(RawExposure(bit=bit, inverted=inverted, image=image))
        except Exception as e:
            if self._session is not session:
                raise
            logger.error(f"Failed to process exposure for bit {bit} inv={inverted}: {e}")
            self._abort_session("exposure processing failed", e)

    def _on_pattern_failed(self, pattern: Pattern, error: Exception) -> None:
        if self._state != CaptureState.AWAITING_PROJECTION:
            return
        if pattern.matches(*self._session.current_slot):
            self._abort_session("projection failed", error)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _request_pattern(self, session: CaptureSession) -> None:
        bit, inverted = session.current_slot
        session.patterns_requested.append((bit, inverted))

        try:
            ok = self.sequencer.request(Pattern.bit_plane(bit, inverted))
        except Exception as e:
            if self._session is not session:
                raise
            logger.error(f"Sequencer failed on bit {bit} inv={inverted}: {e}")
            self._abort_session("projection failed", e)
            return

        if not ok and self._session is session and self._state == CaptureState.AWAITING_PROJECTION:
            self._abort_session("projection failed")

    def _emit_preview(self, session: CaptureSession, exposure: RawExposure) -> None:
        """We're still working on the full binary, but here's something to look at."""
        if not self.config.emit_intermediate or not self.has_listeners(EventType.INTERMEDIATE_FRAME):
            return

        try:
            partial = session.accumulator.compile_partial()
            if partial is None:
                preview = to_intensity(exposure.image)
            else:
                preview = decoded_to_preview(partial, session.bit_range.num_columns,
                                             self.config.colorize_preview)
        except Exception as e:
            logger.warning(f"Could not build intermediate preview: {e}")
            return

        self.emit(EventType.INTERMEDIATE_FRAME, preview)

    def _finish_session(self, session: CaptureSession) -> None:
        self._state = CaptureState.COMPILING
        image = session.accumulator.compile()
        session.completed = True

        decoded = DecodedFrame(
            image=image,
            bit_range=session.bit_range,
            session_id=session.session_id,
            exposure_count=session.accumulator.exposure_count
        )
        self._state = CaptureState.DONE
        self.completed_sessions += 1
        logger.info(f"Binary capture {session.session_id} complete in "
                    f"{time.time() - session.started_at:.1f}s")

        # Idle before emitting so subscribers can chain the next request
        self._session = None
        self._state = CaptureState.IDLE
        self.sequencer.release(self)

        self._deliver_frame(decoded.image)
        self.emit(EventType.DECODED_FRAME, decoded)

    def _abort_session(self, reason: str, error: Optional[Exception] = None) -> None:
        session = self._session
        if session is not None and session.exposure_pending:
            # The camera still owes this session a frame
            self._stale_frames += 1
        self._session = None
        self._state = CaptureState.IDLE
        if self.sequencer is not None:
            self.sequencer.release(self)

        session_id = session.session_id if session else None
        logger.warning(f"Binary capture {session_id} aborted: {reason}")
        if error is not None:
            self.emit(EventType.ERROR, error)
        self.emit(EventType.CAPTURE_ABORTED, session_id, reason)
