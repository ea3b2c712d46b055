"""
Event system for graycapture.

Projection surfaces, the pattern sequencer, cameras and structured-light
captures talk to each other only through these events. Dispatch is
synchronous: emit() runs every callback before it returns, so a surface that
displays immediately and a camera that grabs immediately drive a whole capture
as one chain of nested callbacks inside the first request.
"""

import enum
import logging
from typing import Dict, List, Callable

logger = logging.getLogger(__name__)


class EventType(enum.Enum):
    """Event types emitted by graycapture components."""
    # Projection events
    PATTERN_DISPLAYED = "pattern_displayed"  # surface -> sequencer
    PATTERN_PROJECTED = "pattern_projected"  # sequencer -> captures
    PATTERN_FAILED = "pattern_failed"        # sequencer -> captures
    SEQUENCE_COMPLETE = "sequence_complete"

    # Camera events
    FRAME_READY = "frame_ready"
    INTERMEDIATE_FRAME = "intermediate_frame"
    DECODED_FRAME = "decoded_frame"

    # Capture lifecycle events
    CAPTURE_STARTED = "capture_started"
    CAPTURE_ABORTED = "capture_aborted"
    DUPLICATE_EXPOSURE = "duplicate_exposure"

    # Other events
    ERROR = "error"
    CONFIG_CHANGED = "config_changed"


class EventEmitter:
    """
    Base class for components that publish events.

    Callbacks for one event run in registration order. A callback that
    raises is logged with its traceback and skipped; the emitter and the
    remaining callbacks carry on, so one broken preview window cannot stall
    the capture that feeds it. Components that must react to their own
    failures (a capture losing its camera) catch them at the call site.
    """

    def __init__(self):
        self._event_callbacks: Dict[EventType, List[Callable]] = {
            event: [] for event in EventType
        }

    def on(self, event_type: EventType, callback: Callable) -> None:
        """
        Subscribe `callback` to `event_type`.

        Args:
            event_type: Event type
            callback: Called with the event's arguments on every emit
        """
        self._event_callbacks.setdefault(event_type, []).append(callback)

    def off(self, event_type: EventType, callback: Callable) -> None:
        """Unsubscribe `callback`; unknown callbacks are ignored."""
        callbacks = self._event_callbacks.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def has_listeners(self, event_type: EventType) -> bool:
        """True if emitting `event_type` would reach at least one callback."""
        return bool(self._event_callbacks.get(event_type))

    def emit(self, event_type: EventType, *args, **kwargs) -> None:
        """
        Run every callback subscribed to `event_type` before returning.

        Args:
            event_type: Event type
            *args, **kwargs: Passed through to each callback
        """
        # Snapshot: a callback may unsubscribe itself or others mid-dispatch
        for callback in list(self._event_callbacks.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {event_type.value} callback {callback!r}: {e}",
                             exc_info=True)
