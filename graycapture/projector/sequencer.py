"""
Pattern sequencer.

The sequencer is the single owner of what the projector shows. Any number of
structured-light captures can subscribe to one sequencer; each of them asks
for the patterns it needs and every subscriber sees the same PATTERN_PROJECTED
notifications in the same order, so several capture pipelines can share one
physical projector without drawing over each other.

A subscriber that needs the projected pattern to stay on screen (a capture
waiting for its camera exposure) takes a lease with hold(). While any lease
is held the queue does not move; the last release() renders the next queued
pattern. A pattern nobody holds is replaced as soon as something is queued
behind it.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Set

from graycapture.core.events import EventEmitter, EventType
from graycapture.core.exceptions import GrayCaptureException, ProjectorError
from graycapture.patterns.pattern import Pattern
from .surface import ProjectionSurface

logger = logging.getLogger(__name__)


class PatternSequencer(EventEmitter):
    """
    Ordered pattern queue in front of a ProjectionSurface.

    Events emitted:
        PATTERN_PROJECTED(pattern): the pattern is on screen
        SEQUENCE_COMPLETE(): advance() was called with an empty queue
        PATTERN_FAILED(pattern, exception): the surface could not show a pattern
        ERROR(exception): the surface failed to render
    """

    def __init__(self, surface: ProjectionSurface):
        super().__init__()
        self.surface = surface
        self._queue: Deque[Pattern] = deque()
        self._current: Optional[Pattern] = None
        self._rendering: Optional[Pattern] = None
        self._holders: Set[Any] = set()
        self.projected_count = 0

        self.surface.on(EventType.PATTERN_DISPLAYED, self._on_pattern_displayed)

    @property
    def current_pattern(self) -> Optional[Pattern]:
        """Pattern currently on screen, None before the first projection."""
        return self._current

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def is_held(self) -> bool:
        """True while a subscriber holds the current pattern on screen."""
        return bool(self._holders)

    def subscribe(self, callback: Callable[[Pattern], None]) -> None:
        """Register a PATTERN_PROJECTED callback."""
        self.on(EventType.PATTERN_PROJECTED, callback)

    def unsubscribe(self, callback: Callable[[Pattern], None]) -> None:
        self.off(EventType.PATTERN_PROJECTED, callback)

    def enqueue(self, pattern: Pattern) -> None:
        """Append a pattern. Duplicates are not filtered."""
        self._queue.append(pattern)
        logger.debug(f"Enqueued {pattern} ({len(self._queue)} pending)")

    def clear(self) -> None:
        """Drop all pending patterns."""
        self._queue.clear()

    def request(self, pattern: Pattern) -> bool:
        """
        Ask for a pattern to be projected, sharing it with other subscribers.

        A pattern already on screen is announced again without re-rendering;
        a pattern already queued or being rendered is not queued twice.
        Otherwise the pattern is enqueued and the queue advanced.

        Returns:
            False if the surface failed to render, True otherwise
        """
        if self._rendering is None and pattern == self._current:
            logger.debug(f"{pattern} already on screen")
            self._notify(pattern)
            return True

        if pattern == self._rendering or pattern in self._queue:
            logger.debug(f"{pattern} already pending")
            return True

        self.enqueue(pattern)
        return self.advance()

    def advance(self) -> bool:
        """
        Render the next queued pattern.

        Subscribers are notified when the surface reports the pattern as
        displayed, which may happen before this call returns. Nothing is
        rendered while the current pattern is held or another render is in
        flight; the queue moves on once that clears.

        Returns:
            True if a pattern was sent to the surface or is waiting its turn,
            False if the queue was empty or rendering failed
        """
        if not self._queue:
            logger.debug("Pattern queue empty, sequence complete")
            self.emit(EventType.SEQUENCE_COMPLETE)
            return False

        if self._holders or self._rendering is not None:
            logger.debug(f"Display busy, {len(self._queue)} pattern(s) waiting")
            return True

        pattern = self._queue.popleft()
        self._rendering = pattern
        try:
            self.surface.render(pattern)
        except Exception as e:
            self._rendering = None
            if not isinstance(e, GrayCaptureException):
                e = ProjectorError(f"Surface failed to render {pattern}: {e}",
                                   details={'pattern': pattern.name, 'cause': e})
            logger.error(f"Failed to render {pattern}: {e}")
            self.emit(EventType.ERROR, e)
            self.emit(EventType.PATTERN_FAILED, pattern, e)
            self._pump()
            return False

        return True

    def hold(self, owner: Any) -> None:
        """Keep the current pattern on screen until `owner` releases it."""
        self._holders.add(owner)

    def release(self, owner: Any) -> None:
        """Drop `owner`'s lease; the last release lets the queue move on."""
        self._holders.discard(owner)
        self._pump()

    def _pump(self) -> None:
        if not self._holders and self._rendering is None and self._queue:
            self.advance()

    def _notify(self, pattern: Pattern) -> None:
        logger.debug(f"Projected {pattern}")
        self.emit(EventType.PATTERN_PROJECTED, pattern)
        self._pump()

    def _on_pattern_displayed(self, pattern: Pattern) -> None:
        if self._rendering is not None and pattern != self._rendering:
            logger.warning(f"Surface displayed {pattern} while {self._rendering} was requested")
        self._rendering = None
        self._current = pattern
        self.projected_count += 1
        self._notify(pattern)

    def close(self) -> None:
        """Detach from the surface, drop pending patterns and leases."""
        self.surface.off(EventType.PATTERN_DISPLAYED, self._on_pattern_displayed)
        self._queue.clear()
        self._holders.clear()
