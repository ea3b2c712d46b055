"""
Projection surfaces.

A ProjectionSurface puts a Pattern on the physical projector and emits
EventType.PATTERN_DISPLAYED once the pattern is actually visible. Only the
PatternSequencer should call render(); captures never draw directly.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np

from graycapture.core.constants import (
    DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT, DEFAULT_MAX_BRIGHTNESS,
    DEFAULT_SCREEN_OFFSET_X, DEFAULT_SCREEN_OFFSET_Y,
    PROJECTION_WAIT_MS, PROJECTION_WINDOW_NAME
)
from graycapture.core.events import EventEmitter, EventType
from graycapture.core.exceptions import ProjectorError
from graycapture.patterns.pattern import Pattern

logger = logging.getLogger(__name__)


class ProjectionSurface(EventEmitter, ABC):
    """Abstract projector display."""

    def __init__(self,
                 resolution: Tuple[int, int] = (DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT),
                 max_brightness: int = DEFAULT_MAX_BRIGHTNESS):
        """
        Args:
            resolution: (width, height) patterns are rendered at
            max_brightness: Brightness of bright stripes (0-255)
        """
        super().__init__()
        self.resolution = resolution
        self.max_brightness = max_brightness

    @abstractmethod
    def render(self, pattern: Pattern) -> None:
        """
        Start displaying `pattern`.

        Implementations call _pattern_displayed(pattern) once it is on
        screen, either before returning or later from their own event loop.
        """

    def render_image(self, pattern: Pattern) -> np.ndarray:
        """Rasterize a pattern at this surface's resolution and brightness."""
        width, height = self.resolution
        return pattern.render(width, height, self.max_brightness)

    def _pattern_displayed(self, pattern: Pattern) -> None:
        logger.debug(f"Pattern on screen: {pattern}")
        self.emit(EventType.PATTERN_DISPLAYED, pattern)


class OpenCVProjectionSurface(ProjectionSurface):
    """
    Full-screen OpenCV window used as projector output.

    The window is moved to the projector's position in the virtual desktop
    (e.g. x=1920 for a second 1920px wide monitor) and made full screen.
    """

    def __init__(self,
                 resolution: Tuple[int, int] = (DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT),
                 max_brightness: int = DEFAULT_MAX_BRIGHTNESS,
                 screen_offset: Tuple[int, int] = (DEFAULT_SCREEN_OFFSET_X, DEFAULT_SCREEN_OFFSET_Y),
                 window_name: str = PROJECTION_WINDOW_NAME,
                 wait_ms: int = PROJECTION_WAIT_MS):
        super().__init__(resolution, max_brightness)
        self.screen_offset = screen_offset
        self.window_name = window_name
        self.wait_ms = wait_ms
        self._opened = False
        self.current_image: Optional[np.ndarray] = None

    def open(self) -> None:
        """Create the window on the projector and blank it."""
        try:
            cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
            cv2.moveWindow(self.window_name, *self.screen_offset)
            cv2.setWindowProperty(self.window_name, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)

            width, height = self.resolution
            cv2.imshow(self.window_name, np.zeros((height, width), dtype=np.uint8))
            cv2.waitKey(self.wait_ms)
        except cv2.error as e:
            raise ProjectorError(f"Could not open projection window: {e}")

        self._opened = True
        logger.info(f"Projection window opened at {self.screen_offset} ({self.resolution[0]}x{self.resolution[1]})")

    def close(self) -> None:
        if self._opened:
            cv2.destroyWindow(self.window_name)
            self._opened = False
            logger.info("Projection window closed")

    def render(self, pattern: Pattern) -> None:
        if not self._opened:
            self.open()

        self.current_image = self.render_image(pattern)
        cv2.imshow(self.window_name, self.current_image)
        # Give the window system time to repaint before reporting the pattern
        cv2.waitKey(self.wait_ms)
        self._pattern_displayed(pattern)
