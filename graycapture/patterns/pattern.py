"""
Pattern descriptions for the projector.

A Pattern names what should be on screen (a Gray-code bit plane, a sinusoid or
a flat field) without holding pixels; surfaces render it on demand through the
gray_code functions.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from graycapture.core.constants import (
    DEFAULT_MAX_BRIGHTNESS, DEFAULT_FLAT_FIELD_BRIGHTNESS,
    DEFAULT_SINUSOID_PERIOD, DEFAULT_SINUSOID_SHIFT
)
from .gray_code import render_bit_plane, render_sinusoid, render_flat_field

logger = logging.getLogger(__name__)


class PatternKind(Enum):
    """Kinds of pattern the projector can show."""
    BIT_PLANE = "bit_plane"
    SINUSOID = "sinusoid"
    FLAT_FIELD = "flat_field"


@dataclass(frozen=True)
class Pattern:
    """
    Immutable description of one projected pattern.

    Attributes:
        kind: Pattern kind
        bit: Gray code bit (bit planes only)
        inverted: Polarity (bit planes only)
        period: Fringe period in pixels (sinusoids only)
        shift: Phase shift in pixels (sinusoids only)
        brightness: Peak brightness override, None for the surface default
    """
    kind: PatternKind
    bit: Optional[int] = None
    inverted: bool = False
    period: Optional[int] = None
    shift: float = 0.0
    brightness: Optional[int] = None

    @classmethod
    def bit_plane(cls, bit: int, inverted: bool = False) -> 'Pattern':
        """Gray-code bit plane for `bit`, normal or inverted."""
        return cls(kind=PatternKind.BIT_PLANE, bit=bit, inverted=inverted)

    @classmethod
    def sinusoid(cls, period: int = DEFAULT_SINUSOID_PERIOD,
                 shift: float = DEFAULT_SINUSOID_SHIFT) -> 'Pattern':
        """Vertical sinusoidal fringes."""
        return cls(kind=PatternKind.SINUSOID, period=period, shift=shift)

    @classmethod
    def flat_field(cls, brightness: int = DEFAULT_FLAT_FIELD_BRIGHTNESS) -> 'Pattern':
        """Uniform white field."""
        return cls(kind=PatternKind.FLAT_FIELD, brightness=brightness)

    @property
    def name(self) -> str:
        if self.kind == PatternKind.BIT_PLANE:
            inv_text = "_inv" if self.inverted else ""
            return f"gray_bit{self.bit:02d}{inv_text}"
        if self.kind == PatternKind.SINUSOID:
            return f"sinusoid_p{self.period}_s{self.shift:g}"
        return "flat_field"

    def matches(self, bit: int, inverted: bool) -> bool:
        """True if this is the bit plane for (bit, inverted)."""
        return (self.kind == PatternKind.BIT_PLANE
                and self.bit == bit
                and self.inverted == inverted)

    def render(self, width: int, height: int,
               max_brightness: int = DEFAULT_MAX_BRIGHTNESS) -> np.ndarray:
        """
        Render the pattern to a BGRA image.

        Args:
            width: Image width
            height: Image height
            max_brightness: Brightness used when the pattern has no override

        Returns:
            (height, width, 4) uint8 image
        """
        brightness = self.brightness if self.brightness is not None else max_brightness

        if self.kind == PatternKind.BIT_PLANE:
            return render_bit_plane(width, height, self.bit, self.inverted, brightness)
        if self.kind == PatternKind.SINUSOID:
            return render_sinusoid(width, height, self.period, self.shift, brightness)
        return render_flat_field(width, height, brightness)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and serialization."""
        return {
            'kind': self.kind.value,
            'name': self.name,
            'bit': self.bit,
            'inverted': self.inverted,
            'period': self.period,
            'shift': self.shift,
            'brightness': self.brightness
        }

    def __str__(self):
        return self.name


def bit_plane_sequence(low_bit: int, high_bit: int) -> List[Pattern]:
    """
    Build the ordered bit-plane walk of a capture, normal before inverted.

    Args:
        low_bit: First bit plane
        high_bit: Last bit plane (inclusive)

    Returns:
        Patterns (low, False), (low, True), ..., (high, False), (high, True)
    """
    patterns = []
    for bit in range(low_bit, high_bit + 1):
        patterns.append(Pattern.bit_plane(bit, inverted=False))
        patterns.append(Pattern.bit_plane(bit, inverted=True))

    logger.debug(f"Built {len(patterns)} bit-plane patterns for bits {low_bit}-{high_bit}")
    return patterns
