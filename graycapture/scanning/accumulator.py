"""
Bit-plane accumulation and decoding.

A BitPlaneAccumulator collects one camera exposure per (bit, polarity) slot of
a capture session and, once every slot is filled, compiles them into a single
frame of projector column indices.

Decoding compares each normal exposure against its inverted twin instead of
against a global threshold, so every pixel is thresholded by its own
reflectance and ambient light. Bit planes light the columns whose Gray bit is
0, so a bit reads as 1 where the inverted exposure is the brighter one. A
pixel that is exactly as bright under both polarities decodes that bit as 0.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from graycapture.core.constants import UINT16_MAX_BITS
from graycapture.core.exceptions import ExposureError, PrematureCompileError
from graycapture.patterns.gray_code import gray_to_binary
from .capture_config import BitRange

logger = logging.getLogger(__name__)

Slot = Tuple[int, bool]


@dataclass(frozen=True, eq=False)
class RawExposure:
    """One camera frame tagged with the bit plane it was taken under."""
    bit: int
    inverted: bool
    image: np.ndarray
    timestamp: float = field(default_factory=time.time)

    @property
    def slot(self) -> Slot:
        return (self.bit, self.inverted)


def to_intensity(image: np.ndarray) -> np.ndarray:
    """
    Reduce a camera frame to a single intensity channel.

    Args:
        image: Grayscale (H, W), (H, W, 1), BGR or BGRA frame

    Returns:
        (H, W) array
    """
    image = np.asarray(image)
    if image.ndim == 2:
        return image
    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    raise ExposureError(f"Unsupported exposure shape {image.shape}",
                        details={'shape': image.shape})


class BitPlaneAccumulator:
    """
    Per-session store of raw exposures keyed by (bit, inverted).

    A slot is written at most once: a second store() for a filled slot is
    rejected and the first exposure stays authoritative.
    """

    def __init__(self, bit_range: BitRange):
        self.bit_range = bit_range
        self._frames: Dict[Slot, np.ndarray] = {}
        self._shape: Optional[Tuple[int, int]] = None
        self._complete = False
        self.duplicate_count = 0

    @property
    def required_count(self) -> int:
        return self.bit_range.exposure_count

    @property
    def exposure_count(self) -> int:
        return len(self._frames)

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def shape(self) -> Optional[Tuple[int, int]]:
        return self._shape

    def has_exposure(self, bit: int, inverted: bool) -> bool:
        return (bit, inverted) in self._frames

    def get_exposure(self, bit: int, inverted: bool) -> Optional[np.ndarray]:
        """Stored intensity image for a slot (read-only), or None."""
        return self._frames.get((bit, inverted))

    def missing_slots(self) -> List[Slot]:
        return [(bit, inverted)
                for bit in self.bit_range.bits()
                for inverted in (False, True)
                if (bit, inverted) not in self._frames]

    def store(self, bit: int, inverted: bool, image: np.ndarray) -> bool:
        """
        Record the exposure for a slot.

        Args:
            bit: Bit plane the exposure was taken under
            inverted: Polarity of that bit plane
            image: Camera frame (grayscale or BGR/BGRA)

        Returns:
            True if stored, False if the slot already held an exposure

        Raises:
            ExposureError: bit outside the range, or frame size differs from
                earlier exposures
        """
        if bit not in self.bit_range:
            raise ExposureError(
                f"Bit {bit} outside capture range {self.bit_range.low_bit}-{self.bit_range.high_bit}",
                details={'bit': bit})

        if (bit, inverted) in self._frames:
            self.duplicate_count += 1
            logger.warning(f"Duplicate exposure for bit {bit} "
                           f"({'inverted' if inverted else 'normal'}) ignored")
            return False

        intensity = to_intensity(image)
        if self._shape is None:
            self._shape = intensity.shape
        elif intensity.shape != self._shape:
            raise ExposureError(
                f"Exposure size {intensity.shape} does not match {self._shape}",
                details={'expected': self._shape, 'actual': intensity.shape})

        # Own a private, read-only copy; the camera may reuse its buffer
        frame = np.array(intensity, copy=True)
        frame.flags.writeable = False
        self._frames[(bit, inverted)] = frame

        self._complete = len(self._frames) == self.required_count
        logger.debug(f"Stored bit {bit} inv={inverted} "
                     f"({len(self._frames)}/{self.required_count})")
        return True

    def _output_dtype(self):
        return np.uint16 if self.bit_range.num_bits <= UINT16_MAX_BITS else np.uint32

    def _decode(self, bits: List[int]) -> np.ndarray:
        """Gray-decode the given bits; bits not listed are read as 0."""
        low_bit = self.bit_range.low_bit
        gray = np.zeros(self._shape, dtype=np.uint32)

        for bit in sorted(bits, reverse=True):
            normal = self._frames[(bit, False)]
            inverted = self._frames[(bit, True)]
            # Normal plane is dark where the Gray bit is set; ties decode as 0
            bit_set = (inverted > normal).astype(np.uint32)
            gray |= bit_set << np.uint32(bit - low_bit)

        # gray(x) >> k == gray(x >> k), so shifting first yields x >> low_bit
        return gray_to_binary(gray).astype(self._output_dtype())

    def compile(self) -> np.ndarray:
        """
        Decode all bit planes into projector column indices.

        Returns:
            (H, W) array with values in [0, 2**num_bits - 1]

        Raises:
            PrematureCompileError: if any slot is still empty
        """
        if not self._complete:
            raise PrematureCompileError(len(self._frames), self.required_count)

        decoded = self._decode(list(self.bit_range.bits()))
        logger.debug(f"Compiled {self.required_count} exposures, "
                     f"column range {int(decoded.min())}-{int(decoded.max())}")
        return decoded

    def compile_partial(self) -> Optional[np.ndarray]:
        """
        Best-effort decode using only bits whose two polarities are stored.

        Returns:
            Partial decode, or None if no bit is complete yet
        """
        bits = [bit for bit in self.bit_range.bits()
                if (bit, False) in self._frames and (bit, True) in self._frames]
        if not bits:
            return None
        return self._decode(bits)

    def reset(self) -> None:
        self._frames.clear()
        self._shape = None
        self._complete = False
        self.duplicate_count = 0
