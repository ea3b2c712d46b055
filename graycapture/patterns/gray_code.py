"""
Gray Code Pattern Generation and Conversion.

Pure functions used on both sides of a structured-light capture: the projector
side renders bit-plane stripe images from the Gray code of each column index,
and the decode side turns the recovered Gray code back into a column index.

Gray code is used instead of plain binary because neighbouring projector
columns differ in a single bit, so a pixel misread at a stripe boundary lands
at most one column away.

All conversions accept Python ints as well as unsigned numpy integer arrays.
"""

import logging
from typing import Union

import numpy as np

from graycapture.core.constants import (
    GRAY_WORD_BITS, MAX_BRIGHTNESS,
    DEFAULT_MAX_BRIGHTNESS, DEFAULT_FLAT_FIELD_BRIGHTNESS
)
from graycapture.core.exceptions import PatternError

logger = logging.getLogger(__name__)

IntOrArray = Union[int, np.ndarray]


def binary_to_gray(num: IntOrArray) -> IntOrArray:
    """
    Convert an unsigned binary number to reflected binary Gray code.

    Args:
        num: Unsigned integer or unsigned integer array

    Returns:
        Gray code value(s)
    """
    if isinstance(num, int) and num < 0:
        raise ValueError(f"Gray code is defined for unsigned values, got {num}")
    return num ^ (num >> 1)


def gray_to_binary(num: IntOrArray, word_bits: int = GRAY_WORD_BITS) -> IntOrArray:
    """
    Convert a reflected binary Gray code number back to binary.

    Exact inverse of binary_to_gray() for every value below 2**word_bits.

    Args:
        num: Gray coded unsigned integer or unsigned integer array
        word_bits: Width of the working word

    Returns:
        Binary value(s)
    """
    if isinstance(num, int) and num < 0:
        raise ValueError(f"Gray code is defined for unsigned values, got {num}")

    shift = 1
    while shift < word_bits:
        num = num ^ (num >> shift)
        shift *= 2
    return num


def _check_size(name: str, width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise PatternError(name, f"invalid size {width}x{height}")


def _check_brightness(name: str, max_brightness: int) -> None:
    if not 0 <= max_brightness <= MAX_BRIGHTNESS:
        raise PatternError(name, f"brightness {max_brightness} outside 0-{MAX_BRIGHTNESS}")


def _columns_to_image(values: np.ndarray, height: int) -> np.ndarray:
    """Replicate one row of column intensities into a full-height opaque BGRA image."""
    width = values.shape[0]
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :, :3] = values.astype(np.uint8)[np.newaxis, :, np.newaxis]
    image[:, :, 3] = 255
    return image


def render_bit_plane(
    width: int,
    height: int,
    bit: int,
    inverted: bool = False,
    max_brightness: int = DEFAULT_MAX_BRIGHTNESS
) -> np.ndarray:
    """
    Render one Gray-code bit plane.

    Column x is bright when bit `bit` of binary_to_gray(x) is 0 (dark when it
    is 1); the inverted pattern is the exact complement.

    Args:
        width: Pattern width in pixels
        height: Pattern height in pixels
        bit: Gray code bit to encode
        inverted: Whether to render the complement
        max_brightness: Value of bright columns (0-255)

    Returns:
        (height, width, 4) uint8 BGRA image
    """
    _check_size("bit_plane", width, height)
    _check_brightness("bit_plane", max_brightness)
    if not 0 <= bit < GRAY_WORD_BITS:
        raise PatternError("bit_plane", f"bit {bit} outside 0-{GRAY_WORD_BITS - 1}")

    columns = np.arange(width, dtype=np.uint32)
    gray = binary_to_gray(columns)
    bright = (gray & np.uint32(1 << bit)) == 0
    if inverted:
        bright = ~bright

    values = np.where(bright, max_brightness, 0)
    return _columns_to_image(values, height)


def render_sinusoid(
    width: int,
    height: int,
    period: int,
    shift: float = 0.0,
    max_brightness: int = DEFAULT_MAX_BRIGHTNESS
) -> np.ndarray:
    """
    Render a vertical-fringe sinusoid, (1 + cos(2*pi*(x - shift)/period)) * max/2.

    Args:
        width: Pattern width in pixels
        height: Pattern height in pixels
        period: Fringe period in pixels
        shift: Phase shift in pixels
        max_brightness: Peak brightness (0-255)

    Returns:
        (height, width, 4) uint8 BGRA image
    """
    _check_size("sinusoid", width, height)
    _check_brightness("sinusoid", max_brightness)
    if period == 0:
        raise PatternError("sinusoid", "period must be non-zero")

    x = np.arange(width, dtype=np.float64)
    values = (1.0 + np.cos((x - shift) * np.pi * 2.0 / period)) * max_brightness * 0.5
    return _columns_to_image(np.floor(values), height)


def render_flat_field(
    width: int,
    height: int,
    max_brightness: int = DEFAULT_FLAT_FIELD_BRIGHTNESS
) -> np.ndarray:
    """
    Render a uniform field, used for white reference and focusing.

    Returns:
        (height, width, 4) uint8 BGRA image
    """
    _check_size("flat_field", width, height)
    _check_brightness("flat_field", max_brightness)
    return _columns_to_image(np.full(width, max_brightness), height)
