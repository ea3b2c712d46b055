"""
Configuration classes for structured-light capture.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple, Union

from graycapture.core.constants import (
    DEFAULT_LOW_BIT, DEFAULT_HIGH_BIT, GRAY_WORD_BITS, ERROR_INVALID_BIT_RANGE,
    DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT,
    DEFAULT_MAX_BRIGHTNESS, DEFAULT_FLAT_FIELD_BRIGHTNESS, MAX_BRIGHTNESS,
    QUALITY_PRESETS
)
from graycapture.core.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BitRange:
    """
    Inclusive range of Gray-code bit planes to capture.

    Raises:
        InvalidConfigurationError: unless 0 <= low_bit < high_bit < 32
    """
    low_bit: int = DEFAULT_LOW_BIT
    high_bit: int = DEFAULT_HIGH_BIT

    def __post_init__(self):
        if self.low_bit < 0:
            raise InvalidConfigurationError("bit_range", f"low bit {self.low_bit} is negative")
        if self.low_bit >= self.high_bit:
            raise InvalidConfigurationError(
                "bit_range", ERROR_INVALID_BIT_RANGE.format(self.low_bit, self.high_bit))
        if self.high_bit >= GRAY_WORD_BITS:
            raise InvalidConfigurationError(
                "bit_range", f"high bit {self.high_bit} exceeds the {GRAY_WORD_BITS}-bit word")

    @property
    def num_bits(self) -> int:
        return self.high_bit - self.low_bit + 1

    @property
    def num_columns(self) -> int:
        """Number of projector columns the range can tell apart."""
        return 2 ** self.num_bits

    @property
    def exposure_count(self) -> int:
        """Exposures needed: both polarities of every bit."""
        return 2 * self.num_bits

    def bits(self) -> Iterator[int]:
        return iter(range(self.low_bit, self.high_bit + 1))

    def __contains__(self, bit: int) -> bool:
        return self.low_bit <= bit <= self.high_bit

    def to_tuple(self) -> Tuple[int, int]:
        return (self.low_bit, self.high_bit)


class CaptureQuality(Enum):
    """Bit range presets."""
    COARSE = "coarse"      # 64 columns
    STANDARD = "standard"  # 256 columns
    FINE = "fine"          # 1024 columns


class CaptureConfig:
    """
    Configuration for a structured-light capture and its projector.
    """

    def __init__(self):
        """Initialize capture configuration with default values."""
        # Gray code settings
        self.bit_range = BitRange(DEFAULT_LOW_BIT, DEFAULT_HIGH_BIT)

        # Projector settings
        self.pattern_resolution = (DEFAULT_PATTERN_WIDTH, DEFAULT_PATTERN_HEIGHT)
        self.max_brightness = DEFAULT_MAX_BRIGHTNESS
        self.flat_field_brightness = DEFAULT_FLAT_FIELD_BRIGHTNESS

        # Preview settings
        self.emit_intermediate = True
        self.colorize_preview = True

    @classmethod
    def create_preset(cls, quality: CaptureQuality) -> 'CaptureConfig':
        """
        Create a configuration preset based on quality setting.

        Args:
            quality: Quality preset to use

        Returns:
            Configuration object with preset values
        """
        config = cls()
        preset = QUALITY_PRESETS[quality.value]
        config.set_bit_range(preset['low_bit'], preset['high_bit'])
        return config

    def set_bit_range(self, low_bit: int, high_bit: int) -> 'CaptureConfig':
        """
        Set the bit planes to capture.

        Raises:
            InvalidConfigurationError: if low_bit >= high_bit; the previous
                range is kept
        """
        self.bit_range = BitRange(low_bit, high_bit)
        return self

    def set_pattern_resolution(self, width: int, height: int) -> 'CaptureConfig':
        """
        Set the resolution patterns are rendered at.
        """
        if width <= 0 or height <= 0:
            raise InvalidConfigurationError("pattern_resolution", f"{width}x{height}")
        if width > 1 << (self.bit_range.high_bit + 1):
            logger.warning(f"Pattern width {width} exceeds the columns bits "
                           f"{self.bit_range.low_bit}-{self.bit_range.high_bit} can encode; "
                           f"decoded indices will wrap")
        self.pattern_resolution = (width, height)
        return self

    def set_brightness(self, max_brightness: int = None,
                       flat_field_brightness: int = None) -> 'CaptureConfig':
        """
        Set projector brightness values (0-255).
        """
        for name, value in (("max_brightness", max_brightness),
                            ("flat_field_brightness", flat_field_brightness)):
            if value is not None and not 0 <= value <= MAX_BRIGHTNESS:
                raise InvalidConfigurationError(name, f"{value} outside 0-{MAX_BRIGHTNESS}")

        if max_brightness is not None:
            self.max_brightness = max_brightness
        if flat_field_brightness is not None:
            self.flat_field_brightness = flat_field_brightness
        return self

    def set_preview(self, enabled: bool = True, colorize: bool = True) -> 'CaptureConfig':
        self.emit_intermediate = enabled
        self.colorize_preview = colorize
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.
        """
        return {
            'bit_range': list(self.bit_range.to_tuple()),
            'pattern_resolution': list(self.pattern_resolution),
            'max_brightness': self.max_brightness,
            'flat_field_brightness': self.flat_field_brightness,
            'emit_intermediate': self.emit_intermediate,
            'colorize_preview': self.colorize_preview
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaptureConfig':
        """
        Build a configuration from a dictionary; missing keys keep defaults.

        Raises:
            InvalidConfigurationError: on invalid values
        """
        config = cls()
        if 'bit_range' in data:
            low_bit, high_bit = data['bit_range']
            config.set_bit_range(int(low_bit), int(high_bit))
        if 'pattern_resolution' in data:
            width, height = data['pattern_resolution']
            config.set_pattern_resolution(int(width), int(height))
        config.set_brightness(data.get('max_brightness'), data.get('flat_field_brightness'))
        config.set_preview(data.get('emit_intermediate', config.emit_intermediate),
                           data.get('colorize_preview', config.colorize_preview))
        return config

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'CaptureConfig':
        """Load a configuration from a JSON file."""
        path = Path(path)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigurationError(str(path), f"could not read configuration: {e}")

        logger.info(f"Loaded capture configuration from {path}")
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> None:
        """Write the configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved capture configuration to {path}")
