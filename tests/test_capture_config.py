"""
Tests for capture configuration.
"""

import json
import os
import tempfile
import unittest

from graycapture.core.exceptions import InvalidConfigurationError
from graycapture.scanning import BitRange, CaptureConfig, CaptureQuality


class TestBitRange(unittest.TestCase):
    """Bit range validation and derived counts."""

    def test_defaults(self):
        bit_range = BitRange()
        self.assertEqual(bit_range.to_tuple(), (0, 7))
        self.assertEqual(bit_range.num_bits, 8)
        self.assertEqual(bit_range.num_columns, 256)
        self.assertEqual(bit_range.exposure_count, 16)
        self.assertEqual(list(bit_range.bits()), list(range(8)))

    def test_invalid_ranges(self):
        for low_bit, high_bit in [(3, 3), (5, 2), (-1, 4), (0, 32)]:
            with self.assertRaises(InvalidConfigurationError):
                BitRange(low_bit, high_bit)

    def test_invalid_range_is_a_value_error(self):
        with self.assertRaises(ValueError):
            BitRange(4, 4)

    def test_contains(self):
        bit_range = BitRange(2, 5)
        self.assertIn(2, bit_range)
        self.assertIn(5, bit_range)
        self.assertNotIn(1, bit_range)
        self.assertNotIn(6, bit_range)


class TestCaptureConfig(unittest.TestCase):
    """Config setters, presets and persistence."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_defaults(self):
        config = CaptureConfig()
        self.assertEqual(config.bit_range, BitRange(0, 7))
        self.assertEqual(config.pattern_resolution, (640, 480))
        self.assertEqual(config.max_brightness, 255)
        self.assertEqual(config.flat_field_brightness, 150)

    def test_presets(self):
        self.assertEqual(CaptureConfig.create_preset(CaptureQuality.COARSE).bit_range.num_columns, 64)
        self.assertEqual(CaptureConfig.create_preset(CaptureQuality.STANDARD).bit_range, BitRange(0, 7))
        self.assertEqual(CaptureConfig.create_preset(CaptureQuality.FINE).bit_range.num_columns, 1024)

    def test_setters_chain(self):
        config = CaptureConfig().set_bit_range(1, 6).set_brightness(200, 120).set_preview(False)
        self.assertEqual(config.bit_range, BitRange(1, 6))
        self.assertEqual(config.max_brightness, 200)
        self.assertEqual(config.flat_field_brightness, 120)
        self.assertFalse(config.emit_intermediate)

    def test_invalid_bit_range_keeps_previous(self):
        config = CaptureConfig()
        with self.assertRaises(InvalidConfigurationError):
            config.set_bit_range(4, 2)
        self.assertEqual(config.bit_range, BitRange(0, 7))

    def test_invalid_values(self):
        config = CaptureConfig()
        with self.assertRaises(InvalidConfigurationError):
            config.set_brightness(300)
        with self.assertRaises(InvalidConfigurationError):
            config.set_pattern_resolution(0, 480)
        self.assertEqual(config.max_brightness, 255)

    def test_dict_round_trip(self):
        config = CaptureConfig().set_bit_range(2, 9).set_pattern_resolution(1024, 768)
        restored = CaptureConfig.from_dict(config.to_dict())
        self.assertEqual(restored.to_dict(), config.to_dict())

    def test_from_partial_dict(self):
        config = CaptureConfig.from_dict({'bit_range': [1, 4]})
        self.assertEqual(config.bit_range, BitRange(1, 4))
        self.assertEqual(config.max_brightness, 255)
        self.assertTrue(config.emit_intermediate)

    def test_save_and_load(self):
        path = os.path.join(self.temp_dir.name, 'configs', 'capture.json')
        config = CaptureConfig().set_bit_range(0, 5).set_preview(True, colorize=False)
        config.save(path)

        with open(path) as f:
            self.assertEqual(json.load(f)['bit_range'], [0, 5])

        loaded = CaptureConfig.load(path)
        self.assertEqual(loaded.bit_range, BitRange(0, 5))
        self.assertFalse(loaded.colorize_preview)

    def test_load_errors(self):
        with self.assertRaises(InvalidConfigurationError):
            CaptureConfig.load(os.path.join(self.temp_dir.name, 'missing.json'))

        path = os.path.join(self.temp_dir.name, 'broken.json')
        with open(path, 'w') as f:
            f.write('{not json')
        with self.assertRaises(InvalidConfigurationError):
            CaptureConfig.load(path)

        path = os.path.join(self.temp_dir.name, 'bad_range.json')
        with open(path, 'w') as f:
            json.dump({'bit_range': [6, 1]}, f)
        with self.assertRaises(InvalidConfigurationError):
            CaptureConfig.load(path)


if __name__ == '__main__':
    unittest.main()
