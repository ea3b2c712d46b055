"""
Tests for bit-plane accumulation and decoding.
"""

import unittest

import numpy as np

from graycapture.core.exceptions import ExposureError, PrematureCompileError
from graycapture.scanning import BitPlaneAccumulator, BitRange, RawExposure, to_intensity


def plane(value, shape=(2, 3)):
    return np.full(shape, value, dtype=np.uint8)


class TestToIntensity(unittest.TestCase):
    """Camera frame reduction."""

    def test_grayscale_passthrough(self):
        image = plane(7)
        self.assertIs(to_intensity(image), image)

    def test_single_channel(self):
        self.assertEqual(to_intensity(np.zeros((4, 5, 1), dtype=np.uint8)).shape, (4, 5))

    def test_bgr_and_bgra(self):
        bgr = np.full((4, 5, 3), 200, dtype=np.uint8)
        bgra = np.full((4, 5, 4), 200, dtype=np.uint8)
        self.assertTrue(np.all(to_intensity(bgr) == 200))
        self.assertTrue(np.all(to_intensity(bgra) == 200))

    def test_unsupported_shape(self):
        with self.assertRaises(ExposureError):
            to_intensity(np.zeros((4, 5, 2), dtype=np.uint8))


class TestBitPlaneAccumulator(unittest.TestCase):
    """Storage rules and decoding."""

    def fill(self, accumulator, comparisons, shape=(2, 3)):
        """comparisons: {bit: (normal, inverted)} intensities."""
        for bit, (normal, inverted) in comparisons.items():
            accumulator.store(bit, False, plane(normal, shape))
            accumulator.store(bit, True, plane(inverted, shape))

    def test_duplicate_keeps_first_exposure(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 7))
        self.assertTrue(accumulator.store(3, False, plane(10)))
        self.assertFalse(accumulator.store(3, False, plane(99)))

        self.assertEqual(accumulator.exposure_count, 1)
        self.assertEqual(accumulator.duplicate_count, 1)
        self.assertTrue(np.all(accumulator.get_exposure(3, False) == 10))

    def test_completion_requires_every_slot(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 7))
        self.assertEqual(accumulator.required_count, 16)

        for bit in range(8):
            accumulator.store(bit, False, plane(200))
            if bit < 7:
                accumulator.store(bit, True, plane(50))

        self.assertEqual(accumulator.exposure_count, 15)
        self.assertFalse(accumulator.is_complete)
        self.assertEqual(accumulator.missing_slots(), [(7, True)])
        with self.assertRaises(PrematureCompileError):
            accumulator.compile()

        accumulator.store(7, True, plane(50))
        self.assertTrue(accumulator.is_complete)
        self.assertEqual(accumulator.compile().shape, (2, 3))

    def test_ties_decode_as_zero(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 2))
        # bit 2: inverted brighter (set), bit 1: tie, bit 0: normal brighter (clear)
        self.fill(accumulator, {2: (50, 200), 1: (120, 120), 0: (220, 40)})

        # Gray 0b100 -> binary 0b111; a tie read as 1 would give Gray 0b110 -> 4
        decoded = accumulator.compile()
        self.assertTrue(np.all(decoded == 7))

    def test_decode_shifts_by_low_bit(self):
        accumulator = BitPlaneAccumulator(BitRange(2, 4))
        self.fill(accumulator, {2: (10, 200), 3: (10, 200), 4: (10, 200)})

        # Gray 0b111 -> binary 0b101
        decoded = accumulator.compile()
        self.assertTrue(np.all(decoded == 5))
        self.assertLess(int(decoded.max()), BitRange(2, 4).num_columns)

    def test_output_dtype(self):
        narrow = BitPlaneAccumulator(BitRange(0, 1))
        self.fill(narrow, {0: (1, 0), 1: (1, 0)})
        self.assertEqual(narrow.compile().dtype, np.uint16)

        wide = BitPlaneAccumulator(BitRange(0, 16))
        self.fill(wide, {bit: (0, 1) for bit in range(17)}, shape=(1, 1))
        self.assertEqual(wide.compile().dtype, np.uint32)

    def test_per_pixel_comparison(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 1))
        normal = np.array([[10, 200]], dtype=np.uint8)
        inverted = np.array([[200, 10]], dtype=np.uint8)
        accumulator.store(1, False, normal)
        accumulator.store(1, True, inverted)
        accumulator.store(0, False, inverted)
        accumulator.store(0, True, inverted)

        # Pixel 0: Gray 10 -> 3; pixel 1: Gray 00 -> 0
        np.testing.assert_array_equal(accumulator.compile(), [[3, 0]])

    def test_bit_outside_range(self):
        accumulator = BitPlaneAccumulator(BitRange(2, 4))
        with self.assertRaises(ExposureError):
            accumulator.store(5, False, plane(1))
        with self.assertRaises(ExposureError):
            accumulator.store(1, True, plane(1))
        self.assertEqual(accumulator.exposure_count, 0)

    def test_shape_mismatch(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 3))
        accumulator.store(0, False, plane(1, (2, 3)))
        with self.assertRaises(ExposureError):
            accumulator.store(0, True, plane(1, (3, 2)))
        self.assertFalse(accumulator.has_exposure(0, True))

    def test_color_exposures_are_converted(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 1))
        accumulator.store(0, False, np.full((2, 3, 3), 90, dtype=np.uint8))
        self.assertEqual(accumulator.shape, (2, 3))
        self.assertEqual(accumulator.get_exposure(0, False).shape, (2, 3))

    def test_stored_exposure_is_a_read_only_copy(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 1))
        image = plane(10)
        accumulator.store(0, False, image)
        image[:] = 99

        stored = accumulator.get_exposure(0, False)
        self.assertTrue(np.all(stored == 10))
        with self.assertRaises(ValueError):
            stored[0, 0] = 1

    def test_compile_partial(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 2))
        self.assertIsNone(accumulator.compile_partial())

        accumulator.store(2, False, plane(10))
        self.assertIsNone(accumulator.compile_partial())

        accumulator.store(2, True, plane(200))
        partial = accumulator.compile_partial()
        # Only bit 2 known: Gray 0b100 -> 7
        self.assertTrue(np.all(partial == 7))

    def test_reset(self):
        accumulator = BitPlaneAccumulator(BitRange(0, 1))
        self.fill(accumulator, {0: (1, 0), 1: (1, 0)})
        accumulator.store(0, False, plane(1))
        accumulator.reset()

        self.assertEqual(accumulator.exposure_count, 0)
        self.assertEqual(accumulator.duplicate_count, 0)
        self.assertFalse(accumulator.is_complete)
        self.assertIsNone(accumulator.shape)

    def test_raw_exposure_slot(self):
        exposure = RawExposure(bit=4, inverted=True, image=plane(0))
        self.assertEqual(exposure.slot, (4, True))


if __name__ == '__main__':
    unittest.main()
