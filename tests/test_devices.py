"""
Tests for the OpenCV camera and projection window, with cv2 mocked.
"""

import unittest
from unittest.mock import DEFAULT, MagicMock, patch

import cv2
import numpy as np

from graycapture.camera import FrameType, OpenCVCamera
from graycapture.core.events import EventType
from graycapture.core.exceptions import CameraError, ProjectorError
from graycapture.patterns import Pattern
from graycapture.projector import OpenCVProjectionSurface


class TestOpenCVCamera(unittest.TestCase):
    """OpenCVCamera against a mocked cv2.VideoCapture."""

    def setUp(self):
        patcher = patch('graycapture.camera.camera.cv2.VideoCapture')
        self.mock_capture_class = patcher.start()
        self.addCleanup(patcher.stop)

        self.device = MagicMock()
        self.device.isOpened.return_value = True
        self.device.read.return_value = (True, np.full((4, 6, 3), 80, dtype=np.uint8))
        self.mock_capture_class.return_value = self.device

        self.camera = OpenCVCamera(0, settle_time=0, flush_frames=2)
        self.frames = []
        self.camera.on(EventType.FRAME_READY, self.frames.append)

    def test_open_failure(self):
        self.device.isOpened.return_value = False
        with self.assertRaises(CameraError):
            self.camera.open()
        self.assertIsNone(self.camera.cap)

    def test_grayscale_request_delivers_synchronously(self):
        self.assertTrue(self.camera.request_frame(FrameType.GRAYSCALE))

        self.assertEqual(len(self.frames), 1)
        self.assertEqual(self.frames[0].shape, (4, 6))
        self.assertEqual(self.device.grab.call_count, 2)

    def test_color_request(self):
        self.assertTrue(self.camera.request_frame(FrameType.COLOR))
        self.assertEqual(self.frames[0].shape, (4, 6, 3))

    def test_binary_request_rejected(self):
        self.assertFalse(self.camera.request_frame(FrameType.BINARY))
        self.assertEqual(self.frames, [])

    def test_read_failure_returns_false(self):
        self.device.read.return_value = (False, None)
        self.assertFalse(self.camera.request_frame(FrameType.GRAYSCALE))
        self.assertEqual(self.frames, [])

    def test_resolution_and_close(self):
        camera = OpenCVCamera(1, resolution=(1280, 720))
        camera.open()
        self.device.set.assert_any_call(cv2.CAP_PROP_FRAME_WIDTH, 1280)
        self.device.set.assert_any_call(cv2.CAP_PROP_FRAME_HEIGHT, 720)

        camera.close()
        self.device.release.assert_called_once()
        self.assertIsNone(camera.cap)


class TestOpenCVProjectionSurface(unittest.TestCase):
    """OpenCVProjectionSurface against mocked HighGUI calls."""

    def setUp(self):
        patcher = patch.multiple('graycapture.projector.surface.cv2',
                                 namedWindow=DEFAULT,
                                 moveWindow=DEFAULT,
                                 setWindowProperty=DEFAULT,
                                 imshow=DEFAULT,
                                 waitKey=DEFAULT,
                                 destroyWindow=DEFAULT)
        self.mocks = patcher.start()
        self.mocks['waitKey'].return_value = -1
        self.addCleanup(patcher.stop)

        self.surface = OpenCVProjectionSurface(resolution=(32, 4), screen_offset=(1920, 0))
        self.displayed = []
        self.surface.on(EventType.PATTERN_DISPLAYED, self.displayed.append)

    def test_render_opens_window_on_projector(self):
        self.surface.render(Pattern.bit_plane(1))

        self.mocks['moveWindow'].assert_called_once_with(self.surface.window_name, 1920, 0)
        self.mocks['setWindowProperty'].assert_called_once()
        self.assertEqual(self.displayed, [Pattern.bit_plane(1)])
        self.assertEqual(self.surface.current_image.shape, (4, 32, 4))

    def test_window_opened_once(self):
        self.surface.render(Pattern.bit_plane(0))
        self.surface.render(Pattern.bit_plane(0, True))

        self.mocks['namedWindow'].assert_called_once()
        self.assertEqual(len(self.displayed), 2)

    def test_shown_image_matches_pattern(self):
        self.surface.render(Pattern.flat_field(100))

        window, image = self.mocks['imshow'].call_args[0]
        self.assertEqual(window, self.surface.window_name)
        self.assertTrue(np.all(image[:, :, :3] == 100))

    def test_open_failure(self):
        self.mocks['namedWindow'].side_effect = cv2.error("no display")
        with self.assertRaises(ProjectorError):
            self.surface.render(Pattern.bit_plane(0))
        self.assertEqual(self.displayed, [])

    def test_close(self):
        self.surface.close()
        self.mocks['destroyWindow'].assert_not_called()

        self.surface.open()
        self.surface.close()
        self.mocks['destroyWindow'].assert_called_once_with(self.surface.window_name)


if __name__ == '__main__':
    unittest.main()
