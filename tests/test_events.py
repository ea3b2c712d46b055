"""
Tests for the event emitter and logging setup.
"""

import logging
import os
import tempfile
import unittest
from unittest.mock import MagicMock

from graycapture.core.events import EventEmitter, EventType
from graycapture.core.logging_config import GrayCaptureLogger


class TestEventEmitter(unittest.TestCase):
    """Observer registration and dispatch."""

    def setUp(self):
        self.emitter = EventEmitter()

    def test_emit_calls_callbacks_in_order(self):
        calls = []
        self.emitter.on(EventType.FRAME_READY, lambda image: calls.append(('first', image)))
        self.emitter.on(EventType.FRAME_READY, lambda image: calls.append(('second', image)))

        self.emitter.emit(EventType.FRAME_READY, 'img')

        self.assertEqual(calls, [('first', 'img'), ('second', 'img')])

    def test_off(self):
        callback = MagicMock()
        self.emitter.on(EventType.ERROR, callback)
        self.emitter.off(EventType.ERROR, callback)
        self.emitter.off(EventType.ERROR, callback)

        self.emitter.emit(EventType.ERROR, RuntimeError())
        callback.assert_not_called()

    def test_failing_callback_is_isolated(self):
        after = MagicMock()
        self.emitter.on(EventType.DECODED_FRAME, MagicMock(side_effect=RuntimeError("boom")))
        self.emitter.on(EventType.DECODED_FRAME, after)

        with self.assertLogs('graycapture.core.events', level='ERROR'):
            self.emitter.emit(EventType.DECODED_FRAME, 1)
        after.assert_called_once_with(1)

    def test_callback_may_unsubscribe_during_emit(self):
        calls = []

        def once(value):
            calls.append(value)
            self.emitter.off(EventType.PATTERN_PROJECTED, once)

        self.emitter.on(EventType.PATTERN_PROJECTED, once)
        self.emitter.emit(EventType.PATTERN_PROJECTED, 1)
        self.emitter.emit(EventType.PATTERN_PROJECTED, 2)
        self.assertEqual(calls, [1])

    def test_has_listeners(self):
        self.assertFalse(self.emitter.has_listeners(EventType.INTERMEDIATE_FRAME))
        self.emitter.on(EventType.INTERMEDIATE_FRAME, print)
        self.assertTrue(self.emitter.has_listeners(EventType.INTERMEDIATE_FRAME))


class TestLoggingConfig(unittest.TestCase):
    """Logging setup."""

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        for handler in self.root.handlers:
            handler.close()
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)
        self.temp_dir.cleanup()

    def test_file_logging_and_module_levels(self):
        log_file = os.path.join(self.temp_dir.name, 'logs', 'capture.log')
        GrayCaptureLogger.setup_logging(level='DEBUG', log_file=log_file, console=False,
                                        module_levels={'graycapture.camera': 'ERROR'})

        self.assertTrue(os.path.exists(log_file))
        self.assertEqual(logging.getLogger('graycapture.scanning').level, logging.DEBUG)
        self.assertEqual(logging.getLogger('graycapture.camera').level, logging.ERROR)

    def test_module_levels_follow_quieter_default(self):
        GrayCaptureLogger.setup_logging(level='INFO', console=True)
        self.assertEqual(logging.getLogger('graycapture.patterns').level, logging.WARNING)
        self.assertEqual(logging.getLogger('graycapture.scanning').level, logging.INFO)

    def test_debug_session(self):
        log_file = GrayCaptureLogger.setup_debug_logging('session_a', base_dir=self.temp_dir.name)
        self.assertEqual(log_file, os.path.join(self.temp_dir.name, 'session_a', 'debug.log'))
        self.assertTrue(os.path.exists(log_file))


if __name__ == '__main__':
    unittest.main()
