#!/usr/bin/env python3
"""
Binary Frame Capture Example

Projects the Gray-code bit planes full screen on a projector, captures each
one with an OpenCV camera and writes the decoded column-index frame.

Usage:
    python graycapture/examples/capture_binary_frame.py --offset-x 1920 --bits 0 7
    python graycapture/examples/capture_binary_frame.py --show flat   # focus aid
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2
import numpy as np

from graycapture.camera import FrameType, OpenCVCamera
from graycapture.core.events import EventType
from graycapture.core.exceptions import GrayCaptureException
from graycapture.core.logging_config import setup_logging
from graycapture.patterns import Pattern
from graycapture.projector import OpenCVProjectionSurface, PatternSequencer
from graycapture.scanning import (
    CaptureConfig, DecodedFrame, StructuredLightCapture, decoded_to_preview
)

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Structured-light binary frame capture")
    parser.add_argument('--camera', default='0', help='Camera index or video URL')
    parser.add_argument('--bits', type=int, nargs=2, metavar=('LOW', 'HIGH'),
                        help='Gray-code bit range (default from config: 0 7)')
    parser.add_argument('--config', type=str, help='JSON capture configuration')
    parser.add_argument('--offset-x', type=int, default=0,
                        help='Projector x position in the virtual desktop')
    parser.add_argument('--settle', type=float, default=0.2,
                        help='Seconds between pattern change and exposure')
    parser.add_argument('--show', choices=['flat', 'sinusoid'],
                        help='Only show an auxiliary pattern and wait for a key')
    parser.add_argument('--output', type=str, default='decoded.png',
                        help='Output path for the 16-bit decoded frame')
    parser.add_argument('--log-level', default='INFO')
    return parser.parse_args()


def main():
    args = parse_args()
    setup_logging(level=args.log_level)

    try:
        config = CaptureConfig.load(args.config) if args.config else CaptureConfig()
        if args.bits:
            config.set_bit_range(*args.bits)
    except GrayCaptureException as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    surface = OpenCVProjectionSurface(
        resolution=config.pattern_resolution,
        max_brightness=config.max_brightness,
        screen_offset=(args.offset_x, 0)
    )
    sequencer = PatternSequencer(surface)

    if args.show:
        pattern = (Pattern.flat_field(config.flat_field_brightness) if args.show == 'flat'
                   else Pattern.sinusoid())
        sequencer.enqueue(pattern)
        sequencer.advance()
        logger.info("Press any key in the projection window to exit")
        cv2.waitKey(0)
        surface.close()
        return 0

    source = int(args.camera) if args.camera.isdigit() else args.camera
    camera = OpenCVCamera(source, settle_time=args.settle)
    capture = StructuredLightCapture(camera, sequencer, config)

    results = []

    def on_decoded(frame: DecodedFrame):
        results.append(frame)

    def on_intermediate(preview: np.ndarray):
        cv2.imshow("graycapture preview", preview)
        cv2.waitKey(1)

    capture.on(EventType.DECODED_FRAME, on_decoded)
    capture.on(EventType.INTERMEDIATE_FRAME, on_intermediate)

    try:
        camera.open()
        if not capture.request_frame(FrameType.BINARY):
            logger.error("Capture was not started")
            return 1
    except GrayCaptureException as e:
        logger.error(f"Capture failed: {e}")
        return 1
    finally:
        capture.close()
        camera.close()
        surface.close()

    if not results:
        logger.error("No decoded frame was produced")
        return 1

    decoded = results[0]
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(output), decoded.image.astype(np.uint16))
    cv2.imwrite(str(output.with_name(output.stem + '_preview.png')),
                decoded_to_preview(decoded.image, decoded.num_columns))
    logger.info(f"Decoded frame ({decoded.num_columns} columns) written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
