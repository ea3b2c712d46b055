"""
Preview images for decoded and partially decoded frames.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def decoded_to_preview(decoded: np.ndarray, num_columns: int,
                       colorize: bool = True) -> np.ndarray:
    """
    Scale a column-index frame to 8 bits for display.

    Args:
        decoded: Column index frame
        num_columns: Number of distinguishable columns (full scale)
        colorize: Apply a JET colormap so neighbouring stripes stand out

    Returns:
        (H, W) uint8 image, or (H, W, 3) BGR when colorized
    """
    scale = 255.0 / max(num_columns - 1, 1)
    preview = np.clip(decoded.astype(np.float32) * scale, 0, 255).astype(np.uint8)

    if colorize:
        preview = cv2.applyColorMap(preview, cv2.COLORMAP_JET)
    return preview
