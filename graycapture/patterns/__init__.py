"""
Pattern generation for structured light capture.
"""

from .gray_code import (
    binary_to_gray,
    gray_to_binary,
    render_bit_plane,
    render_sinusoid,
    render_flat_field
)
from .pattern import Pattern, PatternKind, bit_plane_sequence

__all__ = [
    'binary_to_gray',
    'gray_to_binary',
    'render_bit_plane',
    'render_sinusoid',
    'render_flat_field',
    'Pattern',
    'PatternKind',
    'bit_plane_sequence'
]
