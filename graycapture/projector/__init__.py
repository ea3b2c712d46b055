"""
Projector side of the capture: display surfaces and the shared pattern sequencer.
"""

from .surface import ProjectionSurface, OpenCVProjectionSurface
from .sequencer import PatternSequencer

__all__ = [
    'ProjectionSurface',
    'OpenCVProjectionSurface',
    'PatternSequencer'
]
