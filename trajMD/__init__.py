"""Streaming reader/writer for molecular trajectory files (XYZ, Molden, GRO, XTC)"""
from .trajectory import Trajectory
from .formats import (
    GRO,
    GUESS,
    MOLDEN,
    XTC,
    XYZ,
    CorruptFrameError,
    FormatUnresolvedError,
    Frame,
    ParseError,
    ShapeError,
    StateError,
    TrajectoryError,
    TrajectoryIOError,
    UnsupportedOperationError,
    guess_format,
)
from .utils import ElementTable

MAJOR = 0
MINOR = 1
MICRO = 0
__version__ = f'{MAJOR:d}.{MINOR:d}.{MICRO:d}'

__all__ = [
    "Trajectory",
    "Frame",
    "ElementTable",
    "guess_format",
    # Format names
    "GRO",
    "GUESS",
    "MOLDEN",
    "XTC",
    "XYZ",
    # Exceptions
    "CorruptFrameError",
    "FormatUnresolvedError",
    "ParseError",
    "ShapeError",
    "StateError",
    "TrajectoryError",
    "TrajectoryIOError",
    "UnsupportedOperationError",
]
