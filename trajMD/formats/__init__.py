"""
Trajectory file formats for trajMD.

Modules
-------
xyz
    Generic XYZ coordinates (read and write).
gro
    GROMACS fixed-column coordinates with residues (read and write).
molden
    Molden sections ``[Atoms]``, ``[GEOMETRIES]``, ``[FR-COORD]`` (read).
xtc
    GROMACS compressed coordinates via MDAnalysis (read).

Exceptions
----------
TrajectoryError
    Base class of every error below.
FormatUnresolvedError, StateError, TrajectoryIOError, ParseError,
ShapeError, UnsupportedOperationError, CorruptFrameError
"""

from ._base import (
    GRO,
    GUESS,
    KNOWN_FORMATS,
    MOLDEN,
    WRITABLE_FORMATS,
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
    resolve_format,
)

__all__ = [
    # Format names
    "GRO",
    "GUESS",
    "KNOWN_FORMATS",
    "MOLDEN",
    "WRITABLE_FORMATS",
    "XTC",
    "XYZ",
    # Frame container and detection
    "Frame",
    "guess_format",
    "resolve_format",
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
