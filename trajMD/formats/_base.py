"""
Shared definitions for the trajectory formats of trajMD.

This module defines the exception hierarchy, the :class:`Frame` container
returned by readers, format detection and the small line-level helpers the
text formats use on binary file handles (binary mode keeps ``tell``/``seek``
offsets plain byte counts).
"""

from dataclasses import dataclass
from typing import BinaryIO

import numpy as np


XYZ = 'XYZ'
MOLDEN = 'MOLDEN'
GRO = 'GRO'
XTC = 'XTC'
GUESS = 'GUESS'

KNOWN_FORMATS = frozenset({XYZ, MOLDEN, GRO, XTC})
WRITABLE_FORMATS = frozenset({XYZ, GRO})

#: Lower-cased last four characters of a file name mapped to its format.
EXTENSIONS: dict[str, str] = {
    '.xyz': XYZ,
    '.gro': GRO,
    '.xtc': XTC,
}

#: First line (stripped, lower-cased) identifying a Molden file.
MOLDEN_MARKER = '[molden format]'


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class TrajectoryError(Exception):
    """Base class for all trajMD errors."""
    pass


class FormatUnresolvedError(TrajectoryError, ValueError):
    """Raised when a format name is invalid or the format cannot be guessed."""
    pass


class StateError(TrajectoryError, RuntimeError):
    """Raised when an operation does not fit the trajectory mode or state."""
    pass


class TrajectoryIOError(TrajectoryError, OSError):
    """Raised when the underlying file cannot be opened, read or written."""
    pass


class ParseError(TrajectoryError, ValueError):
    """Raised when file content violates the format grammar."""
    pass


class ShapeError(TrajectoryError, ValueError):
    """Raised when caller-supplied arrays or lists have the wrong shape."""
    pass


class UnsupportedOperationError(TrajectoryError, NotImplementedError):
    """Raised when a format or backend does not support the operation."""
    pass


class CorruptFrameError(TrajectoryIOError):
    """Raised when the XTC codec reports a frame it cannot decode."""
    pass


# -----------------------------------------------------------------------------
# Frame
# -----------------------------------------------------------------------------

@dataclass
class Frame:
    """
    One time step read from a trajectory.

    Attributes
    ----------
    coordinates : np.ndarray
        Positions in Angstrom, shape ``(n_atoms, 3)``.
    velocities : np.ndarray or None
        Velocities as stored in the file (GRO: nm/ps), shape ``(n_atoms, 3)``.
    box : np.ndarray or None
        Box matrix in Angstrom with rows = lattice vectors, shape ``(3, 3)``.
    extra : np.ndarray or None
        Per-atom scalar from a fourth XYZ column (usually a charge).
    comment : str or None
        Comment line of XYZ and GRO frames.
    step, time : int, float or None
        Integration step and time of XTC frames.
    energy : float or None
        Energy of a Molden geometry, from the ``[GEOCONV]`` section.
    """

    coordinates: np.ndarray
    velocities: np.ndarray | None = None
    box: np.ndarray | None = None
    extra: np.ndarray | None = None
    comment: str | None = None
    step: int | None = None
    time: float | None = None
    energy: float | None = None

    @property
    def n_atoms(self) -> int:
        return self.coordinates.shape[0]


# -----------------------------------------------------------------------------
# Format detection
# -----------------------------------------------------------------------------

def _first_line(filename: str) -> str:
    """Return the first line of a file, stripped and lower-cased."""
    try:
        with open(filename, "rb") as f:
            line = f.readline()
    except OSError as e:
        raise TrajectoryIOError(e.errno, f"Cannot read {filename}: {e.strerror}", filename) from e
    # binary files without a known extension must fall through to "unresolved"
    return line.decode("utf-8", errors="replace").strip().lower()


def guess_format(filename: str, mode: str = 'r') -> str:
    """
    Guess the trajectory format of a file.

    Parameters
    ----------
    filename : str
        Path of the trajectory file.
    mode : str, optional
        ``'r'``, ``'w'`` or ``'a'``. The file content is only inspected in
        ``'r'`` and ``'a'`` modes.

    Returns
    -------
    str
        One of ``'XYZ'``, ``'MOLDEN'``, ``'GRO'``, ``'XTC'``.

    Raises
    ------
    FormatUnresolvedError
        If neither the extension nor the first line identify the format.
    TrajectoryIOError
        If the file has to be inspected but cannot be read.
    """
    ext = filename[-4:].lower()
    if ext in EXTENSIONS:
        return EXTENSIONS[ext]
    if mode in ('r', 'a') and _first_line(filename) == MOLDEN_MARKER:
        return MOLDEN
    raise FormatUnresolvedError(f"Could not guess file format of {filename!r}")


def resolve_format(filename: str, mode: str = 'r', file_format: str | None = GUESS) -> str:
    """
    Validate an explicit format name or guess the format.

    Raises
    ------
    FormatUnresolvedError
        If ``file_format`` is not a known format name or guessing fails.
    """
    if file_format is None:
        file_format = GUESS
    normalised = file_format.upper().strip()
    if normalised == GUESS:
        return guess_format(filename, mode)
    if normalised not in KNOWN_FORMATS:
        raise FormatUnresolvedError(
            f"Incorrect format specification {file_format!r}. "
            f"Expected one of {sorted(KNOWN_FORMATS | {GUESS})}."
        )
    return normalised


# -----------------------------------------------------------------------------
# Line helpers
# -----------------------------------------------------------------------------

def decode_line(raw: bytes) -> str:
    """
    Decode a raw line and drop its line terminator.

    Raises
    ------
    ParseError
        If the line is not valid UTF-8.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Undecodable bytes in line {raw!r}: {e.reason}") from None
    return text.rstrip("\r\n")


def read_line(f: BinaryIO, what: str = "line") -> str:
    """
    Read one line, failing at end of file.

    Raises
    ------
    ParseError
        If the file ends before the line.
    """
    raw = f.readline()
    if not raw:
        raise ParseError(f"Unexpected end of file while reading {what}")
    return decode_line(raw)


def read_nonblank_line(f: BinaryIO, what: str = "line") -> str:
    """Read the next line that is not only whitespace."""
    while True:
        line = read_line(f, what)
        if line.strip():
            return line


def parse_atom_count(line: str) -> int:
    """Parse the leading integer of an atom-count line."""
    tokens = line.split()
    try:
        count = int(tokens[0])
    except (IndexError, ValueError):
        raise ParseError(f"Incorrect atom number: {line!r}") from None
    if count < 0:
        raise ParseError(f"Incorrect atom number: {line!r}")
    return count


def parse_float(text: str, what: str) -> float:
    """Convert a token to float, raising ParseError on failure."""
    try:
        return float(text)
    except ValueError:
        raise ParseError(f"Invalid {what}: {text!r}") from None


def at_end_of_stream(f: BinaryIO, section_stops: bool = False) -> bool:
    """
    Peek ahead and report whether another frame can follow.

    The stream has ended when only blank lines remain, or, if
    ``section_stops`` is set, when the next non-blank line opens a new
    ``[section]``. The file position is restored in every case.
    """
    offset = f.tell()
    try:
        while True:
            raw = f.readline()
            if not raw:
                return True
            line = decode_line(raw).strip()
            if line:
                return section_stops and line.startswith('[')
    finally:
        f.seek(offset)
