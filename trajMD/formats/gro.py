"""
GRO (GROMACS) trajectory format for trajMD.

A frame is a comment line, an atom-count line, one fixed-width line per atom
and a box line::

    Water
        3
        1SOL     OW    1   0.126   1.624   1.679  0.1227 -0.0580  0.0434
        1SOL    HW1    2   0.190   1.661   1.747  0.8085  0.3191 -0.7791
        1SOL    HW2    3   0.177   1.568   1.613 -0.9045 -2.6469  1.3180
       1.86206   1.86206   1.86206

Column layout of an atom line (0-based, end exclusive):

====== ======= ===================
0-5    resid   residue number
5-10   resname residue name
10-15  name    atom name
15-20  index   atom number
20-44  x y z   positions (nm), 8 columns each
44-68  vx...   velocities (nm/ps), optional
====== ======= ===================

The box line holds the three diagonal terms in columns 0-30 and up to six
off-diagonal terms (``v1(y) v1(z) v2(x) v2(z) v3(x) v3(y)``) in 10-column
fields after them.
"""

from typing import BinaryIO, Sequence

import numpy as np

from ._base import Frame, ParseError, parse_atom_count, parse_float, read_line


#: Atom lines at least this long (first atom of a frame, trailing blanks
#: ignored) carry velocities.
VELOCITY_LINE_LENGTH = 50

#: Off-diagonal terms smaller than this are not written to the box line.
BOX_EPSILON = 1e-6

_COORD_COLUMNS = ((20, 28), (28, 36), (36, 44))
_VELOCITY_COLUMNS = ((44, 52), (52, 60), (60, 68))
_BOX_DIAGONAL_COLUMNS = ((0, 10), (10, 20), (20, 30))
# (row, column) of the box matrix for the optional fields at 30, 40, ... 80
_BOX_OFF_DIAGONAL = ((0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1))
_BOX_WRITE_ORDER = ((0, 0), (1, 1), (2, 2)) + _BOX_OFF_DIAGONAL


def _field(line: str, start: int, stop: int, what: str) -> float:
    text = line[start:stop].strip()
    if not text:
        raise ParseError(f"Missing {what} in columns {start}-{stop}: {line!r}")
    return parse_float(text, what)


# -----------------------------------------------------------------------------
# Topology
# -----------------------------------------------------------------------------

def read_gro_topology(f: BinaryIO) -> tuple[list[str], np.ndarray, list[str]]:
    """
    Read atom names and residue information from the first GRO frame.

    Returns
    -------
    names : list of str
        Atom names (columns 10-15).
    resids : np.ndarray of int
        Residue numbers (columns 0-5).
    resnames : list of str
        Residue names (columns 5-10).

    Raises
    ------
    ParseError
        If the atom count or a residue number is not an integer, or the file
        ends early.
    """
    read_line(f, "comment")
    n_atoms = parse_atom_count(read_line(f, "atom count"))

    names = []
    resnames = []
    resids = np.empty(n_atoms, dtype=int)
    for pos in range(n_atoms):
        line = read_line(f, f"atom {pos + 1}")
        try:
            resids[pos] = int(line[0:5].strip())
        except ValueError:
            raise ParseError(f"Incorrect residue number for atom {pos + 1}: {line!r}") from None
        resnames.append(line[5:10].strip())
        names.append(line[10:15].strip())
    return names, resids, resnames


# -----------------------------------------------------------------------------
# Frame reading
# -----------------------------------------------------------------------------

def parse_box_line(line: str, factor: float) -> np.ndarray:
    """
    Parse a GRO box line into a 3x3 matrix in Angstrom.

    The three diagonal terms are required; each off-diagonal term is zero
    when the line is too short to contain it.
    """
    box = np.zeros((3, 3), dtype=np.float64)
    for axis, (start, stop) in enumerate(_BOX_DIAGONAL_COLUMNS):
        box[axis, axis] = _field(line, start, stop, "box length")
    for k, (row, col) in enumerate(_BOX_OFF_DIAGONAL):
        start = 30 + 10 * k
        if len(line) > start and line[start:start + 10].strip():
            box[row, col] = _field(line, start, start + 10, "box vector")
    return box * factor


def read_gro_frame(f: BinaryIO, n_atoms: int, factor: float) -> Frame:
    """
    Read one GRO frame from the current position.

    Parameters
    ----------
    f : binary file object
        Handle positioned at a comment line.
    n_atoms : int
        Atom count fixed by the topology.
    factor : float
        Length conversion factor to Angstrom.

    Raises
    ------
    ParseError
        If the atom count differs from ``n_atoms`` or a field is malformed.
    """
    comment = read_line(f, "comment").strip()
    count_line = read_line(f, "atom count")
    if parse_atom_count(count_line) != n_atoms:
        raise ParseError(f"Incorrect atom number: {count_line.strip()!r}, expected {n_atoms}")

    xyz = np.empty((n_atoms, 3), dtype=np.float64)
    vel = np.empty((n_atoms, 3), dtype=np.float64)
    velocities_present = False
    for pos in range(n_atoms):
        line = read_line(f, f"atom {pos + 1}")
        if pos == 0:
            velocities_present = len(line.rstrip()) >= VELOCITY_LINE_LENGTH
        for k, (start, stop) in enumerate(_COORD_COLUMNS):
            xyz[pos, k] = _field(line, start, stop, "coordinate") * factor
        if velocities_present:
            for k, (start, stop) in enumerate(_VELOCITY_COLUMNS):
                vel[pos, k] = _field(line, start, stop, "velocity")

    box = parse_box_line(read_line(f, "box"), factor)
    return Frame(
        coordinates=xyz,
        velocities=vel if velocities_present else None,
        box=box,
        comment=comment,
    )


# -----------------------------------------------------------------------------
# Frame writing
# -----------------------------------------------------------------------------

def format_gro_frame(
    symbols: Sequence[str],
    coordinates: np.ndarray,
    velocities: np.ndarray | None = None,
    box: np.ndarray | None = None,
    comment: str | None = None,
    resids: Sequence[int] | None = None,
    resnames: Sequence[str] | None = None,
    factor: float = 10.0,
) -> str:
    """
    Format one GRO frame.

    Parameters
    ----------
    symbols : sequence of str
        Atom names.
    coordinates : np.ndarray, shape (n, 3)
        Positions in Angstrom; divided by ``factor`` (10 for nm).
    velocities : np.ndarray, shape (n, 3), optional
        Written unscaled with four decimals.
    box : np.ndarray, shape (3, 3), optional
        Box matrix in Angstrom. Off-diagonal terms are written only when one
        of them exceeds ``BOX_EPSILON`` after scaling. Without a box a zero
        box line is written.
    comment : str, optional
        Title line; empty when omitted.
    resids, resnames : sequence, optional
        Residue numbers (default 1) and names (default empty).
    factor : float, optional
        Length conversion factor of the file units to Angstrom.
    """
    n_atoms = len(symbols)
    out = [f"{comment if comment is not None else ''}\n", f"{n_atoms:5d}\n"]

    scaled = coordinates / factor
    for i in range(n_atoms):
        resid = int(resids[i]) if resids is not None else 1
        resname = resnames[i] if resnames is not None else ""
        x, y, z = scaled[i]
        line = f"{resid:5d}{resname:<5s}{symbols[i]:>5s}{i + 1:5d}{x:8.3f}{y:8.3f}{z:8.3f}"
        if velocities is not None:
            vx, vy, vz = velocities[i]
            line += f"{vx:8.4f}{vy:8.4f}{vz:8.4f}"
        out.append(line + "\n")

    if box is not None:
        terms = [box[row, col] / factor for row, col in _BOX_WRITE_ORDER]
        if not any(abs(t) > BOX_EPSILON for t in terms[3:]):
            terms = terms[:3]
        out.append("".join(f"{t:10.5f}" for t in terms) + "\n")
    else:
        out.append(f"{0.0:10.5f}{0.0:10.5f}{0.0:10.5f}\n")
    return "".join(out)
