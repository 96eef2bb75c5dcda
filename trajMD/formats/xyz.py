"""
XYZ trajectory format for trajMD.

Each frame is a block of ``n + 2`` lines::

    3
    comment
    O   0.000  0.000  0.117
    H   0.000  0.757 -0.467
    H   0.000 -0.757 -0.467

Atom lines may carry a fourth number (typically a charge), which is returned
as ``Frame.extra``. It must be present on every atom of a frame or on none.

The atom-line parser is shared with the Molden reader, whose coordinate
sections use the same token layout with optional leading columns.
"""

from typing import BinaryIO, Sequence

import numpy as np

from ._base import (
    Frame,
    ParseError,
    parse_atom_count,
    parse_float,
    read_line,
    read_nonblank_line,
)


# -----------------------------------------------------------------------------
# Topology
# -----------------------------------------------------------------------------

def read_xyz_topology(f: BinaryIO) -> list[str]:
    """
    Read the atom symbols of the first XYZ frame.

    Parameters
    ----------
    f : binary file object
        Handle positioned at an atom-count line.

    Returns
    -------
    list of str
        Element symbols, one per atom.

    Raises
    ------
    ParseError
        If the count line is not an integer, the frame is truncated or an
        atom line is empty.
    """
    n_atoms = parse_atom_count(read_line(f, "atom count"))
    read_line(f, "comment")

    symbols = []
    for i in range(n_atoms):
        tokens = read_line(f, f"atom {i + 1}").split()
        if not tokens:
            raise ParseError(f"Missing symbol for atom {i + 1}")
        symbols.append(tokens[0])
    return symbols


# -----------------------------------------------------------------------------
# Frame reading
# -----------------------------------------------------------------------------

def parse_atom_lines(
    lines: Sequence[str],
    factor: float,
    skip_tokens: int = 0,
) -> tuple[np.ndarray, np.ndarray | None]:
    """
    Parse coordinates and the optional extra column from atom lines.

    Parameters
    ----------
    lines : sequence of str
        One line per atom: symbol, ``skip_tokens`` ignored tokens, x, y, z
        and an optional fourth number.
    factor : float
        Length conversion factor to Angstrom.
    skip_tokens : int, optional
        Number of tokens between the symbol and the coordinates (Molden
        ``[Atoms]`` lines carry an index and an atomic number there).

    Returns
    -------
    coordinates : np.ndarray, shape (n, 3)
    extra : np.ndarray, shape (n,), or None

    Raises
    ------
    ParseError
        If a coordinate is missing or not a number, or the extra column
        appears on some atoms but not on others.
    """
    n_atoms = len(lines)
    xyz = np.empty((n_atoms, 3), dtype=np.float64)
    extra = np.empty(n_atoms, dtype=np.float64)
    extra_present = False
    first = 1 + skip_tokens

    for pos, line in enumerate(lines):
        tokens = line.split()
        if len(tokens) < first + 3:
            raise ParseError(f"Missing coordinate for atom {pos + 1}: {line!r}")
        for k in range(3):
            xyz[pos, k] = parse_float(tokens[first + k], "coordinate") * factor

        # The first atom decides whether the frame has an extra column.
        has_extra = len(tokens) > first + 3
        if pos == 0:
            extra_present = has_extra
        elif has_extra and not extra_present:
            raise ParseError(f"Unexpected extra data found for atom {pos + 1}")
        elif extra_present and not has_extra:
            raise ParseError(f"Inconsistent extra data: missing for atom {pos + 1}")
        if has_extra:
            extra[pos] = parse_float(tokens[first + 3], "extra data")

    return xyz, (extra if extra_present else None)


def read_xyz_frame(f: BinaryIO, n_atoms: int, factor: float) -> Frame:
    """
    Read one XYZ frame from the current position.

    Parameters
    ----------
    f : binary file object
        Handle positioned at (or at blank lines before) an atom-count line.
    n_atoms : int
        Atom count fixed by the topology.
    factor : float
        Length conversion factor to Angstrom.

    Raises
    ------
    ParseError
        If the frame atom count differs from ``n_atoms`` or the frame is
        malformed.
    """
    count = parse_atom_count(read_nonblank_line(f, "atom count"))
    if count != n_atoms:
        raise ParseError(
            f"Number of atoms different than expected: found {count}, expected {n_atoms}"
        )
    comment = read_line(f, "comment")
    lines = [read_line(f, f"atom {i + 1}") for i in range(n_atoms)]
    coordinates, extra = parse_atom_lines(lines, factor)
    return Frame(coordinates=coordinates, extra=extra, comment=comment)


# -----------------------------------------------------------------------------
# Frame writing
# -----------------------------------------------------------------------------

def format_xyz_frame(
    symbols: Sequence[str],
    coordinates: np.ndarray,
    comment: str | None = None,
    factor: float = 1.0,
) -> str:
    """
    Format one XYZ frame.

    Coordinates are given in Angstrom and divided by ``factor`` so the file
    is written in the trajectory's units.

    Examples
    --------
    >>> print(format_xyz_frame(['H'], np.array([[0.0, 1.0, -1.0]])), end='')
    1
    <BLANKLINE>
    H   0.00000000   1.00000000  -1.00000000
    """
    out = [f"{len(symbols)}\n", f"{comment if comment is not None else ''}\n"]
    for sym, (x, y, z) in zip(symbols, coordinates / factor):
        out.append(f"{sym} {x: 12.8f} {y: 12.8f} {z: 12.8f}\n")
    return "".join(out)
