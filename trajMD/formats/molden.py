"""
Molden trajectory format for trajMD.

Molden files are split into bracketed sections::

    [Molden Format]
    [Atoms] Angs
    O     1    8    0.000000    0.000000    0.117300
    H     2    1    0.000000    0.757200   -0.469200
    [GEOCONV]
    energy
    -76.0107
    -76.0211
    [GEOMETRIES] XYZ
    3
    step 1
    O   0.000  0.000  0.117
    ...

Three sections can provide coordinates. When several are present the
authoritative one is chosen as ``[GEOMETRIES]`` > ``[Atoms]`` > ``[FR-COORD]``:

- ``geometries``: consecutive XYZ blocks, one per optimisation step.
- ``atoms``: a single geometry, ``symbol index Z x y z``; the header names
  the units (``Angs`` or ``AU``).
- ``fr-coord``: a single geometry of a frequency run, ``symbol x y z`` in
  Bohr.

Sections are indexed once when the file is opened; afterwards the reader
seeks directly to the section it needs.
"""

from dataclasses import dataclass
from typing import BinaryIO

import numpy as np

from ._base import (
    Frame,
    ParseError,
    UnsupportedOperationError,
    decode_line,
    read_nonblank_line,
)
from .xyz import parse_atom_lines, read_xyz_frame, read_xyz_topology


#: Largest number of sections indexed in one file.
MAX_MOLDEN_SECTIONS = 50

STYLE_GEOMETRIES = 'geometries'
STYLE_ATOMS = 'atoms'
STYLE_FR_COORD = 'fr-coord'

# Highest precedence first.
_STYLE_PRECEDENCE = (STYLE_GEOMETRIES, STYLE_ATOMS, STYLE_FR_COORD)

_ATOMS_UNITS = {'angs': 'angs', 'au': 'bohr'}


@dataclass(frozen=True)
class MoldenSection:
    """
    Location of one ``[name]`` section.

    Attributes
    ----------
    name : str
        Section name, lower-cased and stripped.
    offset : int
        Byte offset of the line following the header.
    header_offset : int
        Byte offset of the header line itself.
    argument : str
        Lower-cased text following the closing bracket (e.g. ``'angs'``).
    """

    name: str
    offset: int
    header_offset: int
    argument: str = ''


# -----------------------------------------------------------------------------
# Section index
# -----------------------------------------------------------------------------

def _split_header(line: str) -> tuple[str, str]:
    """Split ``[name] argument`` into its lower-cased parts."""
    body = line[1:]
    name, _, argument = body.partition(']')
    return name.strip().lower(), argument.strip().lower()


def read_molden_sections(f: BinaryIO) -> tuple[list[MoldenSection], str | None]:
    """
    Index the sections of a Molden file in one forward pass.

    Parameters
    ----------
    f : binary file object
        Open Molden file; it is rewound before and after the scan.

    Returns
    -------
    sections : list of MoldenSection
        Sections in file order.
    style : str or None
        Authoritative coordinate style (``'geometries'``, ``'atoms'``,
        ``'fr-coord'``) or ``None`` when no coordinate section exists.

    Raises
    ------
    ParseError
        If the file holds more than ``MAX_MOLDEN_SECTIONS`` sections.
    """
    sections: list[MoldenSection] = []
    style = None

    f.seek(0)
    header_offset = f.tell()
    raw = f.readline()
    while raw:
        offset = f.tell()
        line = decode_line(raw).strip()
        if line.startswith('['):
            name, argument = _split_header(line)
            if len(sections) == MAX_MOLDEN_SECTIONS:
                raise ParseError(
                    f"Too many sections in Molden file (maximum {MAX_MOLDEN_SECTIONS})"
                )
            sections.append(MoldenSection(name, offset, header_offset, argument))
            if name in _STYLE_PRECEDENCE and (
                style is None or _STYLE_PRECEDENCE.index(name) < _STYLE_PRECEDENCE.index(style)
            ):
                style = name
        header_offset = offset
        raw = f.readline()

    f.seek(0)
    return sections, style


def find_section(sections: list[MoldenSection], name: str) -> MoldenSection | None:
    """Return the first section called ``name``, or ``None``."""
    for section in sections:
        if section.name == name:
            return section
    return None


# -----------------------------------------------------------------------------
# Topology
# -----------------------------------------------------------------------------

def _count_section_lines(f: BinaryIO, offset: int) -> int:
    """Count non-blank lines from ``offset`` to the next section or EOF."""
    f.seek(offset)
    count = 0
    for raw in iter(f.readline, b''):
        line = decode_line(raw).strip()
        if line.startswith('['):
            break
        if line:
            count += 1
    return count


def read_molden_topology(
    f: BinaryIO,
    sections: list[MoldenSection],
    style: str | None,
) -> tuple[list[str], np.ndarray | None, str | None, int]:
    """
    Read the atoms of the authoritative coordinate section.

    Parameters
    ----------
    f : binary file object
        Open Molden file.
    sections : list of MoldenSection
        Index built by :func:`read_molden_sections`.
    style : str or None
        Authoritative style.

    Returns
    -------
    symbols : list of str
        Element symbols.
    atomic_numbers : np.ndarray of int or None
        Atomic numbers read from ``[Atoms]`` lines; ``None`` for the other
        styles, whose numbers are derived from the symbols.
    units : str or None
        Units declared by an ``[Atoms]`` header, else ``None``.
    data_offset : int
        Byte offset where frame data starts.

    Raises
    ------
    ParseError
        If the style is unknown, the section is missing or malformed, or an
        ``[Atoms]`` header names unrecognised units.
    UnsupportedOperationError
        If ``[GEOMETRIES]`` holds Z-matrices.
    """
    if style is None:
        raise ParseError("Unidentified Molden style: no coordinate section found")
    section = find_section(sections, style)
    if section is None:
        raise ParseError(f"Could not find section [{style}]")

    if style == STYLE_GEOMETRIES:
        if 'zmat' in section.argument:
            raise UnsupportedOperationError("Z-matrix geometries are not supported")
        f.seek(section.offset)
        return read_xyz_topology(f), None, None, section.offset

    units = None
    if style == STYLE_ATOMS and section.argument:
        if section.argument not in _ATOMS_UNITS:
            raise ParseError(f"Unrecognized units in [Atoms] header: {section.argument!r}")
        units = _ATOMS_UNITS[section.argument]

    n_atoms = _count_section_lines(f, section.offset)
    f.seek(section.offset)

    symbols = []
    numbers = np.empty(n_atoms, dtype=int) if style == STYLE_ATOMS else None
    for i in range(n_atoms):
        tokens = read_nonblank_line(f, f"atom {i + 1}").split()
        symbols.append(tokens[0])
        if numbers is not None:
            try:
                numbers[i] = int(tokens[2])
            except (IndexError, ValueError):
                raise ParseError(f"Missing atomic number for atom {i + 1}") from None
    return symbols, numbers, units, section.offset


# -----------------------------------------------------------------------------
# Energies
# -----------------------------------------------------------------------------

def find_energy_offset(f: BinaryIO, sections: list[MoldenSection]) -> int | None:
    """
    Locate the ``energy`` block of ``[GEOCONV]``.

    Returns
    -------
    int or None
        Byte offset of the first energy value, or ``None`` when the file has
        no ``[GEOCONV]`` energies.
    """
    section = find_section(sections, 'geoconv')
    if section is None:
        return None
    f.seek(section.offset)
    for raw in iter(f.readline, b''):
        line = decode_line(raw).strip().lower()
        if line.startswith('['):
            break
        if line == 'energy':
            return f.tell()
    return None


def read_energy(f: BinaryIO, offset: int) -> tuple[float | None, int | None]:
    """
    Read the energy stored at ``offset``.

    Returns
    -------
    energy : float or None
    next_offset : int or None
        Offset of the following value; ``None`` once the block is exhausted.
    """
    f.seek(offset)
    line = decode_line(f.readline()).strip()
    try:
        energy = float(line.split()[0])
    except (IndexError, ValueError):
        return None, None
    return energy, f.tell()


# -----------------------------------------------------------------------------
# Frame reading
# -----------------------------------------------------------------------------

def read_molden_frame(f: BinaryIO, style: str, n_atoms: int, factor: float) -> Frame:
    """
    Read one frame of the authoritative coordinate section.

    ``[GEOMETRIES]`` frames are XYZ blocks. ``[Atoms]`` and ``[FR-COORD]``
    hold a single headerless block of ``n_atoms`` lines.
    """
    if style == STYLE_GEOMETRIES:
        return read_xyz_frame(f, n_atoms, factor)

    skip_tokens = 2 if style == STYLE_ATOMS else 0
    lines = [read_nonblank_line(f, f"atom {i + 1}") for i in range(n_atoms)]
    coordinates, extra = parse_atom_lines(lines, factor, skip_tokens=skip_tokens)
    return Frame(coordinates=coordinates, extra=extra)
