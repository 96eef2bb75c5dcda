"""
Trajectory sessions for trajMD.

A :class:`Trajectory` owns one open trajectory file. Opening it detects the
format, reads the topology once and positions the session at the first
frame; afterwards frames are read or written one at a time::

    with Trajectory('water.xyz') as traj:
        frame = traj.read()            # Frame, or None at the end
        while frame is not None:
            ...
            frame = traj.read()

    with Trajectory('out.gro', 'w', symbols=['OW', 'HW1', 'HW2']) as traj:
        traj.write(coordinates, box=box, comment='water')

All lengths in returned frames are in Angstrom, whatever the file units.
"""

import warnings
from typing import Any, Callable, Iterator, Sequence

import numpy as np
from tqdm import tqdm

from .cell import box_lengths, wrap_positions
from .formats._base import (
    GRO,
    GUESS,
    MOLDEN,
    WRITABLE_FORMATS,
    XTC,
    XYZ,
    Frame,
    ShapeError,
    StateError,
    TrajectoryIOError,
    UnsupportedOperationError,
    at_end_of_stream,
    resolve_format,
)
from .formats.gro import format_gro_frame, read_gro_frame, read_gro_topology
from .formats.molden import (
    STYLE_FR_COORD,
    STYLE_GEOMETRIES,
    find_energy_offset,
    read_energy,
    read_molden_frame,
    read_molden_sections,
    read_molden_topology,
)
from .formats.xtc import get_xtc_codec, read_xtc_frame, read_xtc_topology
from .formats.xyz import format_xyz_frame, read_xyz_frame, read_xyz_topology
from .utils.conversion_factors import BOHR, default_units, length_factor, validate_units
from .utils.elements import ElementTable, default_element_table


_MODES = ('r', 'w', 'a')


class Trajectory:
    """
    Streaming reader/writer for a single trajectory file.

    Reading is implemented for XYZ, Molden, GRO and XTC; writing for XYZ and
    GRO. The session is created for reading by giving a file name, or for
    writing by also giving the atom symbols.

    Parameters
    ----------
    filename : str
        Path of the trajectory file.
    mode : str, optional
        ``'r'`` (default), ``'w'`` (file must not exist) or ``'a'``.
    symbols : sequence of str, optional
        Atom symbols (GRO: atom names). Required for ``'w'``/``'a'``,
        refused for ``'r'``.
    resids : array_like of int, optional
        Residue numbers written to GRO files (write modes only).
    resnames : sequence of str, optional
        Residue names written to GRO files (write modes only).
    format : str, optional
        ``'XYZ'``, ``'MOLDEN'``, ``'GRO'``, ``'XTC'`` or ``'GUESS'``
        (default), case-insensitive.
    units : str, optional
        Length units of the file: ``'angs'``, ``'bohr'`` or ``'nm'``.
        Defaults to Angstrom for XYZ/Molden and nm for GRO/XTC.
    element_table : ElementTable, optional
        Source of atomic numbers and masses (default: ASE data).
    xtc_codec : callable, optional
        Factory ``factory(filename) -> codec`` used for XTC files instead of
        the configured backend (see :mod:`trajMD.formats.xtc`).

    Attributes
    ----------
    filename, mode, format, units : str
        Session configuration.
    n_atoms : int
        Atom count, fixed once the topology is known.
    last_frame : int
        Index of the last frame read or written; -1 before the first.
    symbols : list of str or None
        Atom symbols (``None`` for XTC, which has no topology).
    atomic_numbers : np.ndarray or None
        Atomic numbers; -1 for unknown symbols.
    masses : np.ndarray or None
        Atomic masses; 0.0 for unknown symbols.
    resids : np.ndarray or None
        Residue numbers (GRO).
    resnames : list of str or None
        Residue names (GRO).
    molden_style : str or None
        Authoritative Molden coordinate section.
    molden_sections : list of MoldenSection
        Section index of a Molden file.
    data_cursor : int
        Byte offset of the next frame in text formats.
    aux_cursor : int or None
        Byte offset of the next Molden ``[GEOCONV]`` energy.

    Raises
    ------
    FormatUnresolvedError
        If the format is invalid or cannot be guessed.
    StateError
        If symbols, resids or resnames are given in ``'r'`` mode, or
        symbols are missing in ``'w'``/``'a'``.
    TrajectoryIOError
        If the file cannot be opened, or exists in ``'w'`` mode.
    ParseError
        If the topology cannot be read.
    UnsupportedOperationError
        If writing is requested for Molden or XTC, or XTC support is off.
    """

    def __init__(
        self,
        filename: str,
        mode: str = 'r',
        symbols: Sequence[str] | None = None,
        resids: Sequence[int] | np.ndarray | None = None,
        resnames: Sequence[str] | None = None,
        *,
        format: str = GUESS,
        units: str | None = None,
        element_table: ElementTable | None = None,
        xtc_codec: Callable[[str], Any] | None = None,
    ):
        if mode not in _MODES:
            raise ValueError(f"Incorrect mode {mode!r}. Expected one of {_MODES}.")

        self.filename = str(filename)
        self.mode = mode
        self.format = resolve_format(self.filename, mode, format)
        self.units = validate_units(units) if units is not None else default_units(self.format)
        self._units_given = units is not None
        self._elements = element_table if element_table is not None else default_element_table()

        self._n_atoms = 0
        self._last_frame = -1
        self.symbols: list[str] | None = None
        self.atomic_numbers: np.ndarray | None = None
        self.masses: np.ndarray | None = None
        self.resids: np.ndarray | None = None
        self.resnames: list[str] | None = None
        self.molden_style: str | None = None
        self.molden_sections: list = []
        self.data_cursor = 0
        self.aux_cursor: int | None = None

        self._file = None
        self._codec = None
        self._closed = False

        if mode == 'r':
            given = [name for name, value in
                     (('symbols', symbols), ('resids', resids), ('resnames', resnames))
                     if value is not None]
            if given:
                raise StateError(
                    f"Don't use {', '.join(given)} in 'r' mode; they are read from the file."
                )

        if mode == 'r':
            self._open_for_reading(xtc_codec)
        else:
            self._open_for_writing(symbols, resids, resnames)

    # -------------------------------------------------------------------------
    # Opening
    # -------------------------------------------------------------------------
    def _open_for_writing(self, symbols, resids, resnames) -> None:
        if self.format not in WRITABLE_FORMATS:
            raise UnsupportedOperationError(
                f"Writing in {self.format} format is not implemented"
            )
        if symbols is None:
            raise StateError(f"Need atomic symbols to open {self.filename} in '{self.mode}' mode")
        if isinstance(symbols, str):
            raise ShapeError("symbols must be a sequence of strings, not a single string")

        self.symbols = [str(s) for s in symbols]
        self._n_atoms = len(self.symbols)
        if resids is not None:
            self.resids = np.asarray(resids, dtype=int)
            if self.resids.shape != (self._n_atoms,):
                raise ShapeError(f"resids must have shape ({self._n_atoms},), got {self.resids.shape}")
        if resnames is not None:
            self.resnames = [str(r) for r in resnames]
            if len(self.resnames) != self._n_atoms:
                raise ShapeError(f"resnames must have {self._n_atoms} entries, got {len(self.resnames)}")
        self.atomic_numbers, self.masses, _ = self._elements.numbers_and_masses(self.symbols)

        # 'x' refuses to touch an existing file
        open_mode = 'x' if self.mode == 'w' else 'a'
        try:
            self._file = open(self.filename, open_mode, encoding="utf-8")
        except FileExistsError as e:
            raise TrajectoryIOError(
                e.errno, "Selected 'w' mode, but file exists", self.filename
            ) from e
        except OSError as e:
            raise TrajectoryIOError(e.errno, e.strerror, self.filename) from e

    def _open_for_reading(self, xtc_codec) -> None:
        if self.format == XTC:
            factory = xtc_codec if xtc_codec is not None else get_xtc_codec()
            self._n_atoms, self._codec = read_xtc_topology(factory, self.filename)
            return

        try:
            self._file = open(self.filename, "rb")
        except OSError as e:
            raise TrajectoryIOError(e.errno, e.strerror, self.filename) from e

        try:
            self._read_topology()
        except Exception:
            self._file.close()
            self._closed = True
            raise

    def _read_topology(self) -> None:
        f = self._file
        numbers = None
        if self.format == XYZ:
            symbols = read_xyz_topology(f)
            self.data_cursor = 0
        elif self.format == GRO:
            symbols, self.resids, self.resnames = read_gro_topology(f)
            self.data_cursor = 0
        else:
            self.molden_sections, self.molden_style = read_molden_sections(f)
            if self.molden_style == STYLE_FR_COORD and not self._units_given:
                self.units = BOHR
            symbols, numbers, section_units, self.data_cursor = read_molden_topology(
                f, self.molden_sections, self.molden_style
            )
            if section_units is not None:
                self.units = section_units
            if self.molden_style == STYLE_GEOMETRIES:
                self.aux_cursor = find_energy_offset(f, self.molden_sections)

        self.symbols = symbols
        self._n_atoms = len(symbols)
        self.atomic_numbers, self.masses, unknown = self._elements.numbers_and_masses(symbols)
        if numbers is not None:
            self.atomic_numbers = numbers
            self.masses = np.array([self._elements.mass_of_number(z) for z in numbers], dtype=np.float64)
            unknown = []
        if unknown and self.format != GRO:
            warnings.warn(
                f"Unknown element symbols {unknown} in {self.filename}; "
                "atomic number -1 and mass 0 assigned.",
                UserWarning,
                stacklevel=4,
            )
        f.seek(self.data_cursor)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def n_atoms(self) -> int:
        """Number of atoms in every frame."""
        return self._n_atoms

    @property
    def last_frame(self) -> int:
        """Index of the last frame read or written; -1 if none yet."""
        return self._last_frame

    @property
    def factor(self) -> float:
        """Conversion factor from the file length units to Angstrom."""
        return length_factor(self.units)

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------
    def _check_open(self, modes: str, message: str) -> None:
        if self._closed:
            raise StateError(f"I/O operation on closed trajectory {self.filename}")
        if self.mode not in modes:
            raise StateError(message)

    @staticmethod
    def _wrap_lengths(box) -> np.ndarray:
        try:
            return box_lengths(box)
        except ValueError as e:
            raise StateError(f"Cannot wrap coordinates: {e}") from e

    def read(self, wrap: bool = False, box=None) -> Frame | None:
        """
        Read the next frame.

        Parameters
        ----------
        wrap : bool, optional
            Wrap coordinates into the periodic box (default: False).
        box : array_like, shape (3,) or (3, 3), optional
            Box used for wrapping, in Angstrom. If omitted, GRO and XTC frames
            are wrapped into their own box; XYZ and Molden require it.

        Returns
        -------
        Frame or None
            The frame, or ``None`` when no frames are left.

        Raises
        ------
        StateError
            If the session is not in ``'r'`` mode, is closed, or wrapping is
            requested without a usable box.
        ParseError
            If the frame is malformed or its atom count differs.
        CorruptFrameError
            If the XTC codec cannot decode the frame.
        """
        self._check_open('r', "Trying to read in write mode")

        lengths = None
        if wrap:
            if box is not None:
                lengths = self._wrap_lengths(box)
            elif self.format in (XYZ, MOLDEN):
                raise StateError("Requested PBC, but box information is missing")

        aux_cursor = self.aux_cursor
        if self.format == XTC:
            frame = read_xtc_frame(self._codec, self._n_atoms, self.factor)
            if frame is None:
                return None
            data_cursor = self.data_cursor
        else:
            f = self._file
            f.seek(self.data_cursor)
            if at_end_of_stream(f, section_stops=self.format == MOLDEN):
                return None
            if self.format == XYZ:
                frame = read_xyz_frame(f, self._n_atoms, self.factor)
            elif self.format == GRO:
                frame = read_gro_frame(f, self._n_atoms, self.factor)
            else:
                frame = read_molden_frame(f, self.molden_style, self._n_atoms, self.factor)
            data_cursor = f.tell()
            if aux_cursor is not None:
                frame.energy, aux_cursor = read_energy(f, aux_cursor)

        if wrap:
            if lengths is None:
                lengths = self._wrap_lengths(frame.box)
            frame.coordinates = wrap_positions(frame.coordinates, lengths)

        self.data_cursor = data_cursor
        self.aux_cursor = aux_cursor
        self._last_frame += 1
        return frame

    def iter_frames(self, wrap: bool = False, box=None) -> Iterator[Frame]:
        """
        Iterate over the remaining frames.

        Parameters are passed to :meth:`read` for every frame.
        """
        while True:
            frame = self.read(wrap=wrap, box=box)
            if frame is None:
                return
            yield frame

    def __iter__(self) -> Iterator[Frame]:
        return self.iter_frames()

    def read_all(self, wrap: bool = False, box=None, progress: bool = False) -> list[Frame]:
        """
        Read all remaining frames into a list.

        Parameters
        ----------
        wrap, box
            Passed to :meth:`read`.
        progress : bool, optional
            Show a progress bar (default: False).
        """
        return list(tqdm(
            self.iter_frames(wrap=wrap, box=box),
            desc=f"Reading {self.filename}",
            unit="frame",
            disable=not progress,
        ))

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------
    @staticmethod
    def _as_array(values, shape: tuple[int, int], name: str) -> np.ndarray:
        try:
            array = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ShapeError(f"{name} must be a numeric array: {e}") from e
        if array.ndim != 2:
            raise ShapeError(f"{name} array must be 2D, got {array.ndim}D")
        if array.shape != shape:
            raise ShapeError(f"Shape of the {name} array must be {shape}, got {array.shape}")
        return array

    def write(self, coordinates, velocities=None, box=None, comment: str | None = None) -> None:
        """
        Append one frame to the file.

        Parameters
        ----------
        coordinates : array_like, shape (n_atoms, 3)
            Positions in Angstrom.
        velocities : array_like, shape (n_atoms, 3), optional
            Velocities (GRO only; ignored for XYZ).
        box : array_like, shape (3, 3), optional
            Box matrix in Angstrom (GRO only; ignored for XYZ).
        comment : str, optional
            Comment/title line.

        Raises
        ------
        StateError
            If the session is in ``'r'`` mode or closed.
        ShapeError
            If any array has the wrong shape. Nothing is written.
        TrajectoryIOError
            If writing to the file fails.
        """
        self._check_open('wa', "Trying to write in read mode")

        n = self._n_atoms
        coordinates = self._as_array(coordinates, (n, 3), "coordinates")
        if velocities is not None:
            velocities = self._as_array(velocities, (n, 3), "velocities")
        if box is not None:
            box = self._as_array(box, (3, 3), "box")

        if self.format == XYZ:
            text = format_xyz_frame(self.symbols, coordinates, comment, self.factor)
        else:
            text = format_gro_frame(
                self.symbols, coordinates, velocities, box, comment,
                self.resids, self.resnames, self.factor,
            )

        try:
            self._file.write(text)
            self._file.flush()
        except OSError as e:
            raise TrajectoryIOError(e.errno, f"Could not write: {e.strerror}", self.filename) from e
        self._last_frame += 1

    # -------------------------------------------------------------------------
    # Resource handling
    # -------------------------------------------------------------------------
    def close(self) -> None:
        """Release the file handle or codec. Safe to call more than once."""
        if self._file is not None:
            self._file.close()
            self._file = None
        if self._codec is not None:
            self._codec.close()
            self._codec = None
        self._closed = True

    def __enter__(self) -> "Trajectory":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Trajectory('{self.filename}', format='{self.format}', "
            f"mode='{self.mode}', units='{self.units}')"
        )
