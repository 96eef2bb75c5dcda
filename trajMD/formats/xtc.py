"""
XTC (GROMACS compressed) trajectory backend for trajMD.

Decoding is delegated to the XDR bindings of MDAnalysis
(:class:`MDAnalysis.lib.formats.libmdaxdr.XTCFile`). This module only adapts
them to the small codec interface used by :class:`trajMD.Trajectory`:

- ``codec = factory(filename)`` opens the file,
- ``codec.n_atoms`` gives the atom count,
- ``codec.read_next()`` returns the next raw frame (with ``x``, ``box``,
  ``step`` and ``time`` attributes, lengths in nm) or ``None`` at the end,
- ``codec.close()`` releases the handle.

Any object following the same protocol can be passed to a trajectory as
``xtc_codec``.
"""

from typing import Any, Callable

from MDAnalysis.lib.formats.libmdaxdr import XTCFile  # type: ignore[import-untyped]
import numpy as np

from ..backends import get_xtc_backend
from ._base import CorruptFrameError, Frame, TrajectoryIOError, UnsupportedOperationError


class MDAnalysisXTCCodec:
    """
    XTC codec backed by MDAnalysis.

    Parameters
    ----------
    filename : str
        Path to the ``.xtc`` file.

    Raises
    ------
    TrajectoryIOError
        If the file cannot be opened.
    """

    def __init__(self, filename: str):
        try:
            self._file = XTCFile(filename, 'r')
        except OSError as e:
            raise TrajectoryIOError(f"Error opening XTC file {filename}: {e}") from e

    @property
    def n_atoms(self) -> int:
        return int(self._file.n_atoms)

    def read_next(self) -> Any:
        """Return the next frame, or ``None`` when the data is exhausted."""
        try:
            return self._file.read()
        except (StopIteration, EOFError):
            return None
        except OSError as e:
            raise CorruptFrameError(f"Corrupted frame: {e}") from e

    def close(self) -> None:
        self._file.close()


def get_xtc_codec() -> Callable[[str], Any]:
    """
    Return the codec factory selected by ``TRAJMD_XTC_BACKEND``.

    Raises
    ------
    UnsupportedOperationError
        If XTC support is disabled.
    """
    if get_xtc_backend() == 'none':
        raise UnsupportedOperationError(
            "XTC support is disabled (TRAJMD_XTC_BACKEND=none)"
        )
    return MDAnalysisXTCCodec


def read_xtc_topology(factory: Callable[[str], Any], filename: str) -> tuple[int, Any]:
    """
    Determine the atom count of an XTC file from its first frame.

    The codec used for the probe is closed again; a fresh codec positioned
    at frame zero is returned with the atom count.

    Raises
    ------
    TrajectoryIOError
        If the file holds no frame.
    """
    codec = factory(filename)
    try:
        n_atoms = codec.n_atoms
        if codec.read_next() is None:
            raise TrajectoryIOError(f"Error reading first frame of {filename}")
    finally:
        codec.close()
    return n_atoms, factory(filename)


def read_xtc_frame(codec: Any, n_atoms: int, factor: float) -> Frame | None:
    """
    Decode the next XTC frame.

    Returns
    -------
    Frame or None
        Frame with coordinates and box in Angstrom, ``step`` and ``time``;
        ``None`` at the end of the data.
    """
    raw = codec.read_next()
    if raw is None:
        return None
    coordinates = np.asarray(raw.x, dtype=np.float64) * factor
    if coordinates.shape != (n_atoms, 3):
        raise CorruptFrameError(
            f"Corrupted frame: expected {n_atoms} atoms, got {coordinates.shape[0]}"
        )
    return Frame(
        coordinates=coordinates,
        box=np.asarray(raw.box, dtype=np.float64) * factor,
        step=int(raw.step),
        time=float(raw.time),
    )
