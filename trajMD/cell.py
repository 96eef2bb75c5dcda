"""
Periodic box handling for trajMD.

Boxes follow the convention that rows of the box matrix are lattice vectors:
``M[0] = a``, ``M[1] = b``, ``M[2] = c``. Only orthogonal wrapping is
supported: each Cartesian axis is folded independently into ``[0, L)``
using the corresponding diagonal element.

Key operations:

- Box lengths: ``L = diag(M)`` or an explicit 3-vector
- Periodic wrapping: ``r_wrapped = r - floor(r / L) * L``
"""

import warnings

import numpy as np

#: Absolute tolerance for deciding whether off-diagonal box matrix elements
#: are zero, i.e. whether the box is orthorhombic.
ORTHORHOMBIC_TOLERANCE: float = 1e-6


def is_orthorhombic(
    box_matrix: np.ndarray, atol: float = ORTHORHOMBIC_TOLERANCE
) -> bool:
    """
    Return ``True`` if all off-diagonal elements of *box_matrix* are below
    *atol*, i.e. the box is orthorhombic (or cubic).

    Parameters
    ----------
    box_matrix : np.ndarray, shape (3, 3)
        Box matrix with rows = lattice vectors.
    atol : float, optional
        Absolute tolerance for off-diagonal elements (default:
        ``ORTHORHOMBIC_TOLERANCE``).
    """
    off_diagonal = box_matrix[~np.eye(3, dtype=bool)]
    return bool(np.all(np.abs(off_diagonal) < atol))


def box_lengths(box) -> np.ndarray:
    """
    Reduce a box specification to three edge lengths.

    Parameters
    ----------
    box : array_like, shape (3,) or (3, 3)
        Edge lengths, or a box matrix whose diagonal is used.

    Returns
    -------
    np.ndarray, shape (3,)
        Positive edge lengths.

    Raises
    ------
    ValueError
        If the box has the wrong shape or any length is not positive and
        finite.

    Warns
    -----
    UserWarning
        If a box matrix has off-diagonal terms; they are ignored.
    """
    box = np.asarray(box, dtype=np.float64)
    if box.shape == (3, 3):
        if not is_orthorhombic(box):
            warnings.warn(
                "Box has off-diagonal components; only the diagonal is used for wrapping.",
                UserWarning,
                stacklevel=2,
            )
        lengths = np.diag(box).copy()
    elif box.shape == (3,):
        lengths = box.copy()
    else:
        raise ValueError(f"Box must have shape (3,) or (3, 3), got {box.shape}")

    if not np.all(np.isfinite(lengths)):
        raise ValueError(f"Box dimensions must be finite. Got: {tuple(lengths)}")
    if not np.all(lengths > 0):
        raise ValueError(f"Box dimensions must be positive. Got: {tuple(lengths)}")
    return lengths


def wrap_positions(positions: np.ndarray, lengths: np.ndarray) -> np.ndarray:
    """
    Wrap Cartesian positions into an orthogonal box anchored at the origin.

    Parameters
    ----------
    positions : np.ndarray, shape (..., 3)
        Cartesian positions (may lie outside the box).
    lengths : np.ndarray, shape (3,)
        Positive box edge lengths.

    Returns
    -------
    np.ndarray, shape (..., 3)
        Wrapped positions, every component in ``[0, L)``.

    Examples
    --------
    >>> wrap_positions(np.array([12.0, -3.0, 5.0]), np.array([10.0, 10.0, 10.0]))
    array([2., 7., 5.])
    """
    fractional = positions / lengths
    wrapped = (fractional - np.floor(fractional)) * lengths
    # tiny negative inputs round up to exactly L
    return np.where(wrapped >= lengths, wrapped - lengths, wrapped)
