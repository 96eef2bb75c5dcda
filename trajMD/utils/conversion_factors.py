"""
Length unit utilities for trajMD.

This module provides the linear length units understood by the trajectory
readers and the factors that convert them to Angstrom, the unit every frame
is returned in.

Notes
-----
- Supported unit tokens are ``'angs'``, ``'bohr'`` and ``'nm'``.
- The Bohr radius is taken from :mod:`scipy.constants` (CODATA).
"""

import scipy.constants as constants


ANGSTROM = 'angs'
BOHR = 'bohr'
NANOMETER = 'nm'

AVAILABLE_UNITS = frozenset({ANGSTROM, BOHR, NANOMETER})

#: Bohr radius expressed in Angstrom.
BOHR_TO_ANGSTROM: float = constants.physical_constants["Bohr radius"][0] / constants.angstrom

_LENGTH_FACTORS: dict[str, float] = {
    ANGSTROM: 1.0,
    BOHR: BOHR_TO_ANGSTROM,
    NANOMETER: constants.nano / constants.angstrom,
}

_DEFAULT_UNITS: dict[str, str] = {
    'XYZ': ANGSTROM,
    # Preliminary for Molden; the coordinate section may override it.
    'MOLDEN': ANGSTROM,
    'GRO': NANOMETER,
    'XTC': NANOMETER,
}


def validate_units(units: str) -> str:
    """
    Validate and normalise a length unit token.

    Parameters
    ----------
    units : str
        Unit token, case and surrounding whitespace are ignored.

    Returns
    -------
    str
        The normalised token (``'angs'``, ``'bohr'`` or ``'nm'``).

    Raises
    ------
    ValueError
        If the token is not a supported length unit.
    """
    normalised = units.lower().strip()
    if normalised not in AVAILABLE_UNITS:
        raise ValueError(
            f"Supported units are: {', '.join(sorted(AVAILABLE_UNITS))}; got {units!r}"
        )
    return normalised


def default_units(file_format: str) -> str:
    """
    Return the native length unit of a trajectory format.

    Parameters
    ----------
    file_format : str
        One of ``'XYZ'``, ``'MOLDEN'``, ``'GRO'``, ``'XTC'``.

    Raises
    ------
    ValueError
        If the format has no default unit (e.g. an unresolved format).
    """
    try:
        return _DEFAULT_UNITS[file_format]
    except KeyError:
        raise ValueError(f"No default units for format {file_format!r}") from None


def length_factor(units: str) -> float:
    """
    Return the factor converting lengths in ``units`` to Angstrom.

    Examples
    --------
    >>> length_factor('nm')
    10.0
    >>> round(length_factor('bohr'), 6)
    0.529177
    """
    return _LENGTH_FACTORS[validate_units(units)]
