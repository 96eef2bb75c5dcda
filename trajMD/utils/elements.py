"""
Element lookup for trajMD.

Atomic numbers and masses are taken from :mod:`ase.data`. The table is a
plain read-only object so trajectories can be given a different one (tests
use a two-element table).
"""

from typing import Mapping

import numpy as np
from ase.data import atomic_masses, atomic_numbers  # type: ignore[import-untyped]


#: Atomic number reported for symbols missing from the table.
UNKNOWN_NUMBER: int = -1
#: Mass reported for symbols missing from the table.
UNKNOWN_MASS: float = 0.0


class ElementTable:
    """
    Symbol to (atomic number, mass) lookup.

    Parameters
    ----------
    elements : mapping of str to (int, float), optional
        Explicit table. If ``None``, all real elements known to ASE are used
        (the dummy symbol ``'X'`` is left out).

    Notes
    -----
    Lookups first try the symbol as written and then its capitalised form,
    so ``'CL'`` and ``'cl'`` resolve to chlorine. Unknown symbols are not an
    error: they map to ``(UNKNOWN_NUMBER, UNKNOWN_MASS)``.
    """

    def __init__(self, elements: Mapping[str, tuple[int, float]] | None = None):
        if elements is None:
            elements = {
                symbol: (number, float(atomic_masses[number]))
                for symbol, number in atomic_numbers.items()
                if number > 0
            }
        self._elements = dict(elements)
        self._masses_by_number = {number: mass for number, mass in self._elements.values()}

    def __contains__(self, symbol: str) -> bool:
        return self._resolve(symbol) is not None

    def _resolve(self, symbol: str) -> tuple[int, float] | None:
        entry = self._elements.get(symbol)
        if entry is None:
            entry = self._elements.get(symbol.capitalize())
        return entry

    def lookup(self, symbol: str) -> tuple[int, float]:
        """Return ``(atomic_number, mass)`` for ``symbol``."""
        entry = self._resolve(symbol)
        if entry is None:
            return UNKNOWN_NUMBER, UNKNOWN_MASS
        return entry

    def mass_of_number(self, number: int) -> float:
        """Return the mass of the element with atomic number ``number``."""
        return self._masses_by_number.get(number, UNKNOWN_MASS)

    def numbers_and_masses(self, symbols: list[str]) -> tuple[np.ndarray, np.ndarray, list[str]]:
        """
        Look up a whole symbol list.

        Returns
        -------
        numbers : np.ndarray of int
        masses : np.ndarray of float
        unknown : list of str
            Distinct symbols that were not found, in order of appearance.
        """
        numbers = np.empty(len(symbols), dtype=int)
        masses = np.empty(len(symbols), dtype=np.float64)
        unknown: list[str] = []
        for i, symbol in enumerate(symbols):
            numbers[i], masses[i] = self.lookup(symbol)
            if numbers[i] == UNKNOWN_NUMBER and symbol not in unknown:
                unknown.append(symbol)
        return numbers, masses, unknown


_DEFAULT_TABLE: ElementTable | None = None


def default_element_table() -> ElementTable:
    """Return the shared ASE-backed element table, built on first use."""
    global _DEFAULT_TABLE
    if _DEFAULT_TABLE is None:
        _DEFAULT_TABLE = ElementTable()
    return _DEFAULT_TABLE
