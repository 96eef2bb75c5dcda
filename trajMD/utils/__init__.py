"""
Utility functions for trajMD.

This package provides the unit conversions and the element table shared by
all trajectory formats.
"""

from .conversion_factors import (
    AVAILABLE_UNITS,
    BOHR_TO_ANGSTROM,
    default_units,
    length_factor,
    validate_units,
)
from .elements import ElementTable, default_element_table

__all__ = [
    "AVAILABLE_UNITS",
    "BOHR_TO_ANGSTROM",
    "ElementTable",
    "default_element_table",
    "default_units",
    "length_factor",
    "validate_units",
]
