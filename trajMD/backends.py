"""
Backend configuration for trajMD.

This module selects the codec used to decode XTC (GROMACS compressed)
trajectories.

The backend can be configured via the TRAJMD_XTC_BACKEND environment variable:
- 'mdanalysis': XDR bindings shipped with MDAnalysis (default)
- 'none': XTC support disabled; opening an XTC file raises
  UnsupportedOperationError

Example
-------
>>> import os
>>> os.environ['TRAJMD_XTC_BACKEND'] = 'none'  # Before importing trajMD
"""

from __future__ import annotations

import os

XTC_BACKEND_ENV_VAR = 'TRAJMD_XTC_BACKEND'
AVAILABLE_XTC_BACKENDS = frozenset({'mdanalysis', 'none'})
DEFAULT_XTC_BACKEND = 'mdanalysis'


def _resolve_xtc_backend() -> str:
    """Resolve and validate the XTC backend from the environment variable.

    Called once at module import time to ensure the backend is valid.

    Returns
    -------
    str
        Validated backend name ('mdanalysis' or 'none').

    Raises
    ------
    ValueError
        If the environment variable contains an invalid backend name.
    """
    value = os.environ.get(XTC_BACKEND_ENV_VAR, DEFAULT_XTC_BACKEND).lower().strip()
    if not value:
        return DEFAULT_XTC_BACKEND
    if value not in AVAILABLE_XTC_BACKENDS:
        raise ValueError(
            f"Invalid {XTC_BACKEND_ENV_VAR} '{value}'. "
            f"Must be one of: {', '.join(sorted(AVAILABLE_XTC_BACKENDS))}"
        )
    return value


XTC_BACKEND = _resolve_xtc_backend()


def get_xtc_backend() -> str:
    """
    Get the configured XTC backend.

    Returns
    -------
    str
        Backend name ('mdanalysis' or 'none').
    """
    return XTC_BACKEND
