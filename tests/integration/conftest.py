"""Shared fixtures and configuration for integration tests."""

import numpy as np
import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def assert_arrays_close(actual, expected, rtol=1e-6, atol=1e-8, context=""):
    """Assert arrays are close with informative error messages."""
    try:
        np.testing.assert_allclose(actual, expected, rtol=rtol, atol=atol)
    except AssertionError as e:
        max_diff = np.max(np.abs(actual - expected))
        raise AssertionError(f"{context}\nMax absolute diff: {max_diff}\n{e}")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def random_frames():
    """Five frames of 20 atoms scattered in a 30 A box, with velocities."""
    rng = np.random.default_rng(42)
    positions = rng.uniform(0.0, 30.0, size=(5, 20, 3))
    velocities = rng.normal(0.0, 0.5, size=(5, 20, 3))
    return positions, velocities


@pytest.fixture
def box():
    return np.diag([30.0, 30.0, 30.0])
