"""Shared fixtures for unit tests."""

import numpy as np
import pytest

from trajMD.utils.elements import ElementTable


WATER_XYZ = """3
frame0
O   0.000000   0.000000   0.117300
H   0.000000   0.757200  -0.469200
H   0.000000  -0.757200  -0.469200
3
frame1
O   0.100000   0.000000   0.117300
H   0.100000   0.757200  -0.469200
H   0.100000  -0.757200  -0.469200
"""

WATER_GRO = """Water box
    3
    1SOL     OW    1   0.126   1.624   1.679  0.1227 -0.0580  0.0434
    1SOL    HW1    2   0.190   1.661   1.747  0.8085  0.3191 -0.7791
    1SOL    HW2    3   0.177   1.568   1.613 -0.9045 -2.6469  1.3180
   1.86206   1.86206   1.86206
Water box t=1
    3
    1SOL     OW    1   0.226   1.724   1.779  0.1227 -0.0580  0.0434
    1SOL    HW1    2   0.290   1.761   1.847  0.8085  0.3191 -0.7791
    1SOL    HW2    3   0.277   1.668   1.713 -0.9045 -2.6469  1.3180
   1.86206   1.86206   1.86206
"""

MOLDEN_GEOMETRIES = """[Molden Format]
[Atoms] Angs
O     1    8    0.000000    0.000000    0.117300
H     2    1    0.000000    0.757200   -0.469200
H     3    1    0.000000   -0.757200   -0.469200
[GEOCONV]
energy
-76.0107
-76.0211
max-force
0.0123
0.0010
[GEOMETRIES] XYZ
3
step 1
O   0.000000   0.000000   0.120000
H   0.000000   0.760000  -0.470000
H   0.000000  -0.760000  -0.470000
3
step 2
O   0.000000   0.000000   0.117300
H   0.000000   0.757200  -0.469200
H   0.000000  -0.757200  -0.469200
"""

MOLDEN_ATOMS_AU = """[Molden Format]
[Atoms] AU
O     1    8    0.000000    0.000000    0.221664
H     2    1    0.000000    1.430901   -0.886656
H     3    1    0.000000   -1.430901   -0.886656
[GTO]
"""

MOLDEN_FR_COORD = """[Molden Format]
[FREQ]
1595.2
[FR-COORD]
o    0.000000    0.000000    0.221664
h    0.000000    1.430901   -0.886656
h    0.000000   -1.430901   -0.886656
"""


def write_file(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return str(path)


@pytest.fixture
def water_xyz(tmp_path):
    """Two-frame water trajectory in XYZ format."""
    return write_file(tmp_path, "water.xyz", WATER_XYZ)


@pytest.fixture
def water_gro(tmp_path):
    """Two-frame water trajectory in GRO format with velocities."""
    return write_file(tmp_path, "water.gro", WATER_GRO)


@pytest.fixture
def molden_geometries(tmp_path):
    """Molden optimisation output with [Atoms], [GEOCONV] and [GEOMETRIES]."""
    return write_file(tmp_path, "opt.molden", MOLDEN_GEOMETRIES)


@pytest.fixture
def molden_atoms_au(tmp_path):
    """Molden file with a single [Atoms] AU geometry."""
    return write_file(tmp_path, "atoms.molden", MOLDEN_ATOMS_AU)


@pytest.fixture
def molden_fr_coord(tmp_path):
    """Molden frequency output with [FR-COORD] only."""
    return write_file(tmp_path, "freq.molden", MOLDEN_FR_COORD)


@pytest.fixture
def small_table():
    """Element table holding only hydrogen and oxygen."""
    return ElementTable({'H': (1, 1.008), 'O': (8, 15.999)})


@pytest.fixture
def water_coordinates():
    return np.array([
        [0.0, 0.0, 0.1173],
        [0.0, 0.7572, -0.4692],
        [0.0, -0.7572, -0.4692],
    ])
