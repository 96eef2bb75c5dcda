"""
pytest test suite for the XYZ reader and writer.
"""

import io

import numpy as np
import pytest

from trajMD.formats._base import ParseError
from trajMD.formats.xyz import (
    format_xyz_frame,
    parse_atom_lines,
    read_xyz_frame,
    read_xyz_topology,
)


def handle(text):
    return io.BytesIO(text.encode())


def test_read_topology_symbols(water_xyz):
    with open(water_xyz, "rb") as f:
        assert read_xyz_topology(f) == ['O', 'H', 'H']


def test_read_topology_bad_count():
    with pytest.raises(ParseError, match="Incorrect atom number"):
        read_xyz_topology(handle("three\ncomment\nO 0 0 0\n"))


def test_read_topology_truncated():
    with pytest.raises(ParseError, match="end of file"):
        read_xyz_topology(handle("3\ncomment\nO 0 0 0\n"))


def test_read_frame_values():
    f = handle("2\nhello world\nO 1.0 2.0 3.0\nH -1.0 -2.0 -3.5\n")
    frame = read_xyz_frame(f, 2, 1.0)
    np.testing.assert_allclose(frame.coordinates, [[1, 2, 3], [-1, -2, -3.5]])
    assert frame.comment == "hello world"
    assert frame.extra is None
    assert frame.velocities is None and frame.box is None


def test_read_frame_scales_by_factor():
    frame = read_xyz_frame(handle("1\n\nO 1.0 2.0 3.0\n"), 1, 0.5)
    np.testing.assert_allclose(frame.coordinates, [[0.5, 1.0, 1.5]])


def test_read_frame_skips_blank_lines_before_count():
    frame = read_xyz_frame(handle("\n   \n1\nc\nO 1.0 2.0 3.0\n"), 1, 1.0)
    assert frame.comment == "c"


def test_read_frame_invalid_utf8_comment():
    with pytest.raises(ParseError, match="Undecodable"):
        read_xyz_frame(io.BytesIO(b"1\ncaf\xe9\nO 0 0 0\n"), 1, 1.0)


def test_read_frame_count_mismatch():
    with pytest.raises(ParseError, match="Number of atoms different than expected"):
        read_xyz_frame(handle("2\nc\nO 0 0 0\nH 0 0 0\n"), 3, 1.0)


def test_read_frame_missing_coordinate():
    with pytest.raises(ParseError, match="Missing coordinate"):
        read_xyz_frame(handle("1\nc\nO 0.0 1.0\n"), 1, 1.0)


def test_read_frame_non_numeric_coordinate():
    with pytest.raises(ParseError, match="Invalid coordinate"):
        read_xyz_frame(handle("1\nc\nO 0.0 abc 1.0\n"), 1, 1.0)


class TestExtraColumn:
    """The first atom decides whether the frame carries a fourth column."""

    def test_extra_on_every_atom(self):
        coords, extra = parse_atom_lines(["O 0 0 0 -0.8", "H 1 0 0 0.4"], 1.0)
        np.testing.assert_allclose(extra, [-0.8, 0.4])

    def test_extra_is_not_scaled(self):
        _, extra = parse_atom_lines(["O 1 1 1 -0.8"], 10.0)
        np.testing.assert_allclose(extra, [-0.8])

    def test_extra_missing_on_later_atom(self):
        with pytest.raises(ParseError, match="Inconsistent extra data"):
            parse_atom_lines(["O 0 0 0 -0.8", "H 1 0 0"], 1.0)

    def test_extra_only_on_last_atom_is_rejected(self):
        with pytest.raises(ParseError, match="Unexpected extra data"):
            parse_atom_lines(["O 0 0 0", "H 1 0 0", "H 2 0 0 0.4"], 1.0)

    def test_extra_only_on_single_atom_frame(self):
        _, extra = parse_atom_lines(["O 0 0 0 0.4"], 1.0)
        np.testing.assert_allclose(extra, [0.4])

    def test_skip_tokens(self):
        coords, extra = parse_atom_lines(["O 1 8 0.0 0.5 1.0"], 1.0, skip_tokens=2)
        np.testing.assert_allclose(coords, [[0.0, 0.5, 1.0]])
        assert extra is None


def test_format_frame_layout():
    text = format_xyz_frame(['O', 'H'], np.array([[0.0, 1.0, -1.0], [2.5, 0.0, 0.0]]), "step 1")
    lines = text.splitlines()
    assert lines[0] == "2"
    assert lines[1] == "step 1"
    assert lines[2] == "O   0.00000000   1.00000000  -1.00000000"
    assert text.endswith("\n")


def test_format_frame_blank_comment():
    text = format_xyz_frame(['O'], np.zeros((1, 3)))
    assert text.splitlines()[1] == ""


def test_format_frame_divides_by_factor():
    text = format_xyz_frame(['O'], np.array([[10.0, 20.0, 30.0]]), factor=10.0)
    assert text.splitlines()[2] == "O   1.00000000   2.00000000   3.00000000"
