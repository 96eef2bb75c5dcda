"""
pytest test suite for the XTC codec adapter.

Real files are produced with the MDAnalysis XDR writer; decode failures are
simulated with an in-memory codec.
"""

from types import SimpleNamespace

import numpy as np
import pytest
from MDAnalysis.lib.formats.libmdaxdr import XTCFile

from trajMD import Trajectory
from trajMD.formats._base import CorruptFrameError, TrajectoryIOError
from trajMD.formats.xtc import MDAnalysisXTCCodec, read_xtc_frame, read_xtc_topology


N_ATOMS = 4
BOX_NM = np.diag([2.0, 2.0, 2.0]).astype(np.float32)


def frame_positions(step):
    return np.array([
        [0.1, 0.2, 0.3],
        [0.4, 0.5, 0.6],
        [1.0, 1.5, 1.9],
        [2.1, -0.3, 0.7],
    ], dtype=np.float32) + np.float32(0.01 * step)


@pytest.fixture
def xtc_file(tmp_path):
    """Three-frame XTC file written by MDAnalysis."""
    path = str(tmp_path / "traj.xtc")
    with XTCFile(path, 'w') as f:
        for step in range(3):
            f.write(frame_positions(step), BOX_NM, step * 10, step * 0.5)
    return path


class FakeCodec:
    """In-memory codec following the MDAnalysisXTCCodec protocol."""

    instances = []

    def __init__(self, frames, n_atoms=N_ATOMS):
        self._frames = list(frames)
        self.n_atoms = n_atoms
        self.closed = False
        FakeCodec.instances.append(self)

    def read_next(self):
        if not self._frames:
            return None
        item = self._frames.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


def raw_frame(step, n_atoms=N_ATOMS):
    return SimpleNamespace(
        x=np.zeros((n_atoms, 3), dtype=np.float32),
        box=BOX_NM,
        step=step,
        time=float(step),
    )


class TestMDAnalysisCodec:

    def test_n_atoms(self, xtc_file):
        codec = MDAnalysisXTCCodec(xtc_file)
        try:
            assert codec.n_atoms == N_ATOMS
        finally:
            codec.close()

    def test_read_until_exhausted(self, xtc_file):
        codec = MDAnalysisXTCCodec(xtc_file)
        try:
            steps = []
            raw = codec.read_next()
            while raw is not None:
                steps.append(raw.step)
                raw = codec.read_next()
        finally:
            codec.close()
        assert steps == [0, 10, 20]

    def test_missing_file(self, tmp_path):
        with pytest.raises(TrajectoryIOError):
            MDAnalysisXTCCodec(str(tmp_path / "missing.xtc"))


class TestTopologyAndFrames:

    def test_topology_reopens_codec(self):
        FakeCodec.instances.clear()
        factory = lambda filename: FakeCodec([raw_frame(0), raw_frame(1)])
        n_atoms, codec = read_xtc_topology(factory, "any.xtc")
        assert n_atoms == N_ATOMS
        probe, fresh = FakeCodec.instances
        assert probe.closed
        assert codec is fresh and not fresh.closed
        assert codec.read_next().step == 0

    def test_empty_file(self):
        FakeCodec.instances.clear()
        with pytest.raises(TrajectoryIOError, match="first frame"):
            read_xtc_topology(lambda filename: FakeCodec([]), "empty.xtc")
        assert FakeCodec.instances[0].closed

    def test_frame_scaled(self):
        codec = FakeCodec([raw_frame(5)])
        frame = read_xtc_frame(codec, N_ATOMS, 10.0)
        np.testing.assert_allclose(frame.box, np.diag([20.0, 20.0, 20.0]))
        assert frame.step == 5
        assert frame.time == 5.0
        assert read_xtc_frame(codec, N_ATOMS, 10.0) is None

    def test_atom_count_mismatch(self):
        codec = FakeCodec([raw_frame(0, n_atoms=2)])
        with pytest.raises(CorruptFrameError, match="expected 4 atoms"):
            read_xtc_frame(codec, N_ATOMS, 10.0)


class TestTrajectory:

    def test_read_real_file(self, xtc_file):
        with Trajectory(xtc_file) as traj:
            assert traj.format == 'XTC'
            assert traj.units == 'nm'
            assert traj.n_atoms == N_ATOMS
            assert traj.symbols is None
            frames = traj.read_all()
        assert len(frames) == 3
        assert [f.step for f in frames] == [0, 10, 20]
        assert frames[2].time == pytest.approx(1.0)
        # XTC stores three decimals in nm
        np.testing.assert_allclose(frames[1].coordinates, frame_positions(1) * 10.0, atol=1e-2)
        np.testing.assert_allclose(frames[0].box, np.diag([20.0, 20.0, 20.0]), atol=1e-4)

    def test_wrap_uses_frame_box(self, xtc_file):
        with Trajectory(xtc_file) as traj:
            frame = traj.read(wrap=True)
        assert np.all(frame.coordinates >= 0.0)
        assert np.all(frame.coordinates < 20.0)
        # (2.1, -0.3, 0.7) nm -> (21, -3, 7) A -> (1, 17, 7) A in a 20 A box
        np.testing.assert_allclose(frame.coordinates[3], [1.0, 17.0, 7.0], atol=1e-2)

    def test_no_wrap_by_default(self, xtc_file):
        with Trajectory(xtc_file) as traj:
            frame = traj.read()
        assert frame.coordinates[3, 1] < 0.0

    def test_corrupt_frame(self):
        factory = lambda filename: FakeCodec([raw_frame(0), CorruptFrameError("Corrupted frame")])
        with Trajectory("fake.xtc", xtc_codec=factory) as traj:
            assert traj.read().step == 0
            with pytest.raises(CorruptFrameError):
                traj.read()
            assert traj.last_frame == 0

    def test_corrupt_frame_is_io_error(self):
        assert issubclass(CorruptFrameError, OSError)

    def test_close_releases_codec(self):
        FakeCodec.instances.clear()
        traj = Trajectory("fake.xtc", xtc_codec=lambda filename: FakeCodec([raw_frame(0)]))
        traj.close()
        assert FakeCodec.instances[-1].closed

    def test_decode_error_mapped(self, mocker):
        """OSError from the XDR bindings becomes CorruptFrameError."""
        xtc = mocker.patch("trajMD.formats.xtc.XTCFile")
        xtc.return_value.read.side_effect = OSError("XTC read error: 3")
        codec = MDAnalysisXTCCodec("traj.xtc")
        with pytest.raises(CorruptFrameError, match="Corrupted frame"):
            codec.read_next()

    def test_end_of_file_mapped(self, mocker):
        xtc = mocker.patch("trajMD.formats.xtc.XTCFile")
        xtc.return_value.read.side_effect = StopIteration
        assert MDAnalysisXTCCodec("traj.xtc").read_next() is None

    def test_write_unsupported(self, tmp_path):
        from trajMD import UnsupportedOperationError
        path = tmp_path / "out.xtc"
        with pytest.raises(UnsupportedOperationError):
            Trajectory(str(path), 'w', symbols=['O'])
        assert not path.exists()
