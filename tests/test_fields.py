import numpy as np
import pytest

from pycfd.fields import GridFields, copy_data
from pycfd.settings import MeshParameters


class TestGridFields:

    def test_shapes(self):
        fields = GridFields(MeshParameters(imax=9, jmax=7))
        assert fields.shape == (9, 7, 3)
        assert fields.uold.shape == (9, 7, 3)
        assert fields.src.shape == (9, 7, 3)
        assert fields.dt.shape == (9, 7)
        assert fields.viscx.shape == fields.viscy.shape == (9, 7)
        assert fields.u.flags['C_CONTIGUOUS']

    def test_swap_exchanges_buffers(self):
        fields = GridFields(MeshParameters(imax=5, jmax=5))
        current, previous = fields.u, fields.uold
        fields.swap()
        assert fields.u is previous
        assert fields.uold is current

    def test_snapshot_copies_values(self, rng):
        fields = GridFields(MeshParameters(imax=5, jmax=5))
        fields.u[:] = rng.random(fields.shape)
        fields.snapshot()
        np.testing.assert_array_equal(fields.uold, fields.u)
        assert fields.uold is not fields.u

        fields.u[2, 2, 1] += 1.0
        assert fields.uold[2, 2, 1] != fields.u[2, 2, 1]


class TestCopyData:

    def test_copy(self, rng):
        source = rng.random((5, 5, 3))
        target = np.zeros((5, 5, 3))
        copy_data(source, target)
        np.testing.assert_array_equal(source, target)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="Shape mismatch"):
            copy_data(np.zeros((5, 5, 3)), np.zeros((5, 7, 3)))
