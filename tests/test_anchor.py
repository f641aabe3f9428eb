import numpy as np
import pytest

from pycfd.anchor import PressureAnchor
from pycfd.settings import CaseConfig


class TestPressureAnchor:

    def test_center_pinned_to_reference(self, rng):
        config = CaseConfig().with_overrides(mesh={'imax': 9, 'jmax': 11})
        anchor = PressureAnchor(config)
        assert (anchor.iref, anchor.jref) == (4, 5)

        u = rng.normal(size=(9, 11, 3))
        before = u.copy()
        deltap = anchor.apply(u)

        assert u[4, 5, 0] == pytest.approx(config.fluid.pinf)
        assert deltap == pytest.approx(before[4, 5, 0] - config.fluid.pinf)
        # uniform shift: pressure differences and velocities are unchanged
        np.testing.assert_allclose(u[:, :, 0] - before[:, :, 0], -deltap)
        np.testing.assert_array_equal(u[:, :, 1:], before[:, :, 1:])

    def test_manufactured_reference(self):
        config = CaseConfig().with_overrides(mesh={'imax': 9, 'jmax': 9},
                                             fluid={'pinf': 0.0}, solver={'mms_flag': 1})
        anchor = PressureAnchor(config)
        # the exact pressure at the cavity center
        assert anchor.pref == pytest.approx(0.801333844662, rel=1e-7)

    def test_idempotent(self, rng):
        config = CaseConfig().with_overrides(mesh={'imax': 7, 'jmax': 7})
        anchor = PressureAnchor(config)
        u = rng.normal(size=(7, 7, 3))
        anchor.apply(u)
        assert anchor.apply(u) == pytest.approx(0.0, abs=1e-14)
