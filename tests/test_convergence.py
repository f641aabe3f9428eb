import numpy as np
import pytest

from pycfd.convergence import ConvergenceMonitor, iterative_residuals


def _fields(change, dt=0.5):
    uold = np.zeros((7, 7, 3))
    u = uold.copy()
    u[1:-1, 1:-1] = change
    u[0, :] = 100.0  # border changes are not part of the residual
    return u, uold, np.full((7, 7), dt)


class TestIterativeResiduals:

    def test_rms_of_rate_of_change(self):
        u, uold, dt = _fields([1.0, -2.0, 0.5], dt=0.5)
        res = np.zeros(3)
        iterative_residuals(u, uold, dt, res)
        np.testing.assert_allclose(res, [2.0, 4.0, 1.0])

    def test_single_cell(self):
        uold = np.zeros((5, 5, 3))
        u = uold.copy()
        u[2, 2, 1] = 3.0
        res = np.zeros(3)
        iterative_residuals(u, uold, np.ones((5, 5)), res)
        np.testing.assert_allclose(res, [0.0, 1.0, 0.0])  # sqrt(9 / 9 cells)


class TestConvergenceMonitor:

    def test_normalized_by_initial_residuals(self):
        monitor = ConvergenceMonitor(1e-10, resinit=[2.0, 4.0, 0.5])
        u, uold, dt = _fields([1.0, 1.0, 1.0], dt=1.0)
        conv = monitor.update(u, uold, dt)
        np.testing.assert_allclose(monitor.res, [0.5, 0.25, 2.0])
        assert conv == pytest.approx(2.0)
        assert not monitor.converged

    def test_defaults_to_unit_normalization(self):
        monitor = ConvergenceMonitor(1e-10)
        np.testing.assert_array_equal(monitor.resinit, [1.0, 1.0, 1.0])

    def test_capture_initial_replaces_zero(self):
        monitor = ConvergenceMonitor(1e-10)
        u, uold, dt = _fields([3.0, 0.0, -1.0], dt=1.0)
        monitor.capture_initial(u, uold, dt)
        np.testing.assert_allclose(monitor.resinit, [3.0, 1.0, 1.0])

        monitor.update(u, uold, dt)
        np.testing.assert_allclose(monitor.res, [1.0, 0.0, 1.0])

    def test_capture_initial_ignores_round_off(self):
        monitor = ConvergenceMonitor(1e-10)
        u, uold, dt = _fields([1e-17, 2.0, np.inf], dt=1.0)
        monitor.capture_initial(u, uold, dt)
        np.testing.assert_allclose(monitor.resinit, [1.0, 2.0, 1.0])

    def test_converged_below_tolerance(self):
        monitor = ConvergenceMonitor(1e-6)
        u, uold, dt = _fields([1e-8, 0.0, 0.0], dt=1.0)
        monitor.update(u, uold, dt)
        assert monitor.converged
        assert monitor.finite

    def test_nan_is_not_converged(self):
        monitor = ConvergenceMonitor(1e-6)
        u, uold, dt = _fields([np.nan, 0.0, 0.0], dt=1.0)
        monitor.update(u, uold, dt)
        assert not monitor.finite
        assert not monitor.converged
