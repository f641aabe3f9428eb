import numpy as np
from numba import njit

from .settings import NEQ

RESINIT_FLOOR = 1e-8  # relative to the largest initial residual


@njit(error_model="numpy")
def iterative_residuals(u, uold, dt, res):
    """RMS over interior cells of (u - uold)/dt, per equation"""
    imax, jmax, neq = u.shape
    for k in range(neq):
        res[k] = 0.0
    for i in range(1, imax - 1):
        for j in range(1, jmax - 1):
            for k in range(neq):
                diff = (u[i, j, k] - uold[i, j, k]) / dt[i, j]
                res[k] += diff * diff
    for k in range(neq):
        res[k] = np.sqrt(res[k] / ((imax - 2) * (jmax - 2)))


class ConvergenceMonitor:
    """Normalized iterative residuals and the scalar convergence measure.

    `resinit` normalizes all residuals; a fresh run captures it from the
    first iteration, a restart supplies it from the checkpoint.
    """
    def __init__(self, toler: float, resinit=None):
        self.toler = toler
        self.resinit = np.ones(NEQ) if resinit is None else np.array(resinit, dtype=np.float64)
        self.res = np.zeros(NEQ)
        self.conv = np.inf

    def capture_initial(self, u, uold, dt):
        """Use the current raw residuals as normalizers.

        Components that are non-finite, zero or at round-off level relative to
        the largest one are normalized by 1 instead.
        """
        raw = np.zeros(NEQ)
        iterative_residuals(u, uold, dt, raw)
        finite = np.isfinite(raw)
        floor = RESINIT_FLOOR * raw[finite].max() if finite.any() else 0.0
        self.resinit = np.where(finite & (raw > floor), raw, 1.0)

    def update(self, u, uold, dt) -> float:
        iterative_residuals(u, uold, dt, self.res)
        self.res /= self.resinit
        self.conv = float(np.max(self.res))
        return self.conv

    @property
    def converged(self) -> bool:
        return self.conv < self.toler

    @property
    def finite(self) -> bool:
        return bool(np.isfinite(self.conv))
