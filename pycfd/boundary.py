import numpy as np
from numba import njit

from .mms import ManufacturedSolution
from .settings import CaseConfig


@njit
def extrapolate_wall_pressure(u):
    """Second-order one-sided pressure on the four walls.

    Side walls first (j = 1..jmax-2), then bottom/top over every i, so the
    corners are extrapolated along j from the already-set side walls.
    """
    imax, jmax = u.shape[0], u.shape[1]
    for j in range(1, jmax - 1):
        u[0, j, 0] = 2.0 * u[1, j, 0] - u[2, j, 0]
        u[imax - 1, j, 0] = 2.0 * u[imax - 2, j, 0] - u[imax - 3, j, 0]
    for i in range(imax):
        u[i, 0, 0] = 2.0 * u[i, 1, 0] - u[i, 2, 0]
        u[i, jmax - 1, 0] = 2.0 * u[i, jmax - 2, 0] - u[i, jmax - 3, 0]


@njit
def apply_wall_bc(u, uinf):
    """No-slip walls with a moving lid; the bottom/top loop owns the corners"""
    imax, jmax = u.shape[0], u.shape[1]
    for j in range(1, jmax - 1):
        u[0, j, 1] = 0.0  # Left wall
        u[0, j, 2] = 0.0
        u[imax - 1, j, 1] = 0.0  # Right wall
        u[imax - 1, j, 2] = 0.0
    for i in range(imax):
        u[i, 0, 1] = 0.0  # Bottom wall
        u[i, 0, 2] = 0.0
        u[i, jmax - 1, 1] = uinf  # Lid
        u[i, jmax - 1, 2] = 0.0
    extrapolate_wall_pressure(u)


@njit
def apply_exact_bc(u, exact):
    """Exact values on the border, then extrapolated wall pressure"""
    imax, jmax = u.shape[0], u.shape[1]
    for j in range(1, jmax - 1):
        for k in range(u.shape[2]):
            u[0, j, k] = exact[0, j, k]
            u[imax - 1, j, k] = exact[imax - 1, j, k]
    for i in range(imax):
        for k in range(u.shape[2]):
            u[i, 0, k] = exact[i, 0, k]
            u[i, jmax - 1, k] = exact[i, jmax - 1, k]
    extrapolate_wall_pressure(u)


class WallBoundary:
    """Lid-driven cavity walls"""
    name = 'walls'

    def __init__(self, config: CaseConfig):
        self.uinf = config.fluid.uinf

    def apply(self, u: np.ndarray):
        apply_wall_bc(u, self.uinf)


class ManufacturedBoundary:
    """Border values from the manufactured solution (evaluated once)"""
    name = 'manufactured'

    def __init__(self, config: CaseConfig):
        X, Y = config.mesh.coordinates()
        self.exact = ManufacturedSolution(config).exact_field(X, Y)

    def apply(self, u: np.ndarray):
        apply_exact_bc(u, self.exact)


def make_boundary(config: CaseConfig):
    if config.solver.mms_flag == 1:
        return ManufacturedBoundary(config)
    return WallBoundary(config)
