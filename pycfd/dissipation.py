"""
Fourth-order artificial dissipation for the continuity equation.

Central differencing of the pressure gradient allows odd-even decoupling;
the damping term

    visc_x = -|lambda_x| * Cx * dx^3 * (d4p/dx4) / beta2

(and its y counterpart) is added to the continuity equation only.  The
fourth difference needs two neighbours on each side.  On the first interior
row/column next to a wall the 5-point stencil is shifted one cell towards the
interior, so it never reads outside the grid.  Combining the three x choices
(left edge, interior, right edge) with the three y choices gives the nine
stencil regions: interior, four edges and four corners.
"""
from numba import njit, prange

from .timestep import beta_squared, wave_speeds


@njit
def stencil_center(n, size):
    """Center of the 5-point stencil used for interior node n on a line of `size` nodes"""
    if n == 1:
        return 2
    if n == size - 2:
        return size - 3
    return n


@njit
def fourth_difference_x(u, i, j):
    c = stencil_center(i, u.shape[0])
    return (u[c - 2, j, 0] - 4.0 * u[c - 1, j, 0] + 6.0 * u[c, j, 0]
            - 4.0 * u[c + 1, j, 0] + u[c + 2, j, 0])


@njit
def fourth_difference_y(u, i, j):
    c = stencil_center(j, u.shape[1])
    return (u[i, c - 2, 0] - 4.0 * u[i, c - 1, 0] + 6.0 * u[i, c, 0]
            - 4.0 * u[i, c + 1, 0] + u[i, c + 2, 0])


@njit(parallel=True, error_model="numpy")
def compute_artificial_viscosity(u, viscx, viscy, dx, dy, Cx, Cy, rkappa, vel2ref):
    """Fill viscx, viscy on all interior cells from the pressure in u.

    beta2 and the wave speeds are evaluated at each cell, including the
    edge and corner cells.
    """
    imax, jmax = viscx.shape
    dx4 = dx * dx * dx * dx
    dy4 = dy * dy * dy * dy

    for i in prange(1, imax - 1):
        for j in range(1, jmax - 1):
            d4pdx4 = fourth_difference_x(u, i, j) / dx4
            d4pdy4 = fourth_difference_y(u, i, j) / dy4

            beta2 = beta_squared(u[i, j, 1], u[i, j, 2], rkappa, vel2ref)
            lambda_x, lambda_y = wave_speeds(u[i, j, 1], u[i, j, 2], beta2)

            viscx[i, j] = -abs(lambda_x) * Cx * dx * dx * dx * d4pdx4 / beta2
            viscy[i, j] = -abs(lambda_y) * Cy * dy * dy * dy * d4pdy4 / beta2
