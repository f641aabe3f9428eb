import numpy as np
from numba import njit


@njit
def beta_squared(uvel, vvel, rkappa, vel2ref):
    """Artificial compressibility parameter, floored at rkappa*Vref^2"""
    return max(uvel * uvel + vvel * vvel, rkappa * vel2ref)


@njit
def wave_speeds(uvel, vvel, beta2):
    """Max absolute eigenvalues in (x,t) and (y,t)"""
    lambda_x = 0.5 * (abs(uvel) + np.sqrt(uvel * uvel + 4.0 * beta2))
    lambda_y = 0.5 * (abs(vvel) + np.sqrt(vvel * vvel + 4.0 * beta2))
    return lambda_x, lambda_y


@njit(error_model="numpy")
def compute_time_step(u, dt, dx, dy, nu, cfl, rkappa, vel2ref):
    """Local pseudo-time step on interior cells; returns the global minimum.

    Border cells have no stencil of their own and receive the minimum.
    """
    imax, jmax = dt.shape
    dtvisc = (dx * dy) / (4.0 * nu)  # uniform over the grid
    dtmin = 1.0e99

    for i in range(1, imax - 1):
        for j in range(1, jmax - 1):
            beta2 = beta_squared(u[i, j, 1], u[i, j, 2], rkappa, vel2ref)
            lambda_x, lambda_y = wave_speeds(u[i, j, 1], u[i, j, 2], beta2)
            dtconv = min(dx, dy) / max(lambda_x, lambda_y)
            dt[i, j] = cfl * min(dtvisc, dtconv)
            dtmin = min(dtmin, dt[i, j])

    for i in range(imax):
        dt[i, 0] = dtmin
        dt[i, jmax - 1] = dtmin
    for j in range(jmax):
        dt[0, j] = dtmin
        dt[imax - 1, j] = dtmin

    return dtmin
