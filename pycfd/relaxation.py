"""
Pseudo-time relaxation schemes.

Both schemes advance every interior cell with the same explicit update of the
artificial compressibility equations

    p <- p - beta2*dt*(rho*du/dx + rho*dv/dy - viscx - viscy - s_mass)
    u <- u - dt/rho*(rho*u*du/dx + rho*v*du/dy + dp/dx - mu*lap(u) - s_xmtm)
    v <- v - dt/rho*(rho*u*dv/dx + rho*v*dv/dy + dp/dy - mu*lap(v) - s_ymtm)

and differ only in where the stencil values come from: point Jacobi reads a
frozen copy of the previous iterate, symmetric Gauss-Seidel updates in place.
"""
from numba import njit, prange

from .dissipation import compute_artificial_viscosity
from .timestep import beta_squared


@njit
def relax_cell(src, dst, viscx, viscy, dt, s, i, j, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref):
    """Update cell (i, j) of dst from the stencil in src (src may be dst)"""
    dpdx = (src[i + 1, j, 0] - src[i - 1, j, 0]) / (2.0 * dx)
    dudx = (src[i + 1, j, 1] - src[i - 1, j, 1]) / (2.0 * dx)
    dvdx = (src[i + 1, j, 2] - src[i - 1, j, 2]) / (2.0 * dx)
    dpdy = (src[i, j + 1, 0] - src[i, j - 1, 0]) / (2.0 * dy)
    dudy = (src[i, j + 1, 1] - src[i, j - 1, 1]) / (2.0 * dy)
    dvdy = (src[i, j + 1, 2] - src[i, j - 1, 2]) / (2.0 * dy)
    d2udx2 = (src[i + 1, j, 1] - 2.0 * src[i, j, 1] + src[i - 1, j, 1]) / (dx * dx)
    d2vdx2 = (src[i + 1, j, 2] - 2.0 * src[i, j, 2] + src[i - 1, j, 2]) / (dx * dx)
    d2udy2 = (src[i, j + 1, 1] - 2.0 * src[i, j, 1] + src[i, j - 1, 1]) / (dy * dy)
    d2vdy2 = (src[i, j + 1, 2] - 2.0 * src[i, j, 2] + src[i, j - 1, 2]) / (dy * dy)

    beta2 = beta_squared(src[i, j, 1], src[i, j, 2], rkappa, vel2ref)
    dtij = dt[i, j]

    # Equations are updated in order p, u, v; in place the v update sees the new u
    dst[i, j, 0] = src[i, j, 0] - beta2 * dtij * (
        rho * dudx + rho * dvdy - viscx[i, j] - viscy[i, j] - s[i, j, 0])
    dst[i, j, 1] = src[i, j, 1] - dtij * rhoinv * (
        rho * src[i, j, 1] * dudx + rho * src[i, j, 2] * dudy + dpdx
        - rmu * d2udx2 - rmu * d2udy2 - s[i, j, 1])
    dst[i, j, 2] = src[i, j, 2] - dtij * rhoinv * (
        rho * src[i, j, 1] * dvdx + rho * src[i, j, 2] * dvdy + dpdy
        - rmu * d2vdx2 - rmu * d2vdy2 - s[i, j, 2])


@njit(parallel=True)
def point_jacobi(u, uold, viscx, viscy, dt, s, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref):
    """Every interior cell of u from uold only; no intra-pass hazards"""
    imax, jmax = dt.shape
    for i in prange(1, imax - 1):
        for j in range(1, jmax - 1):
            relax_cell(uold, u, viscx, viscy, dt, s, i, j, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref)


@njit
def sgs_forward_sweep(u, viscx, viscy, dt, s, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref):
    imax, jmax = dt.shape
    for i in range(1, imax - 1):
        for j in range(1, jmax - 1):
            relax_cell(u, u, viscx, viscy, dt, s, i, j, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref)


@njit
def sgs_backward_sweep(u, viscx, viscy, dt, s, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref):
    imax, jmax = dt.shape
    for i in range(imax - 2, 0, -1):
        for j in range(jmax - 2, 0, -1):
            relax_cell(u, u, viscx, viscy, dt, s, i, j, rho, rhoinv, rmu, dx, dy, rkappa, vel2ref)


class RelaxationScheme:
    """One pseudo-time step over GridFields, chosen once per run"""
    name = None

    def __init__(self, config):
        mesh, fluid, settings = config.mesh, config.fluid, config.solver
        self.update_args = (fluid.rho, fluid.rhoinv, config.rmu, mesh.dx, mesh.dy,
                            settings.rkappa, config.vel2ref)
        self.visc_args = (mesh.dx, mesh.dy, settings.Cx, settings.Cy,
                          settings.rkappa, config.vel2ref)

    def artificial_viscosity(self, u, fields):
        compute_artificial_viscosity(u, fields.viscx, fields.viscy, *self.visc_args)

    def iterate(self, fields, boundary):
        raise NotImplementedError


class PointJacobi(RelaxationScheme):
    """uold takes ownership of the pre-update iterate; u is rebuilt from it"""
    name = 'JACOBI'

    def iterate(self, fields, boundary):
        fields.swap()
        self.artificial_viscosity(fields.uold, fields)
        point_jacobi(fields.u, fields.uold, fields.viscx, fields.viscy, fields.dt,
                     fields.src, *self.update_args)
        boundary.apply(fields.u)


class SymmetricGaussSeidel(RelaxationScheme):
    """Forward then backward in-place sweep.

    uold is a snapshot taken before both sweeps and is only used by the
    convergence monitor.
    """
    name = 'SGS'

    def iterate(self, fields, boundary):
        fields.snapshot()

        self.artificial_viscosity(fields.u, fields)
        sgs_forward_sweep(fields.u, fields.viscx, fields.viscy, fields.dt, fields.src,
                          *self.update_args)
        boundary.apply(fields.u)

        self.artificial_viscosity(fields.u, fields)
        sgs_backward_sweep(fields.u, fields.viscx, fields.viscy, fields.dt, fields.src,
                           *self.update_args)
        boundary.apply(fields.u)


def make_scheme(config) -> RelaxationScheme:
    if config.solver.sgs_flag == 1:
        return SymmetricGaussSeidel(config)
    return PointJacobi(config)
