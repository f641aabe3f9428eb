"""
Manufactured solution used in verification mode.

Each primitive variable k in [p, u, v] is

    phi_k = phi0 + phix*f(apx*pi*x/L) + phiy*f(apy*pi*y/L) + phixy*f(apxy*pi*x*y/L^2)

where f is sin or cos depending on the fsin* selectors.  The source terms are
the steady incompressible Navier-Stokes operators applied to this field, so
the exact solution is a fixed point of the discrete scheme up to truncation
error.
"""
from typing import Dict

import numpy as np

from .settings import NEQ, CaseConfig


def _term(selector, arg):
    return selector * np.sin(arg) + (1.0 - selector) * np.cos(arg)


def _term_derivative(selector, arg):
    return selector * np.cos(arg) - (1.0 - selector) * np.sin(arg)


class ManufacturedSolution:
    """Exact solution, its derivatives and the matching source terms"""
    def __init__(self, config: CaseConfig):
        self.c = config.mms
        self.rlength = config.mesh.rlength
        self.rho = config.fluid.rho
        self.rmu = config.rmu

    def _args(self, x, y, k):
        c, L = self.c, self.rlength
        kx = c.apx[k] * np.pi / L
        ky = c.apy[k] * np.pi / L
        kxy = c.apxy[k] * np.pi / (L * L)
        return kx, ky, kxy, kx * x, ky * y, kxy * x * y

    def value(self, x, y, k: int):
        c = self.c
        _, _, _, argx, argy, argxy = self._args(x, y, k)
        return (c.phi0[k] + c.phix[k] * _term(c.fsinx[k], argx)
                + c.phiy[k] * _term(c.fsiny[k], argy)
                + c.phixy[k] * _term(c.fsinxy[k], argxy))

    def ddx(self, x, y, k: int):
        c = self.c
        kx, _, kxy, argx, _, argxy = self._args(x, y, k)
        return (c.phix[k] * kx * _term_derivative(c.fsinx[k], argx)
                + c.phixy[k] * kxy * y * _term_derivative(c.fsinxy[k], argxy))

    def ddy(self, x, y, k: int):
        c = self.c
        _, ky, kxy, _, argy, argxy = self._args(x, y, k)
        return (c.phiy[k] * ky * _term_derivative(c.fsiny[k], argy)
                + c.phixy[k] * kxy * x * _term_derivative(c.fsinxy[k], argxy))

    def d2dx2(self, x, y, k: int):
        c = self.c
        kx, _, kxy, argx, _, argxy = self._args(x, y, k)
        return (-c.phix[k] * kx * kx * _term(c.fsinx[k], argx)
                - c.phixy[k] * (kxy * y) ** 2 * _term(c.fsinxy[k], argxy))

    def d2dy2(self, x, y, k: int):
        c = self.c
        _, ky, kxy, _, argy, argxy = self._args(x, y, k)
        return (-c.phiy[k] * ky * ky * _term(c.fsiny[k], argy)
                - c.phixy[k] * (kxy * x) ** 2 * _term(c.fsinxy[k], argxy))

    def exact_field(self, X, Y):
        """Exact [p, u, v] stacked on the last axis"""
        return np.stack([self.value(X, Y, k) for k in range(NEQ)], axis=-1)

    # Source terms
    def source_mass(self, x, y):
        return self.rho * self.ddx(x, y, 1) + self.rho * self.ddy(x, y, 2)

    def source_xmtm(self, x, y):
        uvel, vvel = self.value(x, y, 1), self.value(x, y, 2)
        return (self.rho * uvel * self.ddx(x, y, 1) + self.rho * vvel * self.ddy(x, y, 1)
                + self.ddx(x, y, 0) - self.rmu * (self.d2dx2(x, y, 1) + self.d2dy2(x, y, 1)))

    def source_ymtm(self, x, y):
        uvel, vvel = self.value(x, y, 1), self.value(x, y, 2)
        return (self.rho * uvel * self.ddx(x, y, 2) + self.rho * vvel * self.ddy(x, y, 2)
                + self.ddy(x, y, 0) - self.rmu * (self.d2dx2(x, y, 2) + self.d2dy2(x, y, 2)))


def compute_source_terms(src: np.ndarray, config: CaseConfig):
    """Evaluate the forcing once, on interior cells only (zero unless in MMS mode)"""
    src.fill(0.0)
    if config.solver.mms_flag != 1:
        return
    X, Y = config.mesh.coordinates()
    interior = (slice(1, -1), slice(1, -1))
    mms = ManufacturedSolution(config)
    src[interior + (0,)] = mms.source_mass(X[interior], Y[interior])
    src[interior + (1,)] = mms.source_xmtm(X[interior], Y[interior])
    src[interior + (2,)] = mms.source_ymtm(X[interior], Y[interior])


def discretization_error_norms(u: np.ndarray, config: CaseConfig) -> Dict[str, np.ndarray]:
    """L1, L2 and Linf norms of (numerical - exact) per equation over all nodes"""
    X, Y = config.mesh.coordinates()
    de = u - ManufacturedSolution(config).exact_field(X, Y)
    npts = X.size
    return {
        'L1': np.abs(de).reshape(npts, -1).mean(axis=0),
        'L2': np.sqrt((de ** 2).reshape(npts, -1).mean(axis=0)),
        'Linf': np.abs(de).reshape(npts, -1).max(axis=0),
    }
