import json
import math
import os
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Optional, Tuple

import numpy as np

from .exceptions import ConfigurationError

NEQ = 3  # [p, u, v]


def _check_flag(name: str, value: int):
    if value not in (0, 1):
        raise ConfigurationError(f"{name} must equal 0 or 1, got {value!r}")


@dataclass(frozen=True)
class MeshParameters:
    """Class to handle mesh parameters"""
    imax: int = 65  # points in x (odd)
    jmax: int = 65  # points in y (odd)
    xmin: float = 0.0
    xmax: float = 0.05
    ymin: float = 0.0
    ymax: float = 0.05

    def __post_init__(self):
        for name in ('imax', 'jmax'):
            n = getattr(self, name)
            if not isinstance(n, (int, np.integer)) or n < 5 or n % 2 == 0:
                raise ConfigurationError(f"{name} must be an odd integer >= 5, got {n!r}")
        if not self.xmax > self.xmin or not self.ymax > self.ymin:
            raise ConfigurationError("Cavity extents must satisfy xmax > xmin and ymax > ymin")

    @property
    def dx(self) -> float:
        return (self.xmax - self.xmin) / (self.imax - 1)

    @property
    def dy(self) -> float:
        return (self.ymax - self.ymin) / (self.jmax - 1)

    @property
    def rlength(self) -> float:
        """Characteristic length (cavity width)"""
        return self.xmax - self.xmin

    @property
    def center(self) -> Tuple[int, int]:
        return (self.imax - 1) // 2, (self.jmax - 1) // 2

    def x(self, i):
        return self.xmin + (self.xmax - self.xmin) * np.asarray(i, dtype=np.float64) / (self.imax - 1)

    def y(self, j):
        return self.ymin + (self.ymax - self.ymin) * np.asarray(j, dtype=np.float64) / (self.jmax - 1)

    def coordinates(self) -> Tuple[np.ndarray, np.ndarray]:
        """Node coordinates X, Y with shape (imax, jmax)"""
        return np.meshgrid(self.x(np.arange(self.imax)), self.y(np.arange(self.jmax)), indexing='ij')


@dataclass(frozen=True)
class FluidProperties:
    """Class to handle fluid properties"""
    Re: float = 100.0
    rho: float = 1.0
    uinf: float = 1.0  # lid velocity
    pinf: float = 0.801333844662  # reference pressure (MMS value at cavity center)

    def __post_init__(self):
        if not self.Re > 0.0 or not self.rho > 0.0:
            raise ConfigurationError("Re and rho must be positive")
        if self.uinf == 0.0:
            raise ConfigurationError("Lid velocity uinf must be non-zero")

    @property
    def rhoinv(self) -> float:
        return 1.0 / self.rho

    @property
    def vel2ref(self) -> float:
        return self.uinf * self.uinf


@dataclass(frozen=True)
class SolverSettings:
    """Class to handle solver settings"""
    cfl: float = 0.9
    Cx: float = 0.01  # 4th order artificial viscosity in x
    Cy: float = 0.01
    toler: float = 1e-10
    rkappa: float = 0.1  # time derivative preconditioning constant
    nmax: int = 500000
    iterout: int = 5000  # iterations between solution/restart output
    residual_out: int = 10  # iterations between residual records
    mms_flag: int = 0  # 1 = manufactured solution
    sgs_flag: int = 0  # 1 = symmetric Gauss-Seidel, 0 = point Jacobi
    restart_flag: int = 0  # 1 = start from restart file
    abort_on_divergence: bool = True

    def __post_init__(self):
        _check_flag('mms_flag', self.mms_flag)
        _check_flag('sgs_flag', self.sgs_flag)
        _check_flag('restart_flag', self.restart_flag)
        if not self.cfl > 0.0:
            raise ConfigurationError("cfl must be positive")
        if not self.rkappa > 0.0:
            raise ConfigurationError("rkappa must be positive")
        if not self.toler > 0.0:
            raise ConfigurationError("toler must be positive")
        if self.Cx < 0.0 or self.Cy < 0.0:
            raise ConfigurationError("Artificial viscosity coefficients must be non-negative")
        if self.nmax < 1 or self.iterout < 1 or self.residual_out < 1:
            raise ConfigurationError("nmax, iterout and residual_out must be >= 1")

    @property
    def scheme(self) -> str:
        return 'SGS' if self.sgs_flag == 1 else 'JACOBI'


@dataclass(frozen=True)
class ManufacturedConstants:
    """Constants of the manufactured solution, one entry per equation [p, u, v].

    fsin* select sine (1) or cosine (0) for each term.
    """
    phi0: Tuple[float, float, float] = (0.25, 0.3, 0.2)
    phix: Tuple[float, float, float] = (0.5, 0.15, 1.0 / 6.0)
    phiy: Tuple[float, float, float] = (0.4, 0.2, 0.25)
    phixy: Tuple[float, float, float] = (1.0 / 3.0, 0.25, 0.1)
    apx: Tuple[float, float, float] = (0.5, 1.0 / 3.0, 7.0 / 17.0)
    apy: Tuple[float, float, float] = (0.2, 0.25, 1.0 / 6.0)
    apxy: Tuple[float, float, float] = (2.0 / 7.0, 0.4, 1.0 / 3.0)
    fsinx: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    fsiny: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    fsinxy: Tuple[float, float, float] = (1.0, 1.0, 0.0)

    def __post_init__(self):
        for f in fields(self):
            if len(getattr(self, f.name)) != NEQ:
                raise ConfigurationError(f"MMS constant {f.name} needs {NEQ} entries")


@dataclass(frozen=True)
class CaseConfig:
    """Complete, immutable description of one cavity run"""
    mesh: MeshParameters = field(default_factory=MeshParameters)
    fluid: FluidProperties = field(default_factory=FluidProperties)
    solver: SolverSettings = field(default_factory=SolverSettings)
    mms: ManufacturedConstants = field(default_factory=ManufacturedConstants)
    output_dir: str = "."
    restart_in: str = "restart.in"
    restart_out: str = "restart.out"
    history_file: str = "history.dat"
    field_file: str = "cavity.dat"

    def __post_init__(self):
        if not self.solver.rkappa * self.fluid.vel2ref > 0.0:
            raise ConfigurationError("rkappa * uinf^2 must be positive")
        if not math.isfinite(self.rmu) or self.rmu <= 0.0:
            raise ConfigurationError("Derived viscosity must be positive and finite")

    # Derived physical constants
    @property
    def rmu(self) -> float:
        """Viscosity from Re = rho*U*L/mu"""
        return self.fluid.rho * self.fluid.uinf * self.mesh.rlength / self.fluid.Re

    @property
    def nu(self) -> float:
        return self.rmu / self.fluid.rho

    @property
    def rhoinv(self) -> float:
        return self.fluid.rhoinv

    @property
    def vel2ref(self) -> float:
        return self.fluid.vel2ref

    def path(self, name: str) -> str:
        """Resolve an output/restart file name against output_dir"""
        return os.path.join(self.output_dir, name)

    def with_overrides(self, mesh: Optional[Dict] = None, fluid: Optional[Dict] = None,
                       solver: Optional[Dict] = None, **paths) -> "CaseConfig":
        return replace(
            self,
            mesh=replace(self.mesh, **(mesh or {})),
            fluid=replace(self.fluid, **(fluid or {})),
            solver=replace(self.solver, **(solver or {})),
            **paths,
        )

    @classmethod
    def from_dict(cls, params: Dict) -> "CaseConfig":
        """
        Build a case from nested dictionaries

        Parameters:
        -----------
        params : dict
            Keys 'mesh', 'fluid', 'solver', 'mms' (each a dict of field values)
            plus optional path keys ('output_dir', 'restart_in', ...)
        """
        known = {'mesh', 'fluid', 'solver', 'mms', 'output_dir', 'restart_in',
                 'restart_out', 'history_file', 'field_file'}
        unknown = set(params) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")
        try:
            mms = {k: tuple(v) for k, v in params.get('mms', {}).items()}
            return cls(
                mesh=MeshParameters(**params.get('mesh', {})),
                fluid=FluidProperties(**params.get('fluid', {})),
                solver=SolverSettings(**params.get('solver', {})),
                mms=ManufacturedConstants(**mms),
                **{k: params[k] for k in known - {'mesh', 'fluid', 'solver', 'mms'} if k in params},
            )
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_json(cls, filename: str) -> "CaseConfig":
        try:
            with open(filename, 'r') as f:
                params = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file '{filename}': {e}") from e
        return cls.from_dict(params)
