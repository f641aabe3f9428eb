import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np
from loguru import logger

from .anchor import PressureAnchor
from .boundary import make_boundary
from .checkpoint import Checkpoint, read_checkpoint, write_checkpoint
from .convergence import ConvergenceMonitor
from .exceptions import SolverDivergedError
from .fields import GridFields, copy_data
from .mms import compute_source_terms, discretization_error_norms
from .output import OutputFiles, write_error_norms
from .postprocess import generate_plots, save_results_hdf5
from .relaxation import make_scheme
from .settings import CaseConfig
from .timestep import compute_time_step


class RunState(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class RunResult:
    state: RunState
    iterations: int  # last iteration number reached
    time: float  # accumulated pseudo-time
    conv: float
    residuals: np.ndarray
    elapsed: float  # wall-clock seconds
    error_norms: Optional[Dict[str, np.ndarray]] = None

    @property
    def converged(self) -> bool:
        return self.state is RunState.CONVERGED


class CavitySolver:
    """Pseudo-transient artificial compressibility solver for the lid-driven cavity.

    One iteration is: local time step -> relaxation pass (with boundary
    conditions) -> pressure anchor -> residual check.  Relaxation scheme and
    boundary treatment are chosen from the configuration once, here.
    """
    def __init__(self, config: CaseConfig):
        self.config = config
        self.mesh = config.mesh
        self.settings = config.solver

        self.fields = GridFields(config.mesh)
        self.boundary = make_boundary(config)
        self.scheme = make_scheme(config)
        self.anchor = PressureAnchor(config)
        self.monitor = ConvergenceMonitor(config.solver.toler)

        self.state = RunState.INITIALIZING
        self.restarted = config.solver.restart_flag == 1
        self.ninit = 1
        self.iteration = 0
        self.rtime = 0.0
        self.dtmin = 0.0
        self.residual_history = []  # rows of (n, time, res1, res2, res3)

        self._initialize_fields()

    def _initialize_fields(self):
        """Uniform fluid at rest with the lid moving, or the restart file"""
        u = self.fields.u
        if self.restarted:
            checkpoint = read_checkpoint(self.config.path(self.config.restart_in), self.mesh)
            copy_data(checkpoint.u, u)
            self.ninit = checkpoint.iteration + 1
            self.iteration = checkpoint.iteration
            self.rtime = checkpoint.time
            self.monitor.resinit = checkpoint.resinit
            logger.info(f"Restarting at iteration {self.ninit}")
        else:
            u[:, :, 0] = self.config.fluid.pinf
            u[:, :, 1] = 0.0
            u[:, :, 2] = 0.0
            u[:, self.mesh.jmax - 1, 1] = self.config.fluid.uinf

        self.boundary.apply(u)
        compute_source_terms(self.fields.src, self.config)
        copy_data(u, self.fields.uold)

    def iterate(self) -> float:
        """Advance one pseudo-time iteration and return the convergence measure"""
        fields = self.fields
        config = self.config

        self.dtmin = compute_time_step(fields.u, fields.dt, self.mesh.dx, self.mesh.dy,
                                       config.nu, self.settings.cfl, self.settings.rkappa,
                                       config.vel2ref)
        self.scheme.iterate(fields, self.boundary)
        self.anchor.apply(fields.u)
        self.rtime += self.dtmin

        if self.iteration == 1 and not self.restarted:
            self.monitor.capture_initial(fields.u, fields.uold, fields.dt)
        return self.monitor.update(fields.u, fields.uold, fields.dt)

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(iteration=self.iteration, time=self.rtime,
                          resinit=self.monitor.resinit.copy(), u=self.fields.u.copy())

    def _write_output(self, out: OutputFiles):
        out.write_field(self.iteration, self.fields.u)
        write_checkpoint(self.config.path(self.config.restart_out), self.checkpoint(), self.mesh)
        logger.debug(f"Solution and restart file written at iteration {self.iteration}")

    def _record(self, out: OutputFiles, verbose: bool):
        res = self.monitor.res
        out.write_residuals(self.iteration, self.rtime, res, self.dtmin if verbose else None)
        self.residual_history.append((self.iteration, self.rtime, res[0], res[1], res[2]))

    def solve(self, verbose: bool = True) -> RunResult:
        """Main solver loop"""
        config = self.config
        settings = self.settings
        fluid = config.fluid
        start_time = time.time()

        logger.info(f"rho,V,L,mu,Re: {fluid.rho:f} {fluid.uinf:f} {self.mesh.rlength:f} "
                    f"{config.rmu:f} {fluid.Re:f}")
        logger.info(f"Mesh: {self.mesh.imax}x{self.mesh.jmax}, scheme: {self.scheme.name}, "
                    f"boundary: {self.boundary.name}, CFL: {settings.cfl}")

        with OutputFiles(config, append=self.restarted) as out:
            self.iteration = self.ninit - 1
            self._write_output(out)

            self.state = RunState.RUNNING
            if self.ninit > settings.nmax:
                self.state = RunState.EXHAUSTED
            n = self.ninit
            recorded = None
            while self.state is RunState.RUNNING:
                self.iteration = n
                conv = self.iterate()

                if not self.monitor.finite and settings.abort_on_divergence:
                    logger.error(f"NaN or Inf residuals at iteration {n}: {self.monitor.res}")
                    raise SolverDivergedError(f"Solver diverged at iteration {n}")

                if n % settings.residual_out == 0 or n == self.ninit:
                    self._record(out, verbose)
                    recorded = n

                if conv < settings.toler:
                    self.state = RunState.CONVERGED
                elif n >= settings.nmax:
                    self.state = RunState.EXHAUSTED
                else:
                    if n % settings.iterout == 0:
                        self._write_output(out)
                    n += 1

            if recorded != self.iteration and self.iteration >= self.ninit:
                self._record(out, verbose)

            if self.state is RunState.CONVERGED:
                logger.info(f"Solver stopped in {self.iteration} iterations because the "
                            f"convergence criteria was met.")
            else:
                logger.warning(f"Solver stopped in {self.iteration} iterations because the "
                               f"specified maximum number of timesteps was exceeded.")

            norms = None
            if settings.mms_flag == 1:
                norms = discretization_error_norms(self.fields.u, config)
                write_error_norms(config.path("DE_norms.dat"), norms)
                for name, values in norms.items():
                    logger.info(f"{name} DE norms (p, u, v): {values[0]:e} {values[1]:e} {values[2]:e}")

            self._write_output(out)

        elapsed = time.time() - start_time
        logger.info(f"Simulation completed in {elapsed:.2f} seconds")

        return RunResult(state=self.state, iterations=self.iteration, time=self.rtime,
                         conv=self.monitor.conv, residuals=self.monitor.res.copy(),
                         elapsed=elapsed, error_norms=norms)

    def save_results(self, output_base_name: str, hdf5: bool = True, plots: bool = True):
        """HDF5 export and figures"""
        if hdf5:
            group = save_results_hdf5(f"{output_base_name}.h5", self.fields.u, self.config,
                                      attrs={"iterations": self.iteration,
                                             "pseudo_time": self.rtime})
            logger.info(f"Field saved to {output_base_name}.h5 [{group}]")
        if plots:
            generate_plots(output_base_name, self.fields.u, self.residual_history, self.config)
            logger.info(f"Plots saved with prefix {output_base_name}")


def run_case(config: CaseConfig, hdf5: bool = False, plots: bool = False,
             verbose: bool = True):
    """
    Create and solve a lid-driven cavity problem

    Returns:
        (solver, result)
    """
    solver = CavitySolver(config)
    result = solver.solve(verbose=verbose)
    if hdf5 or plots:
        solver.save_results(config.path("cavity"), hdf5=hdf5, plots=plots)
    return solver, result
