import os

import numpy as np
from loguru import logger

from .mms import ManufacturedSolution
from .settings import CaseConfig

TABLE_HEADER = "Iter. Time (s)   dt (s)      Continuity    x-Momentum    y-Momentum"


class OutputFiles:
    """Residual history and Tecplot field files, open for the duration of a run"""
    def __init__(self, config: CaseConfig, append: bool = False):
        self.config = config
        self.append = append
        self.history = None
        self.field = None
        self.records = 0

    def __enter__(self):
        config = self.config
        if config.output_dir and not os.path.exists(config.output_dir):
            os.makedirs(config.output_dir)
        mode = 'a' if self.append else 'w'
        self.history = open(config.path(config.history_file), mode)
        try:
            self.field = open(config.path(config.field_file), mode)
        except OSError:
            self.history.close()
            raise
        if not self.append:
            self._write_headers()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        for f in (self.history, self.field):
            if f is not None and not f.closed:
                f.close()

    def _write_headers(self):
        self.history.write('TITLE = "Cavity Iterative Residual History"\n')
        self.history.write('variables="Iteration""Time(s)""Res1""Res2""Res3"\n')
        self.field.write('TITLE = "Cavity Field Data"\n')
        if self.config.solver.mms_flag == 1:
            self.field.write('variables="x(m)""y(m)""p(N/m^2)""u(m/s)""v(m/s)"'
                             '"p-exact""u-exact""v-exact""DE-p""DE-u""DE-v"\n')
        else:
            self.field.write('variables="x(m)""y(m)""p(N/m^2)""u(m/s)""v(m/s)"\n')

    def write_residuals(self, n: int, rtime: float, res, dtmin: float = None):
        """One history record; also logged as a row of the residual table"""
        self.history.write(f"{n:d} {rtime:e} {res[0]:e} {res[1]:e} {res[2]:e}\n")
        if dtmin is not None:
            if self.records % 20 == 0:
                logger.info(TABLE_HEADER)
            logger.info(f"{n:d}   {rtime:e}   {dtmin:e}   {res[0]:e}   {res[1]:e}   {res[2]:e}")
            self.records += 1

    def write_field(self, n: int, u: np.ndarray):
        """Append one Tecplot zone"""
        mesh = self.config.mesh
        X, Y = mesh.coordinates()
        columns = [X.ravel(), Y.ravel(), u[:, :, 0].ravel(), u[:, :, 1].ravel(), u[:, :, 2].ravel()]
        if self.config.solver.mms_flag == 1:
            exact = ManufacturedSolution(self.config).exact_field(X, Y)
            columns += [exact[:, :, k].ravel() for k in range(3)]
            columns += [(u[:, :, k] - exact[:, :, k]).ravel() for k in range(3)]

        self.field.write(f'zone T="n={n:d}"\n')
        self.field.write(f"I= {mesh.imax:d} J= {mesh.jmax:d}\n")
        self.field.write("DATAPACKING=POINT\n")
        np.savetxt(self.field, np.column_stack(columns), fmt="%e")
        self.field.flush()


def write_error_norms(filename: str, norms):
    with open(filename, 'w') as f:
        f.write("# norm  DE-p  DE-u  DE-v\n")
        for name in ('L1', 'L2', 'Linf'):
            values = norms[name]
            f.write(f"{name} {values[0]:e} {values[1]:e} {values[2]:e}\n")
