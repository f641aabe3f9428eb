"""
Restart files.

Layout (plain text):
    line 1: iteration, pseudo-time
    line 2: the three initial residuals used for normalization
    then one line per node, i outer / j inner: x y p u v
"""
import os
import tempfile
from dataclasses import dataclass

import numpy as np

from .exceptions import CheckpointError
from .settings import NEQ, MeshParameters


@dataclass
class Checkpoint:
    iteration: int
    time: float
    resinit: np.ndarray
    u: np.ndarray  # (imax, jmax, neq)


def write_checkpoint(filename: str, checkpoint: Checkpoint, mesh: MeshParameters):
    """Write to a temporary file next to `filename`, then rename it into place.

    An interrupted write leaves the previous restart file intact.
    """
    output_dir = os.path.dirname(filename)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    X, Y = mesh.coordinates()
    rows = np.column_stack([X.ravel(), Y.ravel(), checkpoint.u.reshape(-1, NEQ)])
    fd, tmp_name = tempfile.mkstemp(prefix=f".{os.path.basename(filename)}.",
                                    dir=output_dir or None)
    try:
        with os.fdopen(fd, 'w') as f:
            f.write(f"{checkpoint.iteration:d} {checkpoint.time:.16e}\n")
            f.write(" ".join(f"{r:.16e}" for r in checkpoint.resinit) + "\n")
            np.savetxt(f, rows, fmt="%.16e")
        os.replace(tmp_name, filename)
    except BaseException:
        os.remove(tmp_name)
        raise


def read_checkpoint(filename: str, mesh: MeshParameters) -> Checkpoint:
    try:
        with open(filename, 'r') as f:
            header = f.readline().split()
            resinit = np.array([float(r) for r in f.readline().split()])
            rows = np.loadtxt(f, ndmin=2)
    except OSError as e:
        raise CheckpointError(f"Error opening restart file '{filename}': {e}") from e
    except ValueError as e:
        raise CheckpointError(f"Malformed restart file '{filename}': {e}") from e

    if len(header) != 2 or resinit.shape != (NEQ,):
        raise CheckpointError(f"Malformed restart header in '{filename}'")
    npts = mesh.imax * mesh.jmax
    if rows.shape != (npts, 2 + NEQ):
        raise CheckpointError(
            f"Restart file '{filename}' holds {rows.shape[0]} nodes, "
            f"grid {mesh.imax}x{mesh.jmax} needs {npts}")

    try:
        iteration = int(header[0])
        time = float(header[1])
    except ValueError as e:
        raise CheckpointError(f"Malformed restart header in '{filename}': {e}") from e

    u = np.ascontiguousarray(rows[:, 2:].reshape(mesh.imax, mesh.jmax, NEQ))
    return Checkpoint(iteration=iteration, time=time, resinit=resinit, u=u)
