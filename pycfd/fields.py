import numpy as np

from .settings import NEQ, MeshParameters


def copy_data(source: np.ndarray, target: np.ndarray):
    """Deep copy of a field into another field of identical shape"""
    if source.shape != target.shape:
        raise ValueError(f"Shape mismatch: {source.shape} vs {target.shape}")
    np.copyto(target, source)


class GridFields:
    """All long-lived arrays of a run.

    State arrays are C-ordered (imax, jmax, neq), so cell (i, j, k) lives at
    flat index i*jmax*neq + j*neq + k; scalar arrays are (imax, jmax).
    """
    def __init__(self, mesh: MeshParameters, neq: int = NEQ):
        shape = (mesh.imax, mesh.jmax)
        self.neq = neq

        # Solution variables: current and previous iterate [p, u, v]
        self.u = np.zeros(shape + (neq,))
        self.uold = np.zeros(shape + (neq,))
        self.src = np.zeros(shape + (neq,))  # Source terms (MMS forcing)

        self.viscx = np.zeros(shape)  # Artificial viscosity
        self.viscy = np.zeros(shape)
        self.dt = np.zeros(shape)  # Local time step

    @property
    def shape(self):
        return self.u.shape

    def swap(self):
        """Exchange ownership of the current and previous iterate buffers"""
        self.u, self.uold = self.uold, self.u

    def snapshot(self):
        """Copy the current iterate into the previous-iterate buffer"""
        copy_data(self.u, self.uold)
