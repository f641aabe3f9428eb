import os

import numpy as np
import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

from pycfd.settings import CaseConfig  # noqa: E402


@pytest.fixture
def small_config(tmp_path):
    """9x9 cavity writing into a temporary directory.

    Re = 10 keeps the cell Reynolds number (Re/(imax-1) = 1.25) in the range
    where the central scheme is stable on such a coarse grid.
    """
    return CaseConfig().with_overrides(
        mesh={'imax': 9, 'jmax': 9},
        fluid={'Re': 10.0},
        solver={'nmax': 50, 'iterout': 20, 'residual_out': 5},
        output_dir=str(tmp_path),
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


class NoBoundary:
    """Leaves the border untouched so interior updates can be inspected alone"""
    name = 'none'

    def apply(self, u):
        pass


@pytest.fixture
def no_boundary():
    return NoBoundary()
