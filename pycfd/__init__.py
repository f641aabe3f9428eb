"""Lid-driven cavity flow by artificial compressibility and pseudo-time relaxation."""
from .exceptions import CFDError, CheckpointError, ConfigurationError, SolverDivergedError
from .settings import (CaseConfig, FluidProperties, ManufacturedConstants, MeshParameters,
                       SolverSettings)
from .solver import CavitySolver, RunResult, RunState, run_case

__version__ = "0.1.0"

__all__ = [
    "CFDError", "CheckpointError", "ConfigurationError", "SolverDivergedError",
    "CaseConfig", "FluidProperties", "ManufacturedConstants", "MeshParameters", "SolverSettings",
    "CavitySolver", "RunResult", "RunState", "run_case",
]
