"""Errors raised by the cavity solver."""


class CFDError(Exception):
    """Base class for all solver errors"""


class ConfigurationError(CFDError, ValueError):
    """Invalid case configuration (mode flags, grid size, physical constants)"""


class CheckpointError(CFDError):
    """Restart file is missing, unreadable or does not match the grid"""


class SolverDivergedError(CFDError):
    """Residuals became NaN or Inf"""
