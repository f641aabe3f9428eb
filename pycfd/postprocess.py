import os
from typing import Dict, List

import h5py
import matplotlib.pyplot as plt
import numpy as np

from .settings import CaseConfig


def _ensure_dir(filename: str):
    output_dir = os.path.dirname(filename)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)


def save_results_hdf5(filename: str, u: np.ndarray, config: CaseConfig, group_name: str = None,
                      attrs: Dict = None) -> str:
    """Save the node field to an HDF5 file, one group per case; returns the group name"""
    _ensure_dir(filename)
    mesh, fluid = config.mesh, config.fluid
    if group_name is None:
        group_name = f"Re{fluid.Re}_mesh{mesh.imax}x{mesh.jmax}_{config.solver.scheme.lower()}"

    with h5py.File(filename, 'a') as f:
        if group_name in f:
            del f[group_name]

        grp = f.create_group(group_name)

        grp.attrs["case_name"] = "lid driven cavity"
        grp.attrs["reynolds_number"] = fluid.Re
        grp.attrs["imax"] = mesh.imax
        grp.attrs["jmax"] = mesh.jmax
        grp.attrs["scheme"] = config.solver.scheme
        grp.attrs["manufactured_solution"] = config.solver.mms_flag
        for key, value in (attrs or {}).items():
            grp.attrs[key] = value

        X, Y = mesh.coordinates()
        grp.create_dataset("x", data=X)
        grp.create_dataset("y", data=Y)
        grp.create_dataset("p", data=u[:, :, 0])
        grp.create_dataset("u", data=u[:, :, 1])
        grp.create_dataset("v", data=u[:, :, 2])

    return group_name


def plot_centerlines(filename: str, u: np.ndarray, config: CaseConfig):
    """Plot centerline velocity profiles"""
    mesh = config.mesh
    ic, jc = mesh.center
    y = mesh.y(np.arange(mesh.jmax))
    x = mesh.x(np.arange(mesh.imax))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    ax1.plot(u[ic, :, 1], y, 'b-', linewidth=2)
    ax1.set_xlabel('U velocity')
    ax1.set_ylabel('Y')
    ax1.set_title(f'U velocity along vertical centerline (Re={config.fluid.Re})')
    ax1.grid(True, alpha=0.3)

    ax2.plot(x, u[:, jc, 2], 'r-', linewidth=2)
    ax2.set_xlabel('X')
    ax2.set_ylabel('V velocity')
    ax2.set_title(f'V velocity along horizontal centerline (Re={config.fluid.Re})')
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(filename, dpi=150)
    plt.close(fig)


def plot_contours(filename: str, u: np.ndarray, config: CaseConfig):
    """Pressure, velocity components and speed with streamlines"""
    X, Y = config.mesh.coordinates()
    # meshgrid/streamplot want (y, x) ordering
    X, Y = X.T, Y.T
    p, uvel, vvel = u[:, :, 0].T, u[:, :, 1].T, u[:, :, 2].T

    fig, axes = plt.subplots(2, 2, figsize=(12, 10))
    panels = [
        (axes[0, 0], uvel, 'U Velocity', 'RdBu'),
        (axes[0, 1], vvel, 'V Velocity', 'RdBu'),
        (axes[1, 0], p, 'Pressure', 'viridis'),
        (axes[1, 1], np.sqrt(uvel ** 2 + vvel ** 2), 'Velocity Magnitude with Streamlines', 'plasma'),
    ]
    for ax, data, title, cmap in panels:
        im = ax.contourf(X, Y, data, levels=20, cmap=cmap)
        ax.set_title(title)
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_aspect('equal')
        plt.colorbar(im, ax=ax)

    axes[1, 1].streamplot(X[0, :], Y[:, 0], uvel, vvel,
                          color='white', linewidth=0.5, density=1.5)

    plt.suptitle(f'Lid-Driven Cavity Flow (Re={config.fluid.Re})', fontsize=16)
    plt.tight_layout()
    plt.savefig(filename, dpi=150)
    plt.close(fig)


def plot_convergence(filename: str, history: List, config: CaseConfig):
    """Plot normalized residual history; history rows are (n, time, res1, res2, res3)"""
    data = np.asarray(history, dtype=np.float64).reshape(-1, 5)
    fig, ax = plt.subplots(figsize=(10, 6))

    ax.plot(data[:, 0], data[:, 2], 'b-', label='Continuity')
    ax.plot(data[:, 0], data[:, 3], 'r-', label='x-Momentum')
    ax.plot(data[:, 0], data[:, 4], 'g-', label='y-Momentum')

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Normalized RMS Residual')
    ax.set_yscale('log')
    ax.set_title(f'Convergence History (Re={config.fluid.Re}, {config.solver.scheme})')
    ax.legend()
    ax.grid(True, which="both", ls="--", alpha=0.5)

    plt.tight_layout()
    plt.savefig(filename, dpi=150)
    plt.close(fig)


def generate_plots(output_base_name: str, u: np.ndarray, history: List, config: CaseConfig):
    """Generate visualization plots"""
    _ensure_dir(output_base_name)
    plot_centerlines(f"{output_base_name}_centerlines.png", u, config)
    plot_contours(f"{output_base_name}_contours.png", u, config)
    if len(history) > 0:
        plot_convergence(f"{output_base_name}_convergence.png", history, config)
