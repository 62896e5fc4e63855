# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Closed-form steady state of the continuous problem via Neumann eigenmodes.

On [0, Lx] x [0, Ly] with zero-flux walls the Laplacian has eigenfunctions

    phi_nm(x, y) = cos(n*pi*x/Lx) * cos(m*pi*y/Ly),
    lambda_nm = pi^2 * (n^2/Lx^2 + m^2/Ly^2),

so the steady state of D*laplacian(u) - k*u + s = 0 is

    u = sum_nm Q_nm / (D*lambda_nm + k) * phi_nm

where Q_nm is the projection of s on phi_nm. The series is truncated at
n, m <= max_mode.
"""

import logging

import numpy as np

from rdfield.grid import CellGrid

logger = logging.getLogger(__name__)

# Modes whose amplitude is below this are skipped.
NEGLIGIBLE_AMPLITUDE = 1e-15


def neumann_cosine_table(n_cells, dx, max_mode):
    """cos(k*pi*x/L) at the cell centres for k = 0..max_mode, shape (max_mode+1, n_cells)."""
    L = n_cells * dx
    x = (np.arange(n_cells) + 0.5) * dx
    modes = np.arange(max_mode + 1)
    return np.cos(np.pi * np.outer(modes, x) / L)


def neumann_eigenvalue(m, n, width, height, dx):
    """Continuous Laplacian eigenvalue of mode (n along x, m along y)."""
    Lx = width * dx
    Ly = height * dx
    return np.pi**2 * (n * n / (Lx * Lx) + m * m / (Ly * Ly))


def neumann_eigenfunction(m, n, width, height, dx):
    """Flat field cos(n*pi*x/Lx) * cos(m*pi*y/Ly) sampled at cell centres."""
    grid = CellGrid(width, height, dx)
    fx = np.cos(n * np.pi * grid.x / grid.Lx)
    fy = np.cos(m * np.pi * grid.y / grid.Ly)
    return np.outer(fy, fx).ravel()


def decayed_eigenmode(m, n, width, height, dx, D, decay_rate, t):
    """Exact source-free solution at time t starting from a single eigenmode."""
    rate = D * neumann_eigenvalue(m, n, width, height, dx) + decay_rate
    return neumann_eigenfunction(m, n, width, height, dx) * np.exp(-rate * t)


def analytic_steady_state(width, height, D, decay_rate, dx, sources, max_mode,
                          negligible_amplitude=NEGLIGIBLE_AMPLITUDE):
    """Truncated double-cosine steady state for per-cell source rates.

    Args:
        width, height: grid size in cells.
        D: diffusion coefficient (>= 0).
        decay_rate: linear decay rate k (>= 0).
        dx: cell size.
        sources: rate per cell, flat (width*height,) or (height, width).
        max_mode: highest mode index kept along each axis.
        negligible_amplitude: modes with |Q/K| below this are dropped.

    Returns:
        flat float64 array of length width*height.

    Raises:
        ValueError: if a zero-stiffness mode (D*lambda + k == 0, i.e. the
            mean mode without decay) receives a non-negligible source
            projection, in which case no steady state exists.
    """
    if D < 0:
        raise ValueError(f"D must be non-negative, got {D}")
    if decay_rate < 0:
        raise ValueError(f"decay_rate must be non-negative, got {decay_rate}")
    if int(max_mode) != max_mode or max_mode < 0:
        raise ValueError(f"max_mode must be a non-negative integer, got {max_mode}")
    max_mode = int(max_mode)

    grid = CellGrid(width, height, dx)
    src = grid.as_flat(sources, "sources")
    field = grid.zeros()

    active = np.flatnonzero(src)
    if active.size == 0:
        return field

    Lx, Ly = grid.Lx, grid.Ly
    i_idx = active % grid.width
    j_idx = active // grid.width
    strengths = src[active]

    cos_x = neumann_cosine_table(grid.width, dx, max_mode)
    cos_y = neumann_cosine_table(grid.height, dx, max_mode)

    modes = np.arange(max_mode + 1)
    e = np.where(modes == 0, 0.5, 1.0)

    # Q[m, n] over the active sources only.
    projection = (cos_y[:, j_idx] * strengths) @ cos_x[:, i_idx].T
    Q = (4.0 / (Lx * Ly)) * np.outer(e, e) * projection

    eigenvalues = np.pi**2 * (
        (modes**2 / (Ly * Ly))[:, None] + (modes**2 / (Lx * Lx))[None, :]
    )
    K = D * eigenvalues + decay_rate

    singular = K == 0.0
    if np.any(singular):
        if np.any(np.abs(Q[singular]) >= negligible_amplitude):
            raise ValueError(
                "no steady state: net source with zero decay and zero stiffness "
                f"(Q_00={Q[0, 0]:.6g})"
            )
        logger.warning("zero-stiffness mode dropped; steady state is defined up to a constant")

    amplitude = np.zeros_like(Q)
    np.divide(Q, K, out=amplitude, where=~singular)
    amplitude[np.abs(amplitude) < negligible_amplitude] = 0.0

    field = (cos_y.T @ amplitude @ cos_x).ravel()
    logger.debug(
        "analytic steady state %dx%d: %d active sources, %d/%d modes kept",
        grid.width, grid.height, active.size,
        int(np.count_nonzero(amplitude)), amplitude.size,
    )
    return field
