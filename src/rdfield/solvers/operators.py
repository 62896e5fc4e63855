# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Tridiagonal operators and scratch buffers for the implicit integrators.

Everything that allocates lives here and runs once per configuration, so the
stepping kernels never allocate.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def neumann_bands(n, coupling, reaction=0.0):
    """Bands of (I - coupling*L + reaction*I) on a cell-centred Neumann line.

    Interior rows: -coupling, 1 + 2*coupling + reaction, -coupling.
    Boundary rows reflect the missing neighbour onto the cell itself, which
    removes one coupling from the main diagonal: 1 + coupling + reaction.

    Returns (lower, diag, upper), each of length n. lower[0] and upper[-1]
    would reference cells outside the line and are zero.
    """
    if n < 2:
        raise ValueError(f"n must be >= 2, got {n}")
    lower = np.full(n, -coupling)
    diag = np.full(n, 1.0 + 2.0 * coupling + reaction)
    upper = np.full(n, -coupling)
    diag[0] = 1.0 + coupling + reaction
    diag[-1] = 1.0 + coupling + reaction
    lower[0] = 0.0
    upper[-1] = 0.0
    return lower, diag, upper


def crank_nicolson_bands(n, lam, beta=0.0):
    """Bands of the Crank-Nicolson left-hand matrix with ghost-cell Neumann ends.

    Interior rows: -lam/2, 1 + lam + beta, -lam/2.
    Ghost cells u[-1] = u[1] and u[n] = u[n-2] fold the missing neighbour onto
    the inner one, giving the boundary rows (1 + lam + beta, -lam) and
    (-lam, 1 + lam + beta).
    """
    if n < 2:
        raise ValueError(f"n must be >= 2, got {n}")
    half = 0.5 * lam
    lower = np.full(n, -half)
    diag = np.full(n, 1.0 + lam + beta)
    upper = np.full(n, -half)
    lower[0] = 0.0
    upper[0] = -lam
    lower[-1] = -lam
    upper[-1] = 0.0
    return lower, diag, upper


class LineWorkspace:
    """Bands plus Thomas scratch for one axis.

    Attributes:
        lower, diag, upper: matrix bands, length n
        rhs: right-hand side assembled per line
        cp, dp: forward-elimination scratch
        solution: line solution
    """

    def __init__(self, bands):
        self.lower, self.diag, self.upper = bands
        n = len(self.diag)
        self.n = n
        self.rhs = np.zeros(n)
        self.cp = np.zeros(n)
        self.dp = np.zeros(n)
        self.solution = np.zeros(n)


class ADIOperator:
    """Coefficients and buffers of one ADI configuration.

    Attributes:
        grid: CellGrid
        physics: PhysicalConfig
        alpha: D*dt/(2*dx^2)
        gamma: k*dt/4
        half_dt: dt/2
        explicit_coeff: 1 - 2*alpha - gamma, centre weight of the explicit axis
        x_line: LineWorkspace of length width (rows, first half step)
        y_line: LineWorkspace of length height (columns, second half step)
        intermediate: field after the first half step, length width*height
        scaled_sources: sources * half_dt, refreshed at each stepping call
    """

    def __init__(self, grid, physics):
        self.grid = grid
        self.physics = physics
        self.alpha = physics.alpha
        self.gamma = physics.gamma
        self.half_dt = physics.half_dt
        self.explicit_coeff = 1.0 - 2.0 * self.alpha - self.gamma

        self.x_line = LineWorkspace(neumann_bands(grid.width, self.alpha, self.gamma))
        self.y_line = LineWorkspace(neumann_bands(grid.height, self.alpha, self.gamma))
        self.intermediate = np.zeros(grid.size)
        self.scaled_sources = np.zeros(grid.size)


def build_adi_operator(grid, physics):
    """Derive ADI coefficients and allocate every buffer for ``grid``/``physics``."""
    op = ADIOperator(grid, physics)
    logger.debug(
        "ADI operator %dx%d: alpha=%.6g gamma=%.6g half_dt=%.6g",
        grid.width, grid.height, op.alpha, op.gamma, op.half_dt,
    )
    return op
