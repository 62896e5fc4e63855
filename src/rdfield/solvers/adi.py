# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import numpy as np
from numba import njit

from rdfield.errors import SolverNotConfiguredError
from rdfield.grid import CellGrid
from rdfield.physics import PhysicalConfig
from rdfield.solvers.operators import build_adi_operator
from rdfield.solvers.result import StepResult
from rdfield.solvers.tridiagonal import PIVOT_TOLERANCE, thomas_solve_into

logger = logging.getLogger(__name__)


@njit(cache=True)
def _adi_iterations(
    u, scaled, width, height, alpha, explicit_coeff,
    ax, bx, cx, rhs_x, cp_x, dp_x, sol_x,
    ay, by, cy, rhs_y, cp_y, dp_y, sol_y,
    mid, iterations, tol,
):
    """Run ``iterations`` Peaceman-Rachford steps on the flat field ``u`` in place.

    Returns (first_negative_iteration, min_value); first_negative_iteration
    is -1 when no half step produced a negative value.
    """
    first_negative = -1
    min_value = 0.0

    for it in range(iterations):
        # First half step: implicit in x, explicit in y, one solve per row.
        for j in range(height):
            row = j * width
            below = row - width if j > 0 else row
            above = row + width if j < height - 1 else row
            for i in range(width):
                rhs_x[i] = (
                    alpha * u[below + i]
                    + explicit_coeff * u[row + i]
                    + alpha * u[above + i]
                    + scaled[row + i]
                )
            thomas_solve_into(ax, bx, cx, rhs_x, width, cp_x, dp_x, sol_x, tol)
            for i in range(width):
                v = sol_x[i]
                if v < 0.0:
                    if first_negative < 0:
                        first_negative = it
                    if v < min_value:
                        min_value = v
                mid[row + i] = v

        # Second half step: implicit in y, explicit in x, one solve per column.
        for i in range(width):
            left = i - 1 if i > 0 else i
            right = i + 1 if i < width - 1 else i
            for j in range(height):
                row = j * width
                rhs_y[j] = (
                    alpha * mid[row + left]
                    + explicit_coeff * mid[row + i]
                    + alpha * mid[row + right]
                    + scaled[row + i]
                )
            thomas_solve_into(ay, by, cy, rhs_y, height, cp_y, dp_y, sol_y, tol)
            for j in range(height):
                v = sol_y[j]
                if v < 0.0:
                    if first_negative < 0:
                        first_negative = it
                    if v < min_value:
                        min_value = v
                u[j * width + i] = v

    return first_negative, min_value


class ADISolver:
    """Alternating-Direction-Implicit integrator for 2D diffusion-decay-source.

    Each outer iteration advances the field by dt in two half steps: implicit
    along x with the y neighbours taken explicitly, then implicit along y with
    the x neighbours taken explicitly from the intermediate field. Zero-flux
    boundaries are folded into the implicit bands and mirrored on the explicit
    axis.

    The solver is a context object: ``configure`` fixes the grid and physics
    and allocates all buffers; ``step`` then reuses them. Separate simulations
    need separate instances.

    Usage:
        solver = ADISolver(width, height, D, dx, dt, decay_rate)
        result = solver.step(concentration, sources, iterations)
        if result.ok:
            field = result.field
    """

    def __init__(self, *args, **kwargs):
        self.operator = None
        self.time = 0.0
        self.pivot_tol = PIVOT_TOLERANCE
        if args or kwargs:
            self.configure(*args, **kwargs)

    def configure(self, width, height, D, dx, dt, decay_rate=0.0, pivot_tol=PIVOT_TOLERANCE):
        """(Re)build the operator state, replacing any previous configuration."""
        grid = CellGrid(width, height, dx)
        physics = PhysicalConfig(D=D, dx=dx, dt=dt, decay_rate=decay_rate)
        self.operator = build_adi_operator(grid, physics)
        self.pivot_tol = pivot_tol
        self.time = 0.0
        logger.debug("ADI configured: %r, %r", grid, physics)
        return self

    @property
    def configured(self):
        return self.operator is not None

    @property
    def grid(self):
        self._require_configured()
        return self.operator.grid

    @property
    def physics(self):
        self._require_configured()
        return self.operator.physics

    def _require_configured(self):
        if self.operator is None:
            raise SolverNotConfiguredError("ADISolver.configure must be called before stepping")

    def step(self, concentration, sources, iterations, allow_negative=False):
        """Advance ``concentration`` in place by ``iterations`` time steps.

        Args:
            concentration: float64 field, flat (width*height,) or (height, width);
                overwritten in place.
            sources: per-cell source rate, same grid. Scaled by dt/2 once per
                call and reused for every iteration, so it must not change
                while the call runs.
            iterations: number of full time steps (>= 0).
            allow_negative: if False, any negative value produced by either half
                step turns the result into a failure.

        Returns:
            StepResult. On failure the array has still been advanced; nothing
            is rolled back.
        """
        self._require_configured()
        op = self.operator
        grid = op.grid

        n_iter = int(iterations)
        if n_iter != iterations or n_iter < 0:
            raise ValueError(f"iterations must be a non-negative integer, got {iterations}")

        u = grid.flat_view(concentration, "concentration")
        s = grid.as_flat(sources, "sources")
        np.multiply(s, op.half_dt, out=op.scaled_sources)

        xl = op.x_line
        yl = op.y_line
        first_negative, min_value = _adi_iterations(
            u, op.scaled_sources, grid.width, grid.height, op.alpha, op.explicit_coeff,
            xl.lower, xl.diag, xl.upper, xl.rhs, xl.cp, xl.dp, xl.solution,
            yl.lower, yl.diag, yl.upper, yl.rhs, yl.cp, yl.dp, yl.solution,
            op.intermediate, n_iter, self.pivot_tol,
        )
        self.time += n_iter * op.physics.dt

        if first_negative >= 0:
            if not allow_negative:
                logger.warning(
                    "Concentration went negative during ADI (iteration %d, min %.6g)",
                    first_negative, min_value,
                )
                return StepResult.negative(first_negative, min_value)
            return StepResult.success(concentration, iteration=first_negative, min_value=min_value)
        return StepResult.success(concentration)
