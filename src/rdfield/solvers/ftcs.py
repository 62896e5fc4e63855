# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import numpy as np
from numba import njit

from rdfield.errors import SolverNotConfiguredError
from rdfield.grid import CellGrid
from rdfield.solvers.result import StepResult

logger = logging.getLogger(__name__)


@njit(cache=True)
def _ftcs_iterations(u, u_next, sources, width, height, r, decay_dt, dt,
                     iterations, allow_negative):
    """Explicit forward-time centred-space loop with mirrored boundaries.

    Returns (final_buffer_index, steps_done, first_negative, min_value).
    """
    first_negative = -1
    min_value = 0.0
    current = 0
    src = u
    dst = u_next

    for step in range(iterations):
        negative_here = False
        for j in range(height):
            row = j * width
            below = row - width if j > 0 else row
            above = row + width if j < height - 1 else row
            for i in range(width):
                left = i - 1 if i > 0 else i
                right = i + 1 if i < width - 1 else i
                centre = src[row + i]
                v = (
                    centre
                    + r * (src[row + left] + src[row + right] + src[below + i]
                           + src[above + i] - 4.0 * centre)
                    - decay_dt * centre
                    + dt * sources[row + i]
                )
                if v < 0.0:
                    negative_here = True
                    if v < min_value:
                        min_value = v
                dst[row + i] = v
        current = 1 - current
        tmp = src
        src = dst
        dst = tmp
        if negative_here:
            if first_negative < 0:
                first_negative = step
            if not allow_negative:
                return current, step + 1, first_negative, min_value

    return current, iterations, first_negative, min_value


class FTCSSolver:
    """Explicit 2D reference integrator.

    Conditionally stable: the time step is derived from the grid as
    dt = safety * dx^2 / (4*D), well inside the explicit stability bound, so
    callers ask for a time lapse instead of an iteration count.
    """

    def __init__(self, *args, **kwargs):
        self.grid = None
        self.time = 0.0
        if args or kwargs:
            self.configure(*args, **kwargs)

    def configure(self, width, height, D, dx, decay_rate=0.0, safety=0.03):
        if D <= 0:
            raise ValueError(f"D must be positive for a stable explicit step, got {D}")
        if decay_rate < 0:
            raise ValueError(f"decay_rate must be non-negative, got {decay_rate}")
        if not 0 < safety <= 1:
            raise ValueError(f"safety must be in (0, 1], got {safety}")

        self.grid = CellGrid(width, height, dx)
        self.D = float(D)
        self.decay_rate = float(decay_rate)
        self.dt = safety * dx * dx / (4.0 * self.D)
        self.r = self.D * self.dt / (dx * dx)
        self.u = np.zeros(self.grid.size)
        self.u_next = np.zeros(self.grid.size)
        self.time = 0.0
        logger.debug("FTCS configured: %r, D=%.6g dt=%.6g", self.grid, self.D, self.dt)
        return self

    def iterations_for(self, time_lapse):
        """Number of explicit steps covering ``time_lapse``."""
        return int(round(time_lapse / self.dt))

    def advance(self, concentration, sources, time_lapse, allow_negative=False):
        """Advance ``concentration`` by ``time_lapse`` using the stable time step.

        The caller's array is written only on success (or with
        ``allow_negative``).
        """
        if self.grid is None:
            raise SolverNotConfiguredError("FTCSSolver.configure must be called before stepping")
        if time_lapse < 0:
            raise ValueError(f"time_lapse must be non-negative, got {time_lapse}")

        grid = self.grid
        out = grid.flat_view(concentration, "concentration")
        src = grid.as_flat(sources, "sources")
        n_iter = self.iterations_for(time_lapse)

        self.u[:] = out
        current, done, first_negative, min_value = _ftcs_iterations(
            self.u, self.u_next, src, grid.width, grid.height,
            self.r, self.decay_rate * self.dt, self.dt, n_iter, allow_negative,
        )
        self.time += done * self.dt
        latest = self.u_next if current == 1 else self.u

        if first_negative >= 0 and not allow_negative:
            logger.warning(
                "Concentration went negative during FTCS (step %d, min %.6g)",
                first_negative, min_value,
            )
            return StepResult.negative(first_negative, min_value)

        out[:] = latest
        if first_negative >= 0:
            return StepResult.success(concentration, iteration=first_negative, min_value=min_value)
        return StepResult.success(concentration)
