# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import numpy as np
from numba import njit

from rdfield.errors import DimensionMismatchError, SolverNotConfiguredError
from rdfield.physics import PhysicalConfig
from rdfield.solvers.operators import crank_nicolson_bands
from rdfield.solvers.result import StepResult
from rdfield.solvers.tridiagonal import PIVOT_TOLERANCE, thomas_solve_into

logger = logging.getLogger(__name__)


@njit(cache=True)
def _cn_iterations(u, u_next, sources, n, lam, beta, dt, a, b, c, rhs, cp, dp,
                   iterations, allow_negative, tol):
    """Crank-Nicolson time loop on double buffers.

    Returns (final_buffer_index, steps_done, first_negative, min_value), where
    final_buffer_index is 0 if the latest state is in ``u`` and 1 if in
    ``u_next``. Stops right after the first step with a negative value unless
    ``allow_negative``.
    """
    half = 0.5 * lam
    centre = 1.0 - lam - beta
    first_negative = -1
    min_value = 0.0
    current = 0
    src = u
    dst = u_next

    for step in range(iterations):
        # Ghost cells: u[-1] = u[1], u[n] = u[n-2].
        rhs[0] = half * src[1] + centre * src[0] + half * src[1] + dt * sources[0]
        for i in range(1, n - 1):
            rhs[i] = half * src[i - 1] + centre * src[i] + half * src[i + 1] + dt * sources[i]
        rhs[n - 1] = (
            half * src[n - 2] + centre * src[n - 1] + half * src[n - 2] + dt * sources[n - 1]
        )

        thomas_solve_into(a, b, c, rhs, n, cp, dp, dst, tol)

        negative_here = False
        for i in range(n):
            if dst[i] < 0.0:
                negative_here = True
                if dst[i] < min_value:
                    min_value = dst[i]
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


class CrankNicolsonSolver:
    """1D Crank-Nicolson integrator used to cross-check the ADI scheme.

    Solves one unsplit implicit system per step,

        (1 + lam + beta) u_i^{n+1} - lam/2 (u_{i-1}^{n+1} + u_{i+1}^{n+1})
            = lam/2 (u_{i-1}^n + u_{i+1}^n) + (1 - lam - beta) u_i^n + dt s_i

    with lam = D*dt/dx^2, beta = k*dt/2 and ghost-cell zero-flux ends.
    """

    def __init__(self, *args, **kwargs):
        self.length = None
        self.physics = None
        self.pivot_tol = PIVOT_TOLERANCE
        self.time = 0.0
        if args or kwargs:
            self.configure(*args, **kwargs)

    def configure(self, length, D, dx, dt, decay_rate=0.0, pivot_tol=PIVOT_TOLERANCE):
        if length < 2:
            raise ValueError(f"length must be >= 2, got {length}")
        self.physics = PhysicalConfig(D=D, dx=dx, dt=dt, decay_rate=decay_rate)
        self.length = int(length)
        self.lam = self.physics.cn_lambda
        self.beta = self.physics.cn_beta
        self.lower, self.diag, self.upper = crank_nicolson_bands(self.length, self.lam, self.beta)

        n = self.length
        self.rhs = np.zeros(n)
        self.cp = np.zeros(n)
        self.dp = np.zeros(n)
        self.u = np.zeros(n)
        self.u_next = np.zeros(n)
        self.pivot_tol = pivot_tol
        self.time = 0.0
        logger.debug("Crank-Nicolson configured: n=%d lam=%.6g beta=%.6g", n, self.lam, self.beta)
        return self

    @property
    def configured(self):
        return self.length is not None

    def _as_line(self, arr, name):
        arr = np.asarray(arr)
        if arr.ndim != 1 or arr.size != self.length:
            raise DimensionMismatchError(
                f"{name} has shape {arr.shape}, expected ({self.length},)"
            )
        return arr

    def step(self, concentration, sources, iterations, allow_negative=False):
        """Advance ``concentration`` by ``iterations`` steps.

        The caller's array is written only once stepping finishes successfully
        (or with ``allow_negative``); a failure leaves it untouched.
        """
        if not self.configured:
            raise SolverNotConfiguredError(
                "CrankNicolsonSolver.configure must be called before stepping"
            )
        n_iter = int(iterations)
        if n_iter != iterations or n_iter < 0:
            raise ValueError(f"iterations must be a non-negative integer, got {iterations}")

        if not isinstance(concentration, np.ndarray):
            raise TypeError(
                f"concentration must be a numpy array, got {type(concentration).__name__}"
            )
        if concentration.dtype != np.float64:
            raise TypeError(f"concentration must be float64, got {concentration.dtype}")
        conc = self._as_line(concentration, "concentration")
        src = np.ascontiguousarray(self._as_line(sources, "sources"), dtype=np.float64)

        self.u[:] = conc
        current, done, first_negative, min_value = _cn_iterations(
            self.u, self.u_next, src, self.length, self.lam, self.beta, self.physics.dt,
            self.lower, self.diag, self.upper, self.rhs, self.cp, self.dp,
            n_iter, allow_negative, self.pivot_tol,
        )
        self.time += done * self.physics.dt
        if current == 1:
            # Keep ``u`` as the latest state for the next call.
            self.u, self.u_next = self.u_next, self.u

        if first_negative >= 0 and not allow_negative:
            logger.warning(
                "Concentration went negative during Crank-Nicolson (step %d, min %.6g)",
                first_negative, min_value,
            )
            return StepResult.negative(first_negative, min_value)

        concentration[...] = self.u
        if first_negative >= 0:
            return StepResult.success(concentration, iteration=first_negative, min_value=min_value)
        return StepResult.success(concentration)
