# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from numba import njit

# Pivots and elimination denominators smaller than this in magnitude are
# replaced by +/-PIVOT_TOLERANCE (sign preserved) before dividing.
PIVOT_TOLERANCE = 1e-10


@njit(cache=True)
def _regularize(value, tol):
    if abs(value) < tol:
        if value >= 0.0:
            return tol
        return -tol
    return value


@njit(cache=True)
def thomas_solve_into(a, b, c, d, n, cp, dp, x, tol=PIVOT_TOLERANCE):
    """Solve the n x n tridiagonal system Ax = d into caller-owned buffers.

    Args:
        a: lower diagonal, length >= n. a[0] is unused.
        b: main diagonal, length >= n.
        c: upper diagonal, length >= n. c[n-1] is unused.
        d: right-hand side, length >= n.
        n: system size.
        cp: scratch for the modified upper diagonal, length >= n.
        dp: scratch for the modified right-hand side, length >= n.
        x: output, length >= n.
        tol: pivot regularization threshold.

    Near-zero pivots are clamped to +/-tol, so the routine always finishes
    with a finite result for finite inputs. The answer of a truly singular
    system is then meaningless but bounded.
    """
    pivot = _regularize(b[0], tol)
    cp[0] = c[0] / pivot
    dp[0] = d[0] / pivot
    for i in range(1, n):
        denom = _regularize(b[i] - a[i] * cp[i - 1], tol)
        cp[i] = c[i] / denom
        dp[i] = (d[i] - a[i] * dp[i - 1]) / denom
    x[n - 1] = dp[n - 1]
    for i in range(n - 2, -1, -1):
        x[i] = dp[i] - cp[i] * x[i + 1]


def thomas_solve(a, b, c, d, tol=PIVOT_TOLERANCE):
    """Solve tridiagonal system Ax = d using the Thomas algorithm.

    Args:
        a: lower diagonal, length N. a[0] is unused.
        b: main diagonal, length N.
        c: upper diagonal, length N. c[-1] is unused.
        d: right-hand side, length N.

    Returns:
        x: solution, length N. Inputs are not modified.
    """
    a = np.ascontiguousarray(a, dtype=np.float64)
    b = np.ascontiguousarray(b, dtype=np.float64)
    c = np.ascontiguousarray(c, dtype=np.float64)
    d = np.ascontiguousarray(d, dtype=np.float64)
    N = len(b)
    if N == 0:
        raise ValueError("system size must be >= 1")
    if not (len(a) == len(c) == len(d) == N):
        raise ValueError(
            f"diagonals and rhs must share length {N}, got a={len(a)}, c={len(c)}, d={len(d)}"
        )
    cp = np.empty(N)
    dp = np.empty(N)
    x = np.empty(N)
    thomas_solve_into(a, b, c, d, N, cp, dp, x, tol)
    return x


def tridiagonal_matvec(a, b, c, x):
    """Return A @ x for A stored as (lower, main, upper) bands of length N."""
    y = b * x
    y[1:] += a[1:] * x[:-1]
    y[:-1] += c[:-1] * x[1:]
    return y
