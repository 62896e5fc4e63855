# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
import pytest
from rdfield.errors import DimensionMismatchError, SolverNotConfiguredError
from rdfield.solvers.crank_nicolson import CrankNicolsonSolver


def _ghost_cell_laplacian(n, dx):
    lap = -2.0 * np.eye(n) + np.eye(n, k=1) + np.eye(n, k=-1)
    lap[0, 1] = 2.0
    lap[-1, -2] = 2.0
    return lap / (dx * dx)


def test_constant_line_unchanged():
    solver = CrankNicolsonSolver(50, 2.0, 1.0, 0.5)
    u = np.full(50, 1.25)
    assert solver.step(u, np.zeros(50), 30).ok
    assert np.allclose(u, 1.25, atol=1e-13)


def test_steady_state_solves_ghost_cell_problem():
    """Fixed point of the scheme satisfies k*u - D*L u = s."""
    n, D, k, dx, dt = 40, 1.5, 0.2, 1.0, 0.5
    sources = np.zeros(n)
    sources[7] = 1.0
    sources[31] = 0.5
    A = k * np.eye(n) - D * _ghost_cell_laplacian(n, dx)
    expected = np.linalg.solve(A, sources)
    u = np.zeros(n)
    assert CrankNicolsonSolver(n, D, dx, dt, decay_rate=k).step(u, sources, 2000).ok
    assert np.allclose(u, expected, atol=1e-8)


def test_split_calls_match_single_call():
    """Two calls of 15 steps equal one call of 30."""
    n = 64
    x = np.arange(n)
    sources = np.where(x == 20, 1.0, 0.0)
    u_once = 0.5 + 0.5 * np.sin(np.pi * x / n)
    u_split = u_once.copy()
    once = CrankNicolsonSolver(n, 1.0, 1.0, 0.3, decay_rate=0.01)
    split = CrankNicolsonSolver(n, 1.0, 1.0, 0.3, decay_rate=0.01)
    once.step(u_once, sources, 30)
    split.step(u_split, sources, 15)
    split.step(u_split, sources, 15)
    assert np.allclose(u_once, u_split, atol=1e-14)
    assert split.time == pytest.approx(30 * 0.3)


def test_failure_leaves_caller_array_untouched():
    n = 20
    sources = np.zeros(n)
    sources[10] = -1.0
    u = np.zeros(n)
    result = CrankNicolsonSolver(n, 1.0, 1.0, 0.1).step(u, sources, 5)
    assert not result.ok
    assert result.iteration == 0
    assert result.min_value < 0.0
    assert np.array_equal(u, np.zeros(n))


def test_allow_negative_writes_result():
    n = 20
    sources = np.zeros(n)
    sources[10] = -1.0
    u = np.zeros(n)
    result = CrankNicolsonSolver(n, 1.0, 1.0, 0.1).step(u, sources, 5, allow_negative=True)
    assert result.ok
    assert result.iteration == 0
    assert u[10] < 0.0


def test_unconfigured_and_bad_shapes():
    with pytest.raises(SolverNotConfiguredError):
        CrankNicolsonSolver().step(np.zeros(3), np.zeros(3), 1)
    with pytest.raises(ValueError):
        CrankNicolsonSolver(1, 1.0, 1.0, 0.1)
    solver = CrankNicolsonSolver(10, 1.0, 1.0, 0.1)
    with pytest.raises(DimensionMismatchError):
        solver.step(np.zeros(9), np.zeros(10), 1)
    with pytest.raises(DimensionMismatchError):
        solver.step(np.zeros(10), np.zeros((2, 5)), 1)


def test_concentration_must_be_float64_array():
    """Integer arrays and lists are rejected before stepping."""
    solver = CrankNicolsonSolver(10, 1.0, 1.0, 0.1)
    sources = np.zeros(10)
    sources[5] = 1.0
    u_int = np.zeros(10, dtype=np.int64)
    with pytest.raises(TypeError):
        solver.step(u_int, sources, 5)
    assert np.all(u_int == 0)
    with pytest.raises(TypeError):
        solver.step([0.0] * 10, sources, 5)
    assert solver.time == 0.0
