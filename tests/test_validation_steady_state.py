# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# tests/test_validation_steady_state.py
"""ADI run to steady state vs the truncated eigenfunction series.

Point sources ring in the truncated series, so with point sources only
source-free cells are compared. Smooth sources are compared everywhere.
Errors are relative to the span of the two fields.
"""

import numpy as np
import pytest
from rdfield.analytic import analytic_steady_state
from rdfield.diagnostics import relative_error_summary, run_to_steady_state
from rdfield.solvers.adi import ADISolver
from rdfield.sources import random_sources

WIDTH = HEIGHT = 100
D = 5.0
DECAY_RATE = 0.01
DX = 1.0
DT = 0.5
MAX_MODE = 800


@pytest.mark.parametrize("probability", [0.0003, 0.002, 0.01, 0.02, 0.05],
                         ids=["infrequent", "moderate", "frequent", "very-frequent", "dense"])
def test_adi_steady_state_matches_analytic(probability):
    sources = random_sources(WIDTH, HEIGHT, probability, rng=12345)
    sources[(HEIGHT // 2) * WIDTH + WIDTH // 2] = 1.0

    analytic = analytic_steady_state(WIDTH, HEIGHT, D, DECAY_RATE, DX, sources, MAX_MODE)

    numerical = np.zeros(WIDTH * HEIGHT)
    solver = ADISolver(WIDTH, HEIGHT, D, DX, DT, decay_rate=DECAY_RATE)
    run = run_to_steady_state(solver, numerical, sources, chunk_iterations=100, tol=1e-6)
    assert run.converged, f"no steady state after {run.iterations} iterations"

    summary = relative_error_summary(numerical, analytic, sources)
    assert summary["span"] > 0
    assert summary["max_rel_error"] < 2e-2, f"max rel error {summary['max_rel_error']:.3e}"
    assert summary["rms_rel_error"] < 5e-3, f"rms rel error {summary['rms_rel_error']:.3e}"


def test_mean_level_matches_net_source():
    """Both solutions carry sum(s)/k in total at steady state.

    Modes stay below 2*min(W, H); higher ones alias at the cell centres.
    """
    W, H, k = 40, 30, 0.05
    sources = random_sources(W, H, 0.05, rng=99)
    analytic = analytic_steady_state(W, H, 2.0, k, 1.0, sources, 59)
    numerical = np.zeros(W * H)
    run = run_to_steady_state(ADISolver(W, H, 2.0, 1.0, 1.0, decay_rate=k),
                              numerical, sources, chunk_iterations=50, tol=1e-10)
    assert run.converged
    assert numerical.sum() == pytest.approx(sources.sum() / k, rel=1e-8)
    assert analytic.sum() == pytest.approx(sources.sum() / k, rel=1e-10)


def _gaussian_bumps(n):
    """Two smooth bumps on an n x n grid, flat row-major."""
    x = np.arange(n) + 0.5
    X, Y = np.meshgrid(x, x)
    bumps = np.exp(-((X - 14.0) ** 2 + (Y - 23.0) ** 2) / 50.0)
    bumps += 0.5 * np.exp(-((X - 29.0) ** 2 + (Y - 10.0) ** 2) / 50.0)
    return bumps.ravel()


@pytest.mark.parametrize("D,decay_rate,dt", [
    (0.01, 0.001, 1.0),
    (0.01, 10.0, 0.1),
    (100.0, 0.001, 1.0),
    (100.0, 10.0, 0.1),
])
def test_adi_steady_state_matches_analytic_across_parameter_range(D, decay_rate, dt):
    """Corners of D in [0.01, 100] and k in [0.001, 10] with smooth sources.

    max_mode = n - 1 keeps every mode inside the cell-centre cosine basis.
    """
    n = 40
    sources = _gaussian_bumps(n)
    analytic = analytic_steady_state(n, n, D, decay_rate, DX, sources, n - 1)

    numerical = np.zeros(n * n)
    solver = ADISolver(n, n, D, DX, dt, decay_rate=decay_rate)
    run = run_to_steady_state(solver, numerical, sources, chunk_iterations=100, tol=1e-6)
    assert run.converged, f"no steady state after {run.iterations} iterations"

    summary = relative_error_summary(numerical, analytic)
    assert summary["span"] > 0
    assert summary["max_rel_error"] < 2e-2, f"max rel error {summary['max_rel_error']:.3e}"
    assert summary["rms_rel_error"] < 5e-3, f"rms rel error {summary['rms_rel_error']:.3e}"
