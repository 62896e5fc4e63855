# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Benchmarking utilities for profiling rdfield hot paths.

Micro-benchmarks time individual kernels after a numba warm-up call.
"""

import time

import numpy as np


def _make_test_data(width=100, height=100, probability=0.01, seed=0):
    """Create a source field and a zero concentration field."""
    from rdfield.sources import random_sources
    sources = random_sources(width, height, probability, rng=seed)
    sources[(height // 2) * width + width // 2] = 1.0
    return np.zeros(width * height), sources


def _time_fn(fn, args=(), kwargs=None, n_warmup=3, n_iter=100):
    """Time a function over n_iter calls, returning median and stats."""
    kwargs = kwargs or {}
    for _ in range(n_warmup):
        fn(*args, **kwargs)
    times = []
    for _ in range(n_iter):
        t0 = time.perf_counter_ns()
        fn(*args, **kwargs)
        t1 = time.perf_counter_ns()
        times.append((t1 - t0) * 1e-6)  # ms
    times = np.array(times)
    return {
        "median_ms": float(np.median(times)),
        "mean_ms": float(np.mean(times)),
        "std_ms": float(np.std(times)),
        "min_ms": float(np.min(times)),
        "max_ms": float(np.max(times)),
        "n_iter": n_iter,
    }


def bench_thomas_solve(N=1000, n_iter=500):
    """Benchmark thomas_solve on a diagonally dominant random system."""
    from rdfield.solvers.tridiagonal import thomas_solve
    rng = np.random.default_rng(0)
    a = rng.standard_normal(N)
    b = rng.standard_normal(N) + 5.0  # diag dominant
    c = rng.standard_normal(N)
    d = rng.standard_normal(N)
    return _time_fn(thomas_solve, args=(a, b, c, d), n_iter=n_iter)


def bench_adi_step(N=100, n_iter=50):
    """Benchmark one ADI time step on an N x N grid."""
    from rdfield.solvers.adi import ADISolver
    solver = ADISolver(N, N, 5.0, 1.0, 0.1, decay_rate=0.01)
    u, sources = _make_test_data(N, N)
    return _time_fn(solver.step, args=(u, sources, 1, True), n_iter=n_iter)


def bench_crank_nicolson_step(N=2000, n_iter=200):
    """Benchmark one Crank-Nicolson step on a line of N cells."""
    from rdfield.solvers.crank_nicolson import CrankNicolsonSolver
    solver = CrankNicolsonSolver(N, 10.0, 1.0, 0.2)
    u = np.ones(N)
    sources = np.zeros(N)
    sources[N // 2] = 1.0
    return _time_fn(solver.step, args=(u, sources, 1, True), n_iter=n_iter)


def bench_analytic(N=100, max_mode=200, n_iter=10):
    """Benchmark the truncated eigenfunction steady state."""
    from rdfield.analytic import analytic_steady_state
    _, sources = _make_test_data(N, N)
    return _time_fn(analytic_steady_state, args=(N, N, 5.0, 0.01, 1.0, sources, max_mode),
                    n_iter=n_iter)


def bench_effective_influence(N=100, lam=8.0, n_iter=10):
    """Benchmark the effective-influence kernel sum."""
    from rdfield.effective import effective_influence
    _, sources = _make_test_data(N, N)
    return _time_fn(effective_influence, args=(N, N, sources, lam, 100.0), n_iter=n_iter)


def run_all_benchmarks(verbose=True):
    """Run all micro-benchmarks. Returns dict of results."""
    results = {}

    benches = [
        ("thomas_solve", bench_thomas_solve),
        ("adi_step", bench_adi_step),
        ("crank_nicolson_step", bench_crank_nicolson_step),
        ("analytic_steady_state", bench_analytic),
        ("effective_influence", bench_effective_influence),
    ]

    for name, fn in benches:
        if verbose:
            print(f"  {name}...", end="", flush=True)
        r = fn()
        results[name] = r
        if verbose:
            print(f" {r['median_ms']:.3f} ms (median, n={r['n_iter']})")

    return results


def compare_results(before, after):
    """Print a comparison table of two benchmark result sets."""
    print(f"\n{'Benchmark':<24} {'Before':>10} {'After':>10} {'Speedup':>10}")
    print("-" * 57)
    for key in before:
        b = before[key]["median_ms"]
        a = after[key]["median_ms"]
        speedup = b / a if a > 0 else float("inf")
        print(f"{key:<24} {b:>8.3f}ms {a:>8.3f}ms {speedup:>9.1f}x")


if __name__ == "__main__":
    print("=" * 57)
    print("rdfield Benchmarks")
    print("=" * 57)
    print()
    run_all_benchmarks()
