# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Smoke tests for the benchmark module."""

import pytest


@pytest.mark.slow
def test_run_all_benchmarks_smoke():
    """Smoke test: run_all_benchmarks returns expected keys with positive timings."""
    from rdfield.benchmark import run_all_benchmarks

    results = run_all_benchmarks(verbose=False)

    keys = {
        "thomas_solve",
        "adi_step",
        "crank_nicolson_step",
        "analytic_steady_state",
        "effective_influence",
    }
    assert set(results) == keys
    for key in keys:
        assert results[key]["median_ms"] > 0, f"{key} median_ms should be positive"


def test_compare_results(capsys):
    """compare_results prints one row per benchmark with the speedup."""
    from rdfield.benchmark import compare_results

    before = {"adi_step": {"median_ms": 4.0}}
    after = {"adi_step": {"median_ms": 2.0}}
    compare_results(before, after)
    out = capsys.readouterr().out
    assert "adi_step" in out
    assert "2.0x" in out
