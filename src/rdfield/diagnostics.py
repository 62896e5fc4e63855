# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# src/rdfield/diagnostics.py
import logging

import numpy as np

logger = logging.getLogger(__name__)


def calculate_difference(a, b):
    """Pointwise absolute difference |a - b| as a flat array."""
    return np.abs(np.ravel(a) - np.ravel(b))


def rms_error(a, b):
    diff = np.ravel(a) - np.ravel(b)
    return float(np.sqrt(np.mean(diff * diff)))


def max_abs_difference(a, b):
    return float(np.max(calculate_difference(a, b)))


def check_for_steady_state(prev, current, tol=1e-5):
    """True if the largest change between two successive iterates is below tol."""
    return max_abs_difference(prev, current) < tol


def relative_error_summary(numerical, reference, sources=None):
    """Compare two fields the way steady-state validations report them.

    Errors are normalised by the span, the difference between the averaged
    maxima and the averaged minima of both fields. If ``sources`` is given,
    only cells without a source enter the error statistics, since a truncated
    series rings at point sources.

    Returns:
        dict with span, max_rel_error, rms_error, rms_rel_error, n_cells.
    """
    num = np.ravel(numerical)
    ref = np.ravel(reference)
    av_max = 0.5 * (num.max() + ref.max())
    av_min = 0.5 * (num.min() + ref.min())
    span = av_max - av_min

    mask = np.ones(num.size, dtype=bool)
    if sources is not None:
        mask = np.ravel(sources) == 0
    diff = np.abs(num - ref)[mask]

    rms = float(np.sqrt(np.mean(diff**2))) if diff.size else 0.0
    if span > 0:
        max_rel = float(diff.max() / span) if diff.size else 0.0
        rms_rel = rms / span
    else:
        max_rel = 0.0 if not diff.size or diff.max() == 0 else float("inf")
        rms_rel = max_rel
    return {
        "span": float(span),
        "max_rel_error": max_rel,
        "rms_error": rms,
        "rms_rel_error": rms_rel,
        "n_cells": int(diff.size),
    }


class SteadyStateRun:
    """Outcome of ``run_to_steady_state``.

    Attributes:
        result: StepResult of the last stepping call
        converged: True if the change between chunks fell below tol
        chunks: number of stepping calls made
        iterations: total time steps taken
        last_change: max |change| over the last chunk
    """

    def __init__(self, result, converged, chunks, iterations, last_change):
        self.result = result
        self.converged = converged
        self.chunks = chunks
        self.iterations = iterations
        self.last_change = last_change

    @property
    def field(self):
        return self.result.field


def run_to_steady_state(solver, concentration, sources, chunk_iterations=100, tol=1e-6,
                        max_chunks=10000, allow_negative=True):
    """Step ``solver`` in chunks until successive chunks differ by less than tol.

    ``solver`` is anything with ``step(concentration, sources, iterations,
    allow_negative)`` returning a StepResult. Stops early on a failed step.
    """
    if chunk_iterations < 1:
        raise ValueError(f"chunk_iterations must be >= 1, got {chunk_iterations}")
    if max_chunks < 1:
        raise ValueError(f"max_chunks must be >= 1, got {max_chunks}")

    previous = np.array(concentration, dtype=np.float64, copy=True)
    change = np.inf
    result = None
    for chunk in range(1, max_chunks + 1):
        result = solver.step(concentration, sources, chunk_iterations, allow_negative=allow_negative)
        if not result.ok:
            logger.warning("steady-state run stopped at chunk %d: %s", chunk, result.reason)
            return SteadyStateRun(result, False, chunk, chunk * chunk_iterations, change)

        change = max_abs_difference(previous, concentration)
        logger.debug("chunk %d: max change %.3e", chunk, change)
        if change < tol:
            return SteadyStateRun(result, True, chunk, chunk * chunk_iterations, change)
        previous[...] = concentration

    logger.warning(
        "steady state not reached after %d chunks (last change %.3e, tol %.1e)",
        max_chunks, change, tol,
    )
    return SteadyStateRun(result, False, max_chunks, max_chunks * chunk_iterations, change)
