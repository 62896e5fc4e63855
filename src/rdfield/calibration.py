# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Grid-search calibration of the effective-influence heuristic."""

import logging

import numpy as np
from tqdm.auto import tqdm

from rdfield.diagnostics import rms_error
from rdfield.effective import KERNEL_CUTOFF_LENGTHS, effective_influence

logger = logging.getLogger(__name__)


def linspace_grid(start, end, count):
    """``count`` evenly spaced search values from start to end inclusive."""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    return np.linspace(start, end, count)


class CalibrationResult:
    """Best (lam, scale) pair and the full RMS error surface.

    Attributes:
        lam, scale: best parameters
        rms: RMS error at the best pair
        lambda_values, scale_values: searched values
        errors: RMS errors, shape (len(lambda_values), len(scale_values))
    """

    def __init__(self, lam, scale, rms, lambda_values, scale_values, errors):
        self.lam = lam
        self.scale = scale
        self.rms = rms
        self.lambda_values = lambda_values
        self.scale_values = scale_values
        self.errors = errors

    def as_dict(self):
        return {"lam": self.lam, "scale": self.scale, "rms": self.rms}


def calibrate_effective_influence(width, height, sources, reference, lambda_values,
                                  scale_values, cutoff_lengths=KERNEL_CUTOFF_LENGTHS,
                                  progress=True):
    """Fit (lam, scale) by minimising the RMS error against ``reference``.

    The kernel field depends on lam only; scale multiplies it. Each lam is
    therefore evaluated once and reused across all scale values.

    Args:
        width, height: grid size.
        sources: per-cell sources, width*height values.
        reference: field to match (numerical or analytic steady state).
        lambda_values, scale_values: candidate values.
        progress: show a tqdm progress bar over lam.

    Returns:
        CalibrationResult.
    """
    lambda_values = np.asarray(lambda_values, dtype=np.float64).ravel()
    scale_values = np.asarray(scale_values, dtype=np.float64).ravel()
    if lambda_values.size == 0 or scale_values.size == 0:
        raise ValueError("lambda_values and scale_values must be non-empty")
    reference = np.ravel(reference)

    logger.info(
        "Calibrating effective influence: %d lambda x %d scale values",
        lambda_values.size, scale_values.size,
    )
    errors = np.empty((lambda_values.size, scale_values.size))
    for a, lam in enumerate(tqdm(lambda_values, desc="Calibrate", unit="lambda",
                                 disable=not progress)):
        unit_field = effective_influence(width, height, sources, lam, 1.0, cutoff_lengths)
        for b, scale in enumerate(scale_values):
            errors[a, b] = rms_error(scale * unit_field, reference)
        logger.debug("lambda=%.6g best rms %.6g", lam, errors[a].min())

    a, b = np.unravel_index(np.argmin(errors), errors.shape)
    result = CalibrationResult(
        float(lambda_values[a]), float(scale_values[b]), float(errors[a, b]),
        lambda_values, scale_values, errors,
    )
    logger.info(
        "Calibration done: lam=%.6g scale=%.6g rms=%.6g",
        result.lam, result.scale, result.rms,
    )
    return result
