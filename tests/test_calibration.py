# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
import pytest
from rdfield.calibration import calibrate_effective_influence, linspace_grid
from rdfield.effective import effective_influence
from rdfield.sources import random_sources


def test_recovers_known_parameters():
    """Calibrating against an effective-influence field finds its own parameters."""
    W, H = 30, 20
    sources = random_sources(W, H, 0.05, rng=21)
    reference = effective_influence(W, H, sources, 3.0, 50.0)
    fit = calibrate_effective_influence(
        W, H, sources, reference,
        linspace_grid(1.0, 5.0, 5), linspace_grid(10.0, 100.0, 10),
        progress=False,
    )
    assert fit.lam == pytest.approx(3.0)
    assert fit.scale == pytest.approx(50.0)
    assert fit.rms < 1e-12
    assert fit.errors.shape == (5, 10)
    assert fit.as_dict() == {"lam": fit.lam, "scale": fit.scale, "rms": fit.rms}


def test_error_surface_minimum_is_reported():
    W, H = 12, 12
    sources = random_sources(W, H, 0.1, rng=3)
    reference = np.full(W * H, 0.7)
    fit = calibrate_effective_influence(W, H, sources, reference, [1.0, 2.0], [1.0, 5.0, 9.0],
                                        progress=False)
    assert fit.rms == pytest.approx(fit.errors.min())
    a = list(fit.lambda_values).index(fit.lam)
    b = list(fit.scale_values).index(fit.scale)
    assert fit.errors[a, b] == fit.errors.min()


def test_empty_search_grid_rejected():
    with pytest.raises(ValueError):
        calibrate_effective_influence(4, 4, np.ones(16), np.ones(16), [], [1.0], progress=False)
    with pytest.raises(ValueError):
        linspace_grid(0.0, 1.0, 0)
