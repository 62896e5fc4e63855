# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np


def random_sources(width, height, probability, strength=1.0, rng=None):
    """Each cell independently holds a source of ``strength`` with ``probability``."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability must be in [0, 1], got {probability}")
    rng = np.random.default_rng(rng)
    hits = rng.random(width * height) < probability
    return np.where(hits, float(strength), 0.0)


def random_source_sink_pairs(width, height, n_pairs, max_accumulation, rng=None):
    """Net-zero field built from ``n_pairs`` source/sink pairs of random strength.

    Each pair uses two distinct cells that have not yet accumulated
    ``max_accumulation`` in magnitude.

    Raises:
        ValueError: if fewer than two such cells are left before all pairs
            are placed.
    """
    if n_pairs < 0:
        raise ValueError(f"n_pairs must be non-negative, got {n_pairs}")
    if n_pairs > 0 and max_accumulation <= 0:
        raise ValueError(f"max_accumulation must be positive, got {max_accumulation}")
    rng = np.random.default_rng(rng)
    sources = np.zeros(width * height)
    for placed in range(n_pairs):
        eligible = np.flatnonzero(np.abs(sources) < max_accumulation)
        if eligible.size < 2:
            raise ValueError(
                f"only {placed} of {n_pairs} pairs fit on a {width}x{height} grid "
                f"with max_accumulation={max_accumulation}"
            )
        src_idx, sink_idx = rng.choice(eligible, size=2, replace=False)
        strength = rng.random()
        sources[src_idx] += strength
        sources[sink_idx] -= strength
    return sources


def point_source(width, height, i, j, strength=1.0):
    if not (0 <= i < width and 0 <= j < height):
        raise ValueError(f"cell ({i}, {j}) outside {width}x{height} grid")
    sources = np.zeros(width * height)
    sources[j * width + i] = strength
    return sources


def mirrored_strip(profile, height):
    """Repeat a 1D profile on every row, giving a quasi-1D 2D field."""
    profile = np.asarray(profile, dtype=np.float64)
    if profile.ndim != 1:
        raise ValueError(f"profile must be 1D, got shape {profile.shape}")
    return np.tile(profile, height)
