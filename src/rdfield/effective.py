# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Effective-influence heuristic: a kernel-weighted average of source strengths.

Not derived from the PDE. Each cell gets

    scale * sum_c s_c * exp(-r_c/lam) / sum_c exp(-r_c/lam)

where r_c is the distance (in cells) from the target to cell c, summed over
every cell within ``cutoff_lengths * lam``. ``lam`` and ``scale`` are free
parameters fitted against a reference solution (see rdfield.calibration).
"""

import math

import numpy as np
from numba import njit

from rdfield.errors import DimensionMismatchError

# Kernel pairs farther apart than this many decay lengths are skipped
# (exp(-5) ~ 0.007).
KERNEL_CUTOFF_LENGTHS = 5.0


@njit(cache=True)
def _influence_sums(src, width, height, lam, scale, cutoff_sq, reach, out):
    for j in range(height):
        j0 = max(0, j - reach)
        j1 = min(height - 1, j + reach)
        for i in range(width):
            i0 = max(0, i - reach)
            i1 = min(width - 1, i + reach)
            local = 0.0
            total = 0.0
            for jj in range(j0, j1 + 1):
                dy = jj - j
                row = jj * width
                for ii in range(i0, i1 + 1):
                    dx = ii - i
                    dist_sq = dx * dx + dy * dy
                    if dist_sq > cutoff_sq:
                        continue
                    w = math.exp(-math.sqrt(dist_sq) / lam)
                    total += w
                    s = src[row + ii]
                    if s != 0.0:
                        local += s * w
            if total > 0.0:
                out[j * width + i] = scale * local / total
            else:
                out[j * width + i] = 0.0


def _check_sources(width, height, sources):
    src = np.ascontiguousarray(sources, dtype=np.float64).reshape(-1)
    if src.size != width * height:
        raise DimensionMismatchError(
            f"sources has {src.size} cells, grid {width}x{height} needs {width * height}"
        )
    return src


def effective_influence(width, height, sources, lam, scale,
                        cutoff_lengths=KERNEL_CUTOFF_LENGTHS):
    """Kernel-weighted approximation of the steady-state field.

    Args:
        width, height: grid size in cells.
        sources: per-cell source strengths, width*height values.
        lam: kernel decay length in cells (> 0).
        scale: overall multiplier.
        cutoff_lengths: kernel truncation radius in units of ``lam``;
            ``None`` sums over the whole grid.

    Returns:
        flat float64 array of length width*height.
    """
    if lam <= 0:
        raise ValueError(f"lam must be positive, got {lam}")
    if width < 1 or height < 1:
        raise ValueError(f"grid must be non-empty, got {width}x{height}")
    src = _check_sources(width, height, sources)

    full_reach = max(width, height)
    if cutoff_lengths is None:
        cutoff_sq = np.inf
        reach = full_reach
    else:
        if cutoff_lengths <= 0:
            raise ValueError(f"cutoff_lengths must be positive, got {cutoff_lengths}")
        radius = cutoff_lengths * lam
        cutoff_sq = radius * radius
        reach = min(int(math.floor(radius)), full_reach)

    out = np.zeros(width * height)
    _influence_sums(src, width, height, float(lam), float(scale), float(cutoff_sq), reach, out)
    return out


def local_influence(x, y, width, height, sources, lam):
    """Un-normalised kernel sum of all sources seen from point (x, y).

    Coordinates are in cell units; cell (i, j) sits at (i + 0.5, j + 0.5).
    """
    if lam <= 0:
        raise ValueError(f"lam must be positive, got {lam}")
    src = _check_sources(width, height, sources)
    active = np.flatnonzero(src)
    if active.size == 0:
        return 0.0
    cx = active % width + 0.5
    cy = active // width + 0.5
    dist = np.hypot(cx - x, cy - y)
    return float(np.sum(src[active] * np.exp(-dist / lam)))
