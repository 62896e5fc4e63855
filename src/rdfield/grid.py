# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np

from rdfield.errors import DimensionMismatchError


class CellGrid:
    """Uniform cell-centred rectangular grid with zero-flux boundaries.

    Cell (i, j) has flat row-major index j*width + i and centre
    ((i + 0.5)*dx, (j + 0.5)*dx). Fields are stored flat (length width*height)
    or as arrays of shape (height, width).

    Attributes:
        width: number of cells along x
        height: number of cells along y
        dx: cell size
        size: width * height
        shape: (height, width)
        Lx, Ly: physical domain lengths width*dx, height*dx
        x, y: cell-centre coordinates, shapes (width,) and (height,)
    """

    def __init__(self, width, height, dx=1.0):
        if width < 2:
            raise ValueError(f"width must be >= 2 (Neumann stencils need a neighbour), got {width}")
        if height < 2:
            raise ValueError(f"height must be >= 2 (Neumann stencils need a neighbour), got {height}")
        if dx <= 0:
            raise ValueError(f"dx must be positive, got {dx}")

        self.width = int(width)
        self.height = int(height)
        self.dx = float(dx)

        self.size = self.width * self.height
        self.shape = (self.height, self.width)
        self.Lx = self.width * self.dx
        self.Ly = self.height * self.dx

        self.x = (np.arange(self.width) + 0.5) * self.dx
        self.y = (np.arange(self.height) + 0.5) * self.dx

    def index(self, i, j):
        """Flat row-major index of cell (i, j)."""
        return j * self.width + i

    def coords(self, idx):
        """Inverse of ``index``: (i, j) of a flat index."""
        return idx % self.width, idx // self.width

    def zeros(self):
        return np.zeros(self.size)

    def flat_view(self, field, name="field"):
        """Return a flat float64 view of ``field`` that aliases its memory.

        Accepts flat arrays of length ``size`` or C-contiguous arrays of shape
        ``shape``. Anything else raises DimensionMismatchError, since writes
        through a copy would be lost.
        """
        if not isinstance(field, np.ndarray):
            raise TypeError(f"{name} must be a numpy array, got {type(field).__name__}")
        if field.dtype != np.float64:
            raise TypeError(f"{name} must be float64, got {field.dtype}")
        if field.ndim == 1:
            if field.size != self.size:
                raise DimensionMismatchError(
                    f"{name} has length {field.size}, expected {self.size} "
                    f"({self.width}x{self.height})"
                )
            if not field.flags.c_contiguous:
                raise DimensionMismatchError(f"{name} must be contiguous")
            return field
        if field.ndim == 2 and field.shape == self.shape:
            if not field.flags.c_contiguous:
                raise DimensionMismatchError(f"{name} must be C-contiguous")
            return field.reshape(-1)
        raise DimensionMismatchError(
            f"{name} has shape {field.shape}, expected ({self.size},) or {self.shape}"
        )

    def as_flat(self, field, name="field"):
        """Read-only counterpart of ``flat_view``: returns a contiguous float64 copy if needed."""
        field = np.ascontiguousarray(field, dtype=np.float64)
        if field.size != self.size or field.ndim not in (1, 2) or (
            field.ndim == 2 and field.shape != self.shape
        ):
            raise DimensionMismatchError(
                f"{name} has shape {field.shape}, expected ({self.size},) or {self.shape}"
            )
        return field.reshape(-1)

    def __repr__(self):
        return f"CellGrid(width={self.width}, height={self.height}, dx={self.dx})"
