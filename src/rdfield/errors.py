# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Exception types raised by rdfield entry points."""


class DimensionMismatchError(ValueError):
    """An array does not match the grid it is used with."""


class SolverNotConfiguredError(RuntimeError):
    """A stepping call was made before ``configure``."""


class NegativeConcentrationError(RuntimeError):
    """A failed integrator result was unwrapped.

    Attributes:
        iteration: first outer iteration that produced a negative value.
        min_value: most negative value seen.
    """

    def __init__(self, message, iteration=None, min_value=None):
        super().__init__(message)
        self.iteration = iteration
        self.min_value = min_value
