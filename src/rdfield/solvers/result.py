# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

from rdfield.errors import NegativeConcentrationError

NEGATIVE_CONCENTRATION = "negative_concentration"


class StepResult:
    """Outcome of an integrator call.

    Either a success carrying ``field`` (the caller's array, updated in place)
    or a failure carrying ``reason``. Failures currently have a single reason,
    NEGATIVE_CONCENTRATION, with the first offending iteration and the most
    negative value observed.
    """

    __slots__ = ("ok", "field", "reason", "iteration", "min_value")

    def __init__(self, ok, field=None, reason=None, iteration=None, min_value=None):
        self.ok = ok
        self.field = field
        self.reason = reason
        self.iteration = iteration
        self.min_value = min_value

    @classmethod
    def success(cls, field, iteration=None, min_value=None):
        return cls(True, field=field, iteration=iteration, min_value=min_value)

    @classmethod
    def negative(cls, iteration, min_value):
        return cls(
            False,
            reason=NEGATIVE_CONCENTRATION,
            iteration=iteration,
            min_value=min_value,
        )

    def __bool__(self):
        return self.ok

    def unwrap(self):
        """Return the field, or raise NegativeConcentrationError on failure."""
        if self.ok:
            return self.field
        raise NegativeConcentrationError(
            f"negative concentration {self.min_value:.6g} at iteration {self.iteration}",
            iteration=self.iteration,
            min_value=self.min_value,
        )

    def __repr__(self):
        if self.ok:
            return f"StepResult(ok=True, size={None if self.field is None else self.field.size})"
        return (
            f"StepResult(ok=False, reason={self.reason!r}, iteration={self.iteration}, "
            f"min_value={self.min_value})"
        )
