# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT


class PhysicalConfig:
    """Physical parameters of the diffusion-decay-source problem.

        du/dt = D * laplacian(u) - decay_rate * u + s

    Attributes:
        D: diffusion coefficient, >= 0
        dx: spatial step (cell size), > 0
        dt: time step, > 0
        decay_rate: linear decay rate k, >= 0
    """

    def __init__(self, D, dx, dt, decay_rate=0.0):
        if D < 0:
            raise ValueError(f"D must be non-negative, got {D}")
        if dx <= 0:
            raise ValueError(f"dx must be positive, got {dx}")
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if decay_rate < 0:
            raise ValueError(f"decay_rate must be non-negative, got {decay_rate}")

        self.D = float(D)
        self.dx = float(dx)
        self.dt = float(dt)
        self.decay_rate = float(decay_rate)

    @classmethod
    def from_params(cls, params):
        """Build from a plain dict with keys D, dx, dt and optional decay_rate."""
        return cls(
            D=params["D"],
            dx=params["dx"],
            dt=params["dt"],
            decay_rate=params.get("decay_rate", 0.0),
        )

    @property
    def alpha(self):
        """Implicit diffusion coupling per ADI half step, D*dt/(2*dx^2)."""
        return self.D * self.dt / (2.0 * self.dx * self.dx)

    @property
    def gamma(self):
        """Decay coupling per ADI half step, k*dt/4."""
        return self.decay_rate * self.dt / 4.0

    @property
    def half_dt(self):
        return 0.5 * self.dt

    @property
    def cn_lambda(self):
        """Crank-Nicolson diffusion number, D*dt/dx^2."""
        return self.D * self.dt / (self.dx * self.dx)

    @property
    def cn_beta(self):
        """Crank-Nicolson decay coupling, k*dt/2."""
        return self.decay_rate * self.dt / 2.0

    def as_dict(self):
        return {"D": self.D, "dx": self.dx, "dt": self.dt, "decay_rate": self.decay_rate}

    def __eq__(self, other):
        if not isinstance(other, PhysicalConfig):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return (
            f"PhysicalConfig(D={self.D}, dx={self.dx}, dt={self.dt}, "
            f"decay_rate={self.decay_rate})"
        )
