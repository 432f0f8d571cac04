"""
Parameter configuration for a simulation run.

Immutable for the duration of a run. Every field is validated at construction
so a bad parameter set never reaches the engine.
"""

import math
import numbers
from dataclasses import dataclass, fields, replace as _dc_replace

from .errors import ConfigurationError

PROBABILITY_POLICIES = ("clamp", "raise")


@dataclass(frozen=True)
class Parameters:
    """Model parameters (immutable).

    K                  carrying capacity
    r_M, r_T           macrophyte / turbidity growth rates
    h_M                turbidity half-saturation constant
    T0                 background turbidity
    c                  trait-to-sensitivity coefficient, h_T = exp(c * z)
    mu                 per-tick death probability
    sigma              mutation standard deviation
    z1, z2             Beta shape parameters of the initial trait distribution
    n0                 initial population size
    initial_turbidity  turbidity at timestep 1
    horizon            number of recorded timesteps
    probability_policy "clamp" or "raise" for reproduction probabilities outside [0, 1]
    """
    K: float = 50.0
    r_M: float = 0.1
    r_T: float = 0.1
    h_M: float = 0.2
    T0: float = 3.0
    c: float = 0.5
    mu: float = 0.05
    sigma: float = 0.01
    z1: float = 2.0
    z2: float = 2.0
    n0: int = 10
    initial_turbidity: float = 0.5
    horizon: int = 100
    probability_policy: str = "clamp"

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "probability_policy":
                continue
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{f.name} must be finite, got {value!r}")

        if self.K <= 0:
            raise ConfigurationError(f"carrying capacity K must be positive, got {self.K}")
        for name in ("r_M", "r_T", "sigma"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        # Both appear in the denominator of the turbidity target
        if self.h_M <= 0:
            raise ConfigurationError(f"h_M must be positive, got {self.h_M}")
        if self.T0 <= 0:
            raise ConfigurationError(f"T0 must be positive, got {self.T0}")
        if not 0.0 <= self.mu <= 1.0:
            raise ConfigurationError(f"death probability mu must lie in [0, 1], got {self.mu}")
        if self.z1 <= 0 or self.z2 <= 0:
            raise ConfigurationError(
                f"trait shape parameters must be positive, got z1={self.z1}, z2={self.z2}")
        if not isinstance(self.n0, numbers.Integral) or self.n0 < 0:
            raise ConfigurationError(f"n0 must be a non-negative integer, got {self.n0!r}")
        if not isinstance(self.horizon, numbers.Integral) or self.horizon < 1:
            raise ConfigurationError(f"horizon must be an integer >= 1, got {self.horizon!r}")
        if self.probability_policy not in PROBABILITY_POLICIES:
            raise ConfigurationError(
                f"probability_policy must be one of {PROBABILITY_POLICIES}, "
                f"got {self.probability_policy!r}")

    def replace(self, **changes):
        """Return a validated copy with some fields changed."""
        return _dc_replace(self, **changes)

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


# End-to-end reference scenario
DEFAULT_PARAMETERS = Parameters()
