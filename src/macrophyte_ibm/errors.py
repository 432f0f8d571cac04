"""Exception types raised by the simulator."""


class ConfigurationError(ValueError):
    """A parameter set that cannot be simulated. Raised before any replicate starts."""


class InvalidProbability(ValueError):
    """A computed death or reproduction probability fell outside [0, 1].

    Only raised under the "raise" probability policy. Carries the state that
    produced the value so the offending individual can be reconstructed.
    """

    def __init__(self, kind, value, timestep=None, individual_id=None, trait=None,
                 population_size=None, turbidity=None):
        self.kind = kind
        self.value = float(value)
        self.timestep = timestep
        self.individual_id = individual_id
        self.trait = trait
        self.population_size = population_size
        self.turbidity = turbidity
        super().__init__(
            f"{kind} probability {self.value:.6g} outside [0, 1] "
            f"(timestep={timestep}, id={individual_id}, z={trait}, "
            f"M={population_size}, T={turbidity})"
        )
