"""Individual-based stochastic model of macrophytes and lake turbidity."""

from .engine import Simulator, Status
from .errors import ConfigurationError, InvalidProbability
from .params import DEFAULT_PARAMETERS, Parameters
from .population import Individual, Population
from .runner import BatchResult, ReplicateResult, run_replicate, run_replicates
from .traits import sample_initial_traits

__all__ = [
    "BatchResult",
    "ConfigurationError",
    "DEFAULT_PARAMETERS",
    "Individual",
    "InvalidProbability",
    "Parameters",
    "Population",
    "ReplicateResult",
    "Simulator",
    "Status",
    "run_replicate",
    "run_replicates",
    "sample_initial_traits",
]
