"""
One-parameter sweeps.

Runs a full batch for each value of a single parameter (initial turbidity,
n0, T0, ...). Each value gets its own child of the root seed so adding a
value to the end of the list leaves earlier batches unchanged.
"""

import numpy as np

from .errors import ConfigurationError
from .params import DEFAULT_PARAMETERS, Parameters
from .runner import run_replicates


def sweep(parameter, values, n_replicates, base=DEFAULT_PARAMETERS, seed=None, n_jobs=1):
    """Return {value: BatchResult} for every value of `parameter`."""
    if parameter not in Parameters.__dataclass_fields__:
        raise ConfigurationError(f"unknown parameter {parameter!r}")
    values = list(values)
    children = np.random.SeedSequence(seed).spawn(len(values))

    results = {}
    for value, child in zip(values, children):
        params = base.replace(**{parameter: value})
        results[value] = run_replicates(n_replicates, params, seed=child, n_jobs=n_jobs)
    return results


def final_mean_population(results):
    """Mean final population size per swept value."""
    return {value: float(np.mean(batch.population_size[:, -1]))
            for value, batch in results.items()}
