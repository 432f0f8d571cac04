"""
Replicate runner.

run_replicate() drives one Simulator to its horizon or to extinction and
returns its four time series. run_replicates() samples the founding traits
once, then runs N replicates that share those founders and differ only in
their random streams.

Seeding: a root SeedSequence is split into N + 1 children. Child 0 draws the
founding traits; child i + 1 is replicate i's stream. Results therefore do
not depend on n_jobs.
"""

from collections import namedtuple

import numpy as np
from joblib import Parallel, delayed

from .engine import Simulator, Status
from .errors import ConfigurationError
from .population import Population
from .traits import sample_initial_traits

ReplicateResult = namedtuple(
    "ReplicateResult",
    ["population_size", "turbidity", "trait_mean", "trait_std",
     "status", "extinction_timestep", "log_messages"],
)

BatchResult = namedtuple(
    "BatchResult",
    ["population_size", "turbidity", "trait_mean", "trait_std",
     "initial_traits", "statuses", "extinction_timesteps", "params", "seed"],
)


def run_replicate(initial_population, initial_turbidity, horizon, params,
                  seed=None, rng=None, audit_path=None):
    """Run one replicate and return its ReplicateResult.

    Index 0 of every series is the initial state (timestep 1); index k is the
    state after k ticks. Once a tick ends in extinction the loop stops and
    that index and all later ones keep their zero initialisation, turbidity
    and trait statistics included.
    """
    if horizon < 1:
        raise ConfigurationError(f"horizon must be >= 1, got {horizon}")

    population_size = np.zeros(horizon, dtype=np.int64)
    turbidity = np.zeros(horizon, dtype=np.float64)
    trait_mean = np.zeros(horizon, dtype=np.float64)
    trait_std = np.zeros(horizon, dtype=np.float64)

    sim = Simulator(initial_population, initial_turbidity, params,
                    rng=rng, seed=seed, horizon=horizon, audit_path=audit_path)
    population_size[0], turbidity[0], trait_mean[0], trait_std[0] = sim.snapshot()

    extinction_timestep = 1 if sim.status is Status.EXTINCT else None
    for t in range(1, horizon):
        if sim.status is not Status.RUNNING:
            break
        if sim.update() is Status.EXTINCT:
            extinction_timestep = sim.timestep
            break
        population_size[t], turbidity[t], trait_mean[t], trait_std[t] = sim.snapshot()

    return ReplicateResult(population_size, turbidity, trait_mean, trait_std,
                           sim.status, extinction_timestep, list(sim.log_messages))


def initial_population(params, rng):
    """Founding population drawn from the configured trait distribution."""
    return Population.founders(sample_initial_traits(params.n0, params.z1, params.z2, rng))


def run_replicates(n_replicates, params, seed=None, n_jobs=1, backend=None):
    """Run a batch of replicates from one shared founding population.

    Returns a BatchResult whose four series are [n_replicates x horizon]
    matrices. No aggregation across replicates happens here.
    """
    if isinstance(n_replicates, bool) or int(n_replicates) != n_replicates or n_replicates < 1:
        raise ConfigurationError(f"replicate count must be an integer >= 1, got {n_replicates!r}")
    n_replicates = int(n_replicates)

    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    children = root.spawn(n_replicates + 1)

    founders = initial_population(params, np.random.default_rng(children[0]))

    results = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(run_replicate)(founders, params.initial_turbidity, params.horizon, params,
                               seed=child)
        for child in children[1:]
    )

    return BatchResult(
        population_size=np.vstack([r.population_size for r in results]),
        turbidity=np.vstack([r.turbidity for r in results]),
        trait_mean=np.vstack([r.trait_mean for r in results]),
        trait_std=np.vstack([r.trait_std for r in results]),
        initial_traits=founders.traits.copy(),
        statuses=[r.status for r in results],
        extinction_timesteps=[r.extinction_timestep for r in results],
        params=params,
        seed=root.entropy,
    )
