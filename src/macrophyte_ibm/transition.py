"""
Per-individual life-cycle transition: death, reproduction, mutation.

Every individual present at the start of a tick gets, in ID order:
  1. a death draw with probability mu,
  2. if it survives, a reproduction draw with probability
       P = r_M * M * (1 - (M / K) * (h_T^4 + T) / h_T^4),   h_T = exp(c * z)
     using the tick-start size M and the already-updated turbidity T,
  3. on success, one offspring with z_child = z_parent + Normal(0, sigma).

Offspring are returned as a separate arrivals buffer and are never visited
in the tick that produced them.
"""

from collections import namedtuple

import numpy as np

from .errors import InvalidProbability
from .population import Individual

TransitionOutcome = namedtuple(
    "TransitionOutcome",
    ["alive", "offspring_ids", "offspring_traits", "parent_ids", "deaths", "births", "clamped"],
)


def turbidity_sensitivity(z, c):
    return np.exp(c * np.asarray(z, dtype=np.float64))


def reproduction_probability(z, M, T_next, params):
    """Reproduction probability for trait(s) z. Unbounded; see check_probability."""
    h_T4 = turbidity_sensitivity(z, params.c) ** 4
    return params.r_M * M * (1.0 - (M / params.K) * (h_T4 + T_next) / h_T4)


def check_probability(p, policy, kind="reproduction", ids=None, traits=None,
                      timestep=None, population_size=None, turbidity=None):
    """Apply the probability policy to an array of computed probabilities.

    "clamp" clips into [0, 1]; "raise" raises InvalidProbability naming the
    first offending individual. Returns (probabilities, number_out_of_range).
    """
    p = np.asarray(p, dtype=np.float64)
    bad = ~((p >= 0.0) & (p <= 1.0))
    n_bad = int(np.count_nonzero(bad))
    if n_bad == 0:
        return p, 0
    if policy == "clamp":
        return np.clip(p, 0.0, 1.0), n_bad

    first = int(np.flatnonzero(bad)[0]) if p.ndim else 0
    raise InvalidProbability(
        kind, p.flat[first],
        timestep=timestep,
        individual_id=None if ids is None else int(np.asarray(ids).flat[first]),
        trait=None if traits is None else float(np.asarray(traits).flat[first]),
        population_size=population_size,
        turbidity=turbidity,
    )


def apply_transitions(ids, traits, M, T_next, params, rng, next_id, timestep=None):
    """Run the transition rule over one tick-start snapshot.

    Draw order is fixed: one uniform per individual for death, one uniform
    per survivor for reproduction, one normal per birth. Offspring ids are
    issued from next_id in parent order.
    """
    ids = np.asarray(ids, dtype=np.int64)
    traits = np.asarray(traits, dtype=np.float64)
    n = ids.size

    # 1. Death
    death_roll = rng.random(n)
    alive = ~(death_roll < params.mu)
    survivors = np.flatnonzero(alive)

    # 2-3. Reproduction probability from tick-start M and updated T
    p = reproduction_probability(traits[survivors], M, T_next, params)
    p, clamped = check_probability(
        p, params.probability_policy,
        ids=ids[survivors], traits=traits[survivors],
        timestep=timestep, population_size=M, turbidity=T_next,
    )

    # 4. Reproduction draw and mutation
    repro_roll = rng.random(survivors.size)
    parents = survivors[repro_roll < p]
    births = int(parents.size)
    noise = rng.normal(0.0, params.sigma, size=births)

    offspring_ids = np.arange(next_id, next_id + births, dtype=np.int64)
    offspring_traits = traits[parents] + noise

    return TransitionOutcome(
        alive=alive,
        offspring_ids=offspring_ids,
        offspring_traits=offspring_traits,
        parent_ids=ids[parents],
        deaths=int(n - survivors.size),
        births=births,
        clamped=clamped,
    )


def transition_individual(individual, M, T_next, params, rng, next_id, timestep=None):
    """Single-individual form of the rule.

    Returns (individual_after, offspring) where offspring is None when no
    birth happened. Draws are interleaved per individual, so a loop over
    this function consumes the stream in a different order from
    apply_transitions.
    """
    if rng.random() < params.mu:
        return Individual(individual.id, individual.z, alive=False), None

    p = reproduction_probability(individual.z, M, T_next, params)
    p, _ = check_probability(
        p, params.probability_policy,
        ids=[individual.id], traits=[individual.z],
        timestep=timestep, population_size=M, turbidity=T_next,
    )
    if rng.random() < float(p):
        child = Individual(int(next_id), individual.z + rng.normal(0.0, params.sigma))
        return individual, child
    return individual, None
