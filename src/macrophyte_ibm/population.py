"""
Individual and Population containers.

A Population stores its members column-wise (one id array, one trait array)
in ID order. Only living individuals are ever held; deaths are resolved by
compact(), which builds the next tick's Population from survivors and new
arrivals. Arrays grow by concatenation so there is no capacity ceiling.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Individual:
    """One macrophyte. z is fixed at birth."""
    id: int
    z: float
    alive: bool = True


class Population:

    def __init__(self, ids, traits, next_id=None):
        self.ids = np.asarray(ids, dtype=np.int64)
        self.traits = np.asarray(traits, dtype=np.float64)
        if self.ids.shape != self.traits.shape or self.ids.ndim != 1:
            raise ValueError("ids and traits must be 1-D arrays of equal length")
        if self.ids.size > 1 and np.any(np.diff(self.ids) <= 0):
            raise ValueError("individual ids must be strictly increasing")
        floor = int(self.ids[-1]) + 1 if self.ids.size else 0
        if next_id is None:
            next_id = floor
        if next_id < floor:
            raise ValueError(f"next_id {next_id} would reuse an existing id (>= {floor} required)")
        # One past the largest id ever issued, including the dead
        self.next_id = int(next_id)

    @classmethod
    def founders(cls, traits):
        """Build a founding population with ids 0..n-1."""
        traits = np.asarray(traits, dtype=np.float64)
        return cls(np.arange(traits.size, dtype=np.int64), traits)

    @classmethod
    def from_individuals(cls, individuals):
        members = [ind for ind in individuals if ind.alive]
        return cls([ind.id for ind in members], [ind.z for ind in members])

    def __len__(self):
        return int(self.ids.size)

    @property
    def size(self):
        return len(self)

    def __iter__(self):
        for uid, z in zip(self.ids, self.traits):
            yield Individual(int(uid), float(z))

    def copy(self):
        return Population(self.ids.copy(), self.traits.copy(), self.next_id)

    # ---------------------------------------------------------------------- #
    #  Telemetry                                                              #
    # ---------------------------------------------------------------------- #

    def trait_mean(self):
        return float(np.mean(self.traits)) if self.traits.size > 0 else 0.0

    def trait_std(self):
        """Sample standard deviation of z (ddof=1); 0.0 below two individuals."""
        return float(np.std(self.traits, ddof=1)) if self.traits.size > 1 else 0.0

    # ---------------------------------------------------------------------- #
    #  Compaction                                                             #
    # ---------------------------------------------------------------------- #

    def compact(self, alive_mask, new_ids, new_traits):
        """Merge survivors and new arrivals into the next Population.

        Survivors keep their order; arrivals follow them. Arrival ids are
        issued from next_id so the result stays in ID order.
        """
        alive_mask = np.asarray(alive_mask, dtype=bool)
        new_ids = np.asarray(new_ids, dtype=np.int64)
        new_traits = np.asarray(new_traits, dtype=np.float64)
        if alive_mask.shape != self.ids.shape:
            raise ValueError("alive mask must cover every member of the population")
        if new_ids.size and new_ids[0] < self.next_id:
            raise ValueError(f"arrival id {new_ids[0]} reuses an issued id (< {self.next_id})")

        ids = np.concatenate([self.ids[alive_mask], new_ids])
        traits = np.concatenate([self.traits[alive_mask], new_traits])
        next_id = int(new_ids[-1]) + 1 if new_ids.size else self.next_id
        return Population(ids, traits, next_id)
