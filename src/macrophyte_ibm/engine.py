import os
from collections import deque
from enum import Enum

import numpy as np

from .transition import apply_transitions
from .turbidity import next_turbidity


class Status(Enum):
    RUNNING = "running"
    EXTINCT = "extinct"
    COMPLETED = "completed"


class Simulator:
    """
    Owns the state of one replicate: population, turbidity, timestep and the
    replicate's private random stream.
    """
    TELEMETRY_INTERVAL = 10
    AUDIT_HEADER = ("timestep,population,turbidity,trait_mean,trait_std,"
                    "total_births,total_deaths,clamped\n")

    def __init__(self, population, turbidity, params, rng=None, seed=None,
                 horizon=None, audit_path=None):
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        self.params = params
        self.population = population.copy()
        self.turbidity = float(turbidity)
        self.timestep = 1
        self.horizon = horizon
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.total_births = 0
        self.total_deaths = 0
        self.clamped_count = 0
        self.log_messages = deque(maxlen=100)

        self.audit_path = audit_path
        if audit_path is not None and not os.path.exists(audit_path):
            with open(audit_path, "w") as f:
                f.write(self.AUDIT_HEADER)

        if len(self.population) == 0:
            self.status = Status.EXTINCT
            self.log_messages.append(f"[{self.timestep}] Started with an empty population")
        elif horizon is not None and self.timestep >= horizon:
            self.status = Status.COMPLETED
        else:
            self.status = Status.RUNNING

    # ---------------------------------------------------------------------- #
    #  Phases                                                                 #
    # ---------------------------------------------------------------------- #

    def update_turbidity(self, M):
        """Update phase: advance turbidity from the tick-start population size."""
        self.turbidity = next_turbidity(self.turbidity, M, self.params)
        return self.turbidity

    def apply_transitions(self, M):
        """Transition phase over the individuals present at tick start.

        Offspring land in the returned arrivals buffer; self.population is
        left untouched until compact().
        """
        outcome = apply_transitions(
            self.population.ids, self.population.traits,
            M, self.turbidity, self.params, self.rng,
            next_id=self.population.next_id, timestep=self.timestep,
        )
        if outcome.clamped:
            self.clamped_count += outcome.clamped
            self.log_messages.append(
                f"[{self.timestep}] Clamped {outcome.clamped} reproduction "
                f"probabilities (M={M}, T={self.turbidity:.4f})")
        return outcome

    def compact(self, outcome):
        """Compaction phase: survivors then arrivals become the next population."""
        self.population = self.population.compact(
            outcome.alive, outcome.offspring_ids, outcome.offspring_traits)
        self.total_births += outcome.births
        self.total_deaths += outcome.deaths
        return self.population

    # ---------------------------------------------------------------------- #
    #  Master update                                                          #
    # ---------------------------------------------------------------------- #

    def update(self):
        """Run one full tick and return the resulting Status."""
        if self.status is not Status.RUNNING:
            raise RuntimeError(f"cannot update a {self.status.value} simulation")

        # 1. Tick-start size, fixed for the whole tick
        M = len(self.population)

        # 2. Turbidity before any individual is visited
        self.update_turbidity(M)

        # 3. Transitions over the tick-start snapshot
        outcome = self.apply_transitions(M)

        # 4. Merge survivors and arrivals, drop the dead
        self.compact(outcome)
        self.timestep += 1

        # 5. Terminal checks
        if len(self.population) == 0:
            self.status = Status.EXTINCT
            self.log_messages.append(
                f"[{self.timestep}] Population extinct "
                f"(births={self.total_births}, deaths={self.total_deaths})")
        elif self.horizon is not None and self.timestep >= self.horizon:
            self.status = Status.COMPLETED

        self.log_telemetry()
        return self.status

    # ---------------------------------------------------------------------- #
    #  Telemetry                                                              #
    # ---------------------------------------------------------------------- #

    def snapshot(self):
        """(population size, turbidity, trait mean, trait std) at the current timestep."""
        return (len(self.population), self.turbidity,
                self.population.trait_mean(), self.population.trait_std())

    def log_telemetry(self):
        if self.audit_path is None:
            return
        if self.timestep % self.TELEMETRY_INTERVAL != 0 and self.status is Status.RUNNING:
            return
        size, turbidity, z_mean, z_std = self.snapshot()
        with open(self.audit_path, "a") as f:
            f.write(f"{self.timestep},{size},{turbidity:.6f},{z_mean:.6f},{z_std:.6f},"
                    f"{self.total_births},{self.total_deaths},{self.clamped_count}\n")
