import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from macrophyte_ibm.engine import Status
from macrophyte_ibm.errors import ConfigurationError
from macrophyte_ibm.params import DEFAULT_PARAMETERS, Parameters
from macrophyte_ibm.population import Population
from macrophyte_ibm.runner import run_replicate, run_replicates
from macrophyte_ibm.turbidity import next_turbidity

SERIES = ("population_size", "turbidity", "trait_mean", "trait_std")


class TestRunReplicate(unittest.TestCase):

    def test_series_length_and_initial_entry(self):
        pop = Population.founders([0.0, 0.4, -0.4])
        result = run_replicate(pop, 0.5, 25, Parameters(mu=0.0, r_M=0.0), seed=1)

        for name in SERIES:
            self.assertEqual(getattr(result, name).shape, (25,))
        self.assertEqual(result.population_size[0], 3)
        self.assertEqual(result.turbidity[0], 0.5)
        self.assertAlmostEqual(result.trait_mean[0], 0.0)
        self.assertAlmostEqual(result.trait_std[0], 0.4)
        self.assertEqual(result.status, Status.COMPLETED)
        self.assertIsNone(result.extinction_timestep)

    def test_turbidity_follows_recurrence_for_constant_population(self):
        params = Parameters(mu=0.0, r_M=0.0)
        result = run_replicate(Population.founders(np.zeros(10)), 0.5, 30, params, seed=2)

        T = 0.5
        for t in range(1, 30):
            T = next_turbidity(T, 10, params)
            self.assertAlmostEqual(result.turbidity[t], T, places=12)
        np.testing.assert_array_equal(result.population_size, np.full(30, 10))

    def test_extinction_zero_fills_all_series(self):
        params = Parameters(mu=1.0)
        result = run_replicate(Population.founders(np.linspace(-1, 1, 8)), 0.5, 10, params, seed=3)

        self.assertEqual(result.status, Status.EXTINCT)
        self.assertEqual(result.extinction_timestep, 2)
        self.assertEqual(result.population_size[0], 8)
        for name in SERIES:
            np.testing.assert_array_equal(getattr(result, name)[1:], np.zeros(9))
        self.assertTrue(any("extinct" in m for m in result.log_messages))

    def test_does_not_mutate_initial_population(self):
        pop = Population.founders([0.1, 0.2, 0.3])
        run_replicate(pop, 0.5, 20, Parameters(r_M=1.0), seed=4)
        np.testing.assert_array_equal(pop.ids, [0, 1, 2])
        np.testing.assert_array_equal(pop.traits, [0.1, 0.2, 0.3])
        self.assertEqual(pop.next_id, 3)

    def test_empty_initial_population(self):
        result = run_replicate(Population.founders([]), 0.5, 5, Parameters(), seed=1)
        self.assertEqual(result.status, Status.EXTINCT)
        self.assertEqual(result.extinction_timestep, 1)
        np.testing.assert_array_equal(result.population_size, np.zeros(5))
        np.testing.assert_array_equal(result.turbidity[1:], np.zeros(4))

    def test_horizon_of_one(self):
        result = run_replicate(Population.founders([0.0]), 0.5, 1, Parameters(), seed=1)
        self.assertEqual(result.population_size.tolist(), [1])
        self.assertEqual(result.status, Status.COMPLETED)

    def test_rejects_bad_horizon(self):
        with self.assertRaises(ConfigurationError):
            run_replicate(Population.founders([0.0]), 0.5, 0, Parameters(), seed=1)


class TestRunReplicates(unittest.TestCase):

    def test_determinism(self):
        params = Parameters(horizon=60)
        a = run_replicates(5, params, seed=42)
        b = run_replicates(5, params, seed=42)
        for name in SERIES:
            np.testing.assert_array_equal(getattr(a, name), getattr(b, name))
        np.testing.assert_array_equal(a.initial_traits, b.initial_traits)

    def test_different_seeds_differ(self):
        params = Parameters(horizon=60)
        a = run_replicates(5, params, seed=1)
        b = run_replicates(5, params, seed=2)
        self.assertFalse(np.array_equal(a.initial_traits, b.initial_traits))

    def test_results_independent_of_worker_count(self):
        params = Parameters(horizon=40)
        serial = run_replicates(4, params, seed=7, n_jobs=1)
        threaded = run_replicates(4, params, seed=7, n_jobs=2, backend="threading")
        for name in SERIES:
            np.testing.assert_array_equal(getattr(serial, name), getattr(threaded, name))

    def test_shared_initial_condition(self):
        """Every replicate starts from the same sampled founders."""
        params = Parameters(horizon=30)
        batch = run_replicates(8, params, seed=5)

        np.testing.assert_array_equal(batch.population_size[:, 0], np.full(8, params.n0))
        self.assertEqual(batch.initial_traits.size, params.n0)
        np.testing.assert_array_equal(batch.trait_mean[:, 0],
                                      np.full(8, batch.trait_mean[0, 0]))
        np.testing.assert_array_equal(batch.trait_std[:, 0],
                                      np.full(8, batch.trait_std[0, 0]))
        self.assertAlmostEqual(batch.trait_mean[0, 0], float(np.mean(batch.initial_traits)))
        # Replicates diverge after the first tick
        self.assertGreater(len({tuple(row) for row in batch.population_size}), 1)

    def test_certain_death_collapse(self):
        params = Parameters(mu=1.0, horizon=20)
        batch = run_replicates(6, params, seed=3)

        np.testing.assert_array_equal(batch.population_size[:, 0], np.full(6, params.n0))
        for name in SERIES:
            np.testing.assert_array_equal(getattr(batch, name)[:, 1:], np.zeros((6, 19)))
        self.assertEqual(batch.extinction_timesteps, [2] * 6)
        self.assertEqual(batch.statuses, [Status.EXTINCT] * 6)

    def test_no_reproduction_declines_to_extinction(self):
        params = Parameters(r_M=0.0, mu=0.3, horizon=150)
        batch = run_replicates(10, params, seed=9)

        diffs = np.diff(batch.population_size, axis=1)
        self.assertTrue(np.all(diffs <= 0), "population must never grow without reproduction")
        self.assertTrue(np.all(batch.population_size[:, -1] == 0))
        self.assertTrue(all(t is not None for t in batch.extinction_timesteps))

    def test_end_to_end_scenario(self):
        params = DEFAULT_PARAMETERS
        batch = run_replicates(30, params, seed=2024)

        self.assertEqual(batch.population_size.shape, (30, 100))
        for name in SERIES:
            self.assertEqual(getattr(batch, name).shape, (30, 100))
        self.assertTrue(np.issubdtype(batch.population_size.dtype, np.integer))
        self.assertTrue(np.all(batch.population_size >= 0))
        # Births need M < K and add at most one per individual
        self.assertTrue(np.all(batch.population_size < 2 * params.K))
        self.assertTrue(np.all(np.isfinite(batch.turbidity)))

    def test_rejects_bad_replicate_count(self):
        for n in (0, -3, 2.5):
            with self.subTest(n=n):
                with self.assertRaises(ConfigurationError):
                    run_replicates(n, DEFAULT_PARAMETERS, seed=1)


if __name__ == '__main__':
    unittest.main()
