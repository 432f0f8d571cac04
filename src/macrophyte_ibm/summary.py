"""Cross-replicate summaries of a BatchResult. Read-only consumers of the runner."""

import numpy as np

SERIES = ("population_size", "turbidity", "trait_mean", "trait_std")


def extinct_fraction(batch):
    """Fraction of replicates extinct at each timestep (1-based timesteps)."""
    horizon = batch.population_size.shape[1]
    timesteps = np.arange(1, horizon + 1)
    extinct = np.zeros((len(batch.extinction_timesteps), horizon), dtype=bool)
    for i, t_ext in enumerate(batch.extinction_timesteps):
        if t_ext is not None:
            extinct[i] = timesteps >= t_ext
    return extinct.mean(axis=0)


def summarize(batch):
    """Per-timestep mean and standard deviation across replicates.

    Zero-filled entries after extinction are included as they are, so the
    means describe the whole batch rather than only surviving replicates.
    """
    summary = {}
    for name in SERIES:
        matrix = np.asarray(getattr(batch, name), dtype=np.float64)
        summary[f"{name}_mean"] = matrix.mean(axis=0)
        summary[f"{name}_std"] = matrix.std(axis=0)
    summary["extinct_fraction"] = extinct_fraction(batch)
    return summary


def final_state(batch):
    """Last recorded column of each series, one entry per replicate."""
    return {name: np.asarray(getattr(batch, name))[:, -1].copy() for name in SERIES}
