"""Long-format CSV export of a batch's four result matrices."""

import numpy as np

CSV_HEADER = "replicate,timestep,population,turbidity,trait_mean,trait_std\n"


def write_batch_csv(batch, path):
    """Write one row per (replicate, timestep). Timesteps are 1-based."""
    n_replicates, horizon = batch.population_size.shape
    with open(path, "w") as f:
        f.write(CSV_HEADER)
        for r in range(n_replicates):
            for t in range(horizon):
                f.write(f"{r},{t + 1},{int(batch.population_size[r, t])},"
                        f"{float(batch.turbidity[r, t])!r},{float(batch.trait_mean[r, t])!r},"
                        f"{float(batch.trait_std[r, t])!r}\n")


def read_batch_csv(path):
    """Rebuild the four matrices from a file written by write_batch_csv."""
    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    rows = data[:, 0].astype(np.int64)
    cols = data[:, 1].astype(np.int64) - 1
    shape = (int(rows.max()) + 1, int(cols.max()) + 1)

    matrices = {}
    for column, name, dtype in ((2, "population_size", np.int64), (3, "turbidity", np.float64),
                                (4, "trait_mean", np.float64), (5, "trait_std", np.float64)):
        matrix = np.zeros(shape, dtype=dtype)
        matrix[rows, cols] = data[:, column]
        matrices[name] = matrix
    return matrices
