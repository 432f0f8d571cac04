import numpy as np

# Fixed trait range used throughout the model
TRAIT_RANGE = (-2.0, 2.0)


def sample_initial_traits(n0, z1, z2, rng):
    """Draw the founding population's trait values.

    Samples Beta(z1, z2) on [0, 1], rescales the support to [-1, 1] and then
    doubles it to the model's trait range [-2, 2]. z1 == z2 gives a symmetric
    distribution centred on 0.
    """
    if n0 == 0:
        return np.empty(0, dtype=np.float64)
    u = rng.beta(z1, z2, size=int(n0))
    return 2.0 * (2.0 * u - 1.0)
