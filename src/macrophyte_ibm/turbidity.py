def turbidity_target(M, K, h_M, T0):
    """Equilibrium turbidity for a macrophyte population of size M.

    Background turbidity T0 scaled down by the half-saturation term; a larger
    population pulls the target lower.
    """
    return T0 * h_M / (h_M + M / K)


def next_turbidity(T, M, params):
    """Advance turbidity by one tick.

    T_{t+1} = T_t + r_T * T_t * (1 - T_t / target(M_t))

    M is the population size at the end of the previous tick. No clamping:
    large r_T can overshoot below zero.
    """
    target = turbidity_target(M, params.K, params.h_M, params.T0)
    return T + params.r_T * T * (1.0 - T / target)
