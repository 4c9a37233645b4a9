from lcmc.sim_specs import NoiseSpec, ParamRange, SimSpec

BASE_CASE = SimSpec(
    name="base_spec",
    curve="drw",
    ranges={
        "d": ParamRange(0.001, 0.1, dist="loguniform"),
        "p": ParamRange(1.0, 100.0, dist="loguniform"),
    },
    noise=NoiseSpec(sigma=0.01),
    n_sims=100,
    master_seed=42,
)

SINE_CASE = SimSpec(
    name="sine_spec",
    curve="sine",
    ranges={
        "a": ParamRange.fixed(0.1),
        "p": ParamRange(1.0, 10.0, dist="loguniform"),
        "ph": ParamRange(0.0, 0.999),
    },
    noise=NoiseSpec(sigma=0.01),
    n_sims=100,
    master_seed=42,
)
