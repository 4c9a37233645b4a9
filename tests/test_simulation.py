from dataclasses import replace

import numpy as np
import pytest

from lcmc.base_cases import BASE_CASE, SINE_CASE
from lcmc.rng import RandomStream
from lcmc.sim_specs import NoiseSpec, ParamRange, SimSpec
from lcmc.simulation import (
    draw_params,
    make_inject_noise,
    make_white_noise,
    run_simulations,
    sim_light_curve,
)

from tests.fixtures import irregular_cadence, regular_cadence


def test_draw_params_within_ranges():
    ranges = {
        "a": ParamRange(0.1, 0.5),
        "p": ParamRange(1.0, 100.0, dist="loguniform"),
        "ph": ParamRange.fixed(0.25),
    }
    rng = RandomStream(0)
    draws = [draw_params(ranges, rng) for _ in range(2000)]

    a = np.array([d["a"] for d in draws])
    p = np.array([d["p"] for d in draws])
    assert a.min() >= 0.1 and a.max() <= 0.5
    assert p.min() >= 1.0 and p.max() <= 100.0
    assert all(d["ph"] == 0.25 for d in draws)

    # log-uniform: half the draws below the geometric midpoint
    assert abs(np.mean(p < 10.0) - 0.5) < 0.05


def test_draw_params_ignores_insertion_order():
    r1 = {"a": ParamRange(0.0, 1.0), "p": ParamRange(1.0, 2.0)}
    r2 = {"p": ParamRange(1.0, 2.0), "a": ParamRange(0.0, 1.0)}
    assert draw_params(r1, RandomStream(3)) == draw_params(r2, RandomStream(3))


def test_make_white_noise():
    t = regular_cadence(4000)
    n = make_white_noise(t, 0.05, RandomStream(1))
    assert n.shape == t.shape
    assert abs(n.std() - 0.05) < 0.005

    rng = RandomStream(1)
    before = rng.clone()
    assert np.array_equal(make_white_noise(t, 0.0, rng), np.zeros(t.size))
    assert rng == before


def test_sim_light_curve_adds_noise():
    t = regular_cadence(10)
    noise = np.full(10, 0.1)
    times, model, fluxes = sim_light_curve("flat", {}, t, noise)
    assert np.array_equal(times, t)
    assert np.array_equal(model, np.ones(10))
    assert np.allclose(fluxes, 1.1)

    with pytest.raises(ValueError, match="Noise has"):
        sim_light_curve("flat", {}, t, np.zeros(3))


def test_run_simulations_reproducible():
    spec = SimSpec(
        name="t",
        curve="drw",
        ranges={"d": ParamRange(0.001, 0.01, "loguniform"), "p": ParamRange(1.0, 10.0)},
        noise=NoiseSpec(0.01),
        n_sims=5,
        master_seed=123,
    )
    t = irregular_cadence()
    a = run_simulations(spec, t)
    b = run_simulations(spec, t)

    assert [r.sim for r in a] == list(range(5))
    for ra, rb in zip(a, b):
        assert ra.params == rb.params
        assert np.array_equal(ra.fluxes, rb.fluxes)
        assert np.array_equal(ra.times, np.sort(t))
        assert not np.array_equal(ra.fluxes, ra.model_fluxes)

    # each simulation is a fresh realization
    assert not np.array_equal(a[0].model_fluxes, a[1].model_fluxes)


def test_run_simulations_seed_changes_output():
    t = regular_cadence(20)
    a = run_simulations(SINE_CASE, t)
    b = run_simulations(replace(SINE_CASE, master_seed=7), t)
    assert a[0].params != b[0].params


def test_noise_does_not_change_model_draws():
    """Parameters and stochastic realizations use their own streams."""
    t = regular_cadence(30)
    quiet = run_simulations(SimSpec("q", "drw", BASE_CASE.ranges, NoiseSpec(0.0), 3), t)
    noisy = run_simulations(SimSpec("n", "drw", BASE_CASE.ranges, NoiseSpec(0.05), 3), t)
    for q, n in zip(quiet, noisy):
        assert q.params == n.params
        assert np.array_equal(q.model_fluxes, n.model_fluxes)
        assert np.array_equal(q.fluxes, q.model_fluxes)


def test_zero_sims():
    spec = SimSpec("z", "flat", n_sims=0)
    assert run_simulations(spec, [0.0, 1.0]) == []


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(low=2.0, high=1.0),
        dict(low=0.0, high=1.0, dist="loguniform"),
        dict(low=0.0, high=np.inf),
        dict(low=0.0, high=1.0, dist="normal"),
    ],
)
def test_param_range_validation(kwargs):
    with pytest.raises(ValueError):
        ParamRange(**kwargs)


def test_spec_validation():
    with pytest.raises(ValueError, match="needs ranges"):
        SimSpec("x", "sine", {"a": ParamRange.fixed(0.1)})
    with pytest.raises(ValueError, match="Unsupported"):
        SimSpec("x", "nope")
    with pytest.raises(ValueError):
        SimSpec("x", "flat", n_sims=-1)
    with pytest.raises(ValueError):
        NoiseSpec(-0.1)


def test_base_cases_are_consistent():
    for spec in (BASE_CASE, SINE_CASE):
        assert spec.n_sims > 0
        res = run_simulations(replace(spec, n_sims=2), regular_cadence(15))
        assert len(res) == 2
        for r in res:
            assert np.all(r.model_fluxes >= 0.0)


# --- injection into observed light curves ---

OBS_TIMES = np.array([3.0, 0.5, 2.0, 1.25, 4.5, 0.0])
OBS_FLUXES = np.array([1.2, 0.9, 1.05, 0.95, 1.1, 0.8])


def test_make_inject_noise_sorts_pairs_together():
    t, noise = make_inject_noise(OBS_TIMES, OBS_FLUXES, normalize=False)
    order = np.argsort(OBS_TIMES)
    assert np.array_equal(t, OBS_TIMES[order])
    assert np.allclose(noise, OBS_FLUXES[order] - 1.0)


def test_make_inject_noise_normalizes_to_median_one():
    t, noise = make_inject_noise([0.0, 1.0, 2.0], [2.0, 4.0, 6.0])
    assert np.allclose(noise, [-0.5, 0.0, 0.5])


@pytest.mark.parametrize(
    "times,fluxes",
    [
        ([0.0, 1.0], [1.0]),
        ([], []),
        ([0.0, np.nan], [1.0, 1.0]),
        ([0.0, 1.0], [1.0, np.inf]),
        ([0.0, 1.0, 2.0], [-1.0, 0.0, 1.0]),
    ],
)
def test_make_inject_noise_rejects_bad_input(times, fluxes):
    with pytest.raises(ValueError):
        make_inject_noise(times, fluxes)


def test_injecting_flat_returns_observations():
    t, noise = make_inject_noise(OBS_TIMES, OBS_FLUXES, normalize=False)
    res = run_simulations(SimSpec("inj", "flat", n_sims=2), t, base_noise=noise)
    order = np.argsort(OBS_TIMES)
    for r in res:
        assert np.array_equal(r.times, OBS_TIMES[order])
        assert np.allclose(r.fluxes, OBS_FLUXES[order])


def test_injection_keeps_observations_with_their_times():
    """Stochastic models sort their times; the injected noise must follow."""
    t, noise = make_inject_noise(OBS_TIMES, OBS_FLUXES, normalize=False)
    observed = dict(zip(OBS_TIMES, OBS_FLUXES))

    res = run_simulations(replace(BASE_CASE, n_sims=3), t, base_noise=noise)
    for r in res:
        expected = np.array([observed[x] - 1.0 for x in r.times])
        assert np.allclose(r.fluxes - r.model_fluxes, expected)


def test_injection_does_not_touch_noise_stream():
    t, noise = make_inject_noise(OBS_TIMES, OBS_FLUXES)
    spec = replace(BASE_CASE, n_sims=2)
    injected = run_simulations(spec, t, base_noise=noise)
    plain = run_simulations(spec, t)
    for a, b in zip(injected, plain):
        assert a.params == b.params
        assert np.array_equal(a.model_fluxes, b.model_fluxes)


def test_base_noise_checks():
    spec = SimSpec("inj", "flat", n_sims=1)
    with pytest.raises(ValueError, match="Base noise"):
        run_simulations(spec, [0.0, 1.0], base_noise=np.zeros(3))
    with pytest.raises(ValueError, match="sorted"):
        run_simulations(spec, [1.0, 0.0], base_noise=np.zeros(2))
