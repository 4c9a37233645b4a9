import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from lcmc.registry import lc_factory
from lcmc.rng import RandomStream, SimulationContext, make_streams
from lcmc.sim_specs import ParamRange, SimSpec


@dataclass
class SimResult:
    """
    One simulated light curve.

    All arrays have the same length and are in the order returned by the
    model's get_times() (sorted for stochastic models).
    """
    sim: int                        # index within the run
    curve: str                      # registry name of the model
    params: Dict[str, float]        # parameters drawn for this light curve
    times: np.ndarray               # observation times
    model_fluxes: np.ndarray        # noiseless model fluxes
    fluxes: np.ndarray              # model fluxes plus measurement noise


def draw_params(ranges: Mapping[str, ParamRange], rng: RandomStream) -> Dict[str, float]:
    """
    Draw one value per parameter range, in sorted key order so the draw
    sequence does not depend on dict insertion order.
    """
    out: Dict[str, float] = {}
    for key in sorted(ranges):
        r = ranges[key]
        u = float(rng.draw_uniform())
        if r.dist == "loguniform":
            lo, hi = np.log(r.low), np.log(r.high)
            out[key] = float(np.exp(lo + (hi - lo) * u))
        else:
            out[key] = float(r.low + (r.high - r.low) * u)
    return out


def make_white_noise(times: Sequence[float], sigma: float, rng: RandomStream) -> np.ndarray:
    """Independent N(0, sigma^2) noise, one value per time."""
    n = np.asarray(times).size
    if sigma == 0.0:
        return np.zeros(n)
    return sigma * rng.draw_normal(n)


def make_inject_noise(
    times: Sequence[float],
    fluxes: Sequence[float],
    normalize: bool = True,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Turn an observed light curve into noise for injection tests.

    The observations are sorted by time, keeping each (time, flux) pair
    together, so the noise lines up with ``get_times()`` of any model built
    on the returned times. With ``normalize`` the fluxes are first scaled
    to a median of one. One is then subtracted: models and observations
    both sit at a reference flux of one, and adding the model to the
    offset observations counts that reference once.

    Returns
    -------
    times, noise
        Sorted observation times and the observed fluxes minus one.
    """
    t = np.asarray(times, dtype=float).reshape(-1)
    f = np.asarray(fluxes, dtype=float).reshape(-1)
    if t.size != f.size:
        raise ValueError(f"Observed light curve has {t.size} times but {f.size} fluxes.")
    if t.size == 0:
        raise ValueError("Observed light curve is empty.")
    if not (np.isfinite(t).all() and np.isfinite(f).all()):
        raise ValueError("Observed light curve contains NaN or inf.")

    order = np.argsort(t, kind="stable")
    t, f = t[order], f[order]
    if normalize:
        median = np.median(f)
        if not median > 0.0:
            raise ValueError(f"Cannot normalize observed fluxes with median {median:g}.")
        f = f / median
    return t, f - 1.0


def sim_light_curve(
    curve: str,
    params: Mapping[str, float],
    times: Sequence[float],
    noise: np.ndarray,
    context: Optional[SimulationContext] = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Build one light curve and add noise to its fluxes.

    Returns
    -------
    times, model_fluxes, fluxes
    """
    lc = lc_factory(curve, times, params, context=context)
    lc_times = lc.get_times()
    model_fluxes = lc.get_fluxes()

    noise = np.asarray(noise, dtype=float).reshape(-1)
    if noise.size != model_fluxes.size:
        raise ValueError(
            f"Noise has {noise.size} values for a light curve of {model_fluxes.size} points."
        )
    return lc_times, model_fluxes, model_fluxes + noise


def run_simulations(
    spec: SimSpec,
    times: Sequence[float],
    base_noise: Optional[np.ndarray] = None,
) -> List[SimResult]:
    """
    Run ``spec.n_sims`` simulations of ``spec.curve`` at the given cadence.

    Each run owns its streams (see make_streams), so repeated calls with the
    same spec and times return bit-identical results.

    Parameters
    ----------
    spec : SimSpec
        Light curve name, parameter ranges, noise level, run size and seed.
    times : sequence of float
        Observation times shared by every simulated light curve.
    base_noise : ndarray, optional
        Fixed noise added to every simulation in place of white noise, as
        returned by make_inject_noise. ``times`` must then be sorted so the
        noise lines up with stochastic models, which sort their times.

    Returns
    -------
    list of SimResult
    """
    times = np.asarray(times, dtype=float).reshape(-1)
    if base_noise is not None:
        base_noise = np.asarray(base_noise, dtype=float).reshape(-1)
        if base_noise.size != times.size:
            raise ValueError(
                f"Base noise has {base_noise.size} values for {times.size} times."
            )
        if (np.diff(times) < 0.0).any():
            raise ValueError("Times must be sorted ascending when injecting into fixed noise.")
    streams = make_streams(spec.master_seed)

    results: List[SimResult] = []
    for i in range(spec.n_sims):
        params = draw_params(spec.ranges, streams.params)
        if base_noise is None:
            noise = make_white_noise(times, spec.noise.sigma, streams.noise)
        else:
            noise = base_noise
        lc_times, model_fluxes, fluxes = sim_light_curve(
            spec.curve, params, times, noise, context=streams.lightcurves
        )
        results.append(
            SimResult(
                sim=i,
                curve=spec.curve,
                params=params,
                times=lc_times,
                model_fluxes=model_fluxes,
                fluxes=fluxes,
            )
        )
    return results
