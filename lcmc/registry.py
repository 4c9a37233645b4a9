"""
Name-based construction of light curve models.

Parameters use the short keys of the simulation configuration:

    a      amplitude (flux for most shapes, magnitudes for magsine/aatau/GPs)
    p      period, or timescale for the Gaussian processes
    ph     initial phase
    width  width of a peak or dip, in phase
    width2 secondary width (rise/fall time of flares)
    d      diffusion constant of a random walk
    a2, p2 amplitude and timescale of the second component of two_gp
"""
from __future__ import annotations

import warnings
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

from lcmc.errors import MissingParam
from lcmc.gp import DampedRandomWalk, RandomWalk, SimpleGp, TwoScaleGp, WhiteNoise
from lcmc.models import LightCurve
from lcmc.outbursts import FlareDip, FlarePeak, SlowDip, SlowPeak, SquareDip, SquarePeak
from lcmc.periodic import (
    AaTauWave,
    EclipseWave,
    EllipseWave,
    FlatWave,
    MagSineWave,
    SharpPeakWave,
    SineWave,
    TriangleWave,
)
from lcmc.rng import SimulationContext

PERIODIC = ("a", "p", "ph")

# name -> (class, parameter keys in constructor order, stochastic?)
_REGISTRY: Dict[str, Tuple[Callable[..., LightCurve], Tuple[str, ...], bool]] = {
    # Original waveforms
    "flat": (FlatWave, (), False),
    "sine": (SineWave, PERIODIC, False),
    "triangle": (TriangleWave, PERIODIC, False),
    "ellipse": (EllipseWave, PERIODIC, False),
    "sharp_peak": (SharpPeakWave, PERIODIC, False),
    "eclipse": (EclipseWave, PERIODIC, False),
    "magsine": (MagSineWave, PERIODIC, False),
    "aatau": (AaTauWave, PERIODIC + ("width",), False),
    # Outburst waveforms
    "slow_peak": (SlowPeak, PERIODIC + ("width",), False),
    "flare_peak": (FlarePeak, PERIODIC + ("width2", "width"), False),
    "flat_peak": (SquarePeak, PERIODIC + ("width",), False),
    # Fade waveforms
    "slow_dip": (SlowDip, PERIODIC + ("width",), False),
    "flare_dip": (FlareDip, PERIODIC + ("width2", "width"), False),
    "flat_dip": (SquareDip, PERIODIC + ("width",), False),
    # Gaussian process waveforms
    "white_noise": (WhiteNoise, ("a",), True),
    "walk": (RandomWalk, ("d",), True),
    "drw": (DampedRandomWalk, ("d", "p"), True),
    "simple_gp": (SimpleGp, ("a", "p"), True),
    "two_gp": (TwoScaleGp, ("a", "p", "a2", "p2"), True),
}


def known_light_curves() -> list[str]:
    return sorted(_REGISTRY)


def required_params(name: str) -> Tuple[str, ...]:
    return _lookup(name)[1]


def is_stochastic(name: str) -> bool:
    return _lookup(name)[2]


def _lookup(name: str):
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ValueError(
            f"Unsupported light curve '{name}'. Use one of {known_light_curves()}."
        ) from None


def lc_factory(
    name: str,
    times: Sequence[float],
    params: Mapping[str, float],
    context: Optional[SimulationContext] = None,
) -> LightCurve:
    """
    Build the light curve registered under ``name``.

    Raises
    ------
    ValueError
        If ``name`` is not registered.
    MissingParam
        If ``params`` lacks a key the model needs.
    BadParam
        If a parameter is out of range for the model.
    """
    cls, keys, stochastic = _lookup(name)

    missing = [k for k in keys if k not in params]
    if missing:
        raise MissingParam(name, missing[0])

    unused = sorted(set(params) - set(keys))
    if unused:
        warnings.warn(
            f"Light curve '{name}' ignores parameters {unused}.",
            UserWarning,
        )

    args = [float(params[k]) for k in keys]
    if stochastic:
        return cls(times, *args, context=context)
    return cls(times, *args)
