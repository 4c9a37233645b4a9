"""
Gaussian-process light curves.

Each model draws a zero-mean Gaussian process in magnitudes and converts it
to flux, so the median flux is one. Realizations are computed on the unique
observation times and broadcast back, which gives every duplicated time
stamp the same flux.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Sequence

import numpy as np

from lcmc.errors import BadParam, ModelLogicError
from lcmc.fluxmag import mag_to_flux
from lcmc.models import StochasticModel
from lcmc.multinormal import multi_normal
from lcmc.rng import RandomStream


def _positive(name: str, label: str, value: float) -> float:
    value = float(value)
    if not value > 0.0:
        raise BadParam(f"{name} light curves need a positive {label} (gave {value:g}).")
    return value


def _non_negative(name: str, label: str, value: float) -> float:
    value = float(value)
    if not value >= 0.0:
        raise BadParam(f"{name} light curves need a non-negative {label} (gave {value:g}).")
    return value


class GaussianProcess(StochasticModel):
    """
    Base class for Gaussian-process light curves.

    The generic realization draws one standard normal per unique time and
    correlates them with ``covariance(unique_times)``. Subclasses with a
    Markovian covariance override ``_solve_magnitudes`` with a faster
    recursion.
    """

    NORMALIZATION = "median"

    @abstractmethod
    def covariance(self, times: np.ndarray) -> np.ndarray:
        """Covariance matrix of the magnitudes at ``times``."""

    def _solve_magnitudes(self, times: np.ndarray, rng: RandomStream) -> np.ndarray:
        """Magnitudes at ``times`` (sorted, unique)."""
        z = rng.draw_normal(times.size)
        try:
            return multi_normal(z, self.covariance(times))
        except ValueError as e:
            raise ModelLogicError(
                f"Gaussian process uses invalid correlation matrix.\nOriginal error: {e}"
            ) from e

    def _solve_fluxes(self, times: np.ndarray, rng: RandomStream) -> np.ndarray:
        if times.size == 0:
            return np.empty(0)
        unique, inverse = np.unique(times, return_inverse=True)
        mags = np.asarray(self._solve_magnitudes(unique, rng), dtype=float)
        return mag_to_flux(mags[inverse])


class WhiteNoise(GaussianProcess):
    """Uncorrelated magnitude scatter with standard deviation ``sigma``."""

    def __init__(self, times: Sequence[float], sigma: float, context=None):
        self.sigma = _non_negative("WhiteNoise", "amplitude", sigma)
        super().__init__(times, context)

    def covariance(self, times):
        return self.sigma ** 2 * np.eye(np.asarray(times).size)

    def _solve_magnitudes(self, times, rng):
        return self.sigma * rng.draw_normal(times.size)


class RandomWalk(GaussianProcess):
    """
    Brownian motion in magnitudes with diffusion constant ``diffus``, pinned
    to zero at the first observation.
    """

    def __init__(self, times: Sequence[float], diffus: float, context=None):
        self.diffus = _positive("RandomWalk", "diffusion constant", diffus)
        super().__init__(times, context)

    def covariance(self, times):
        t = np.asarray(times, dtype=float)
        if t.size == 0:
            return np.zeros((0, 0))
        elapsed = t - t.min()
        return self.diffus * np.minimum.outer(elapsed, elapsed)

    def _solve_magnitudes(self, times, rng):
        mags = np.zeros(times.size)
        if times.size > 1:
            steps = np.sqrt(self.diffus * np.diff(times)) * rng.draw_normal(times.size - 1)
            mags[1:] = np.cumsum(steps)
        return mags


class DampedRandomWalk(GaussianProcess):
    """
    Ornstein-Uhlenbeck process with diffusion constant ``diffus`` and damping
    time ``tau``; stationary variance ``diffus * tau / 2``.
    """

    def __init__(self, times: Sequence[float], diffus: float, tau: float, context=None):
        self.diffus = _positive("DampedRandomWalk", "diffusion constant", diffus)
        self.tau = _positive("DampedRandomWalk", "damping time", tau)
        self.sigma = np.sqrt(0.5 * self.diffus * self.tau)
        super().__init__(times, context)

    def covariance(self, times):
        t = np.asarray(times, dtype=float)
        return self.sigma ** 2 * np.exp(-np.abs(np.subtract.outer(t, t)) / self.tau)

    def _solve_magnitudes(self, times, rng):
        # Exact update for unevenly spaced times (eq. 2.47 of Gillespie 1996).
        # Only valid because rho(t1, t3) = rho(t1, t2) * rho(t2, t3).
        z = rng.draw_normal(times.size)
        mags = np.empty(times.size)
        if times.size == 0:
            return mags
        mags[0] = self.sigma * z[0]
        decay = np.exp(-np.diff(times) / self.tau)
        scale = self.sigma * np.sqrt(1.0 - decay ** 2)
        for i in range(1, times.size):
            mags[i] = mags[i - 1] * decay[i - 1] + scale[i - 1] * z[i]
        return mags


class SimpleGp(GaussianProcess):
    """Squared-exponential process with amplitude ``sigma`` and timescale ``tau``."""

    def __init__(self, times: Sequence[float], sigma: float, tau: float, context=None):
        self.sigma = _non_negative("SimpleGp", "amplitude", sigma)
        self.tau = _positive("SimpleGp", "timescale", tau)
        super().__init__(times, context)

    def covariance(self, times):
        t = np.asarray(times, dtype=float)
        dt = np.subtract.outer(t, t) / self.tau
        return self.sigma ** 2 * np.exp(-0.5 * dt ** 2)


class TwoScaleGp(GaussianProcess):
    """Sum of two squared-exponential processes."""

    def __init__(
        self,
        times: Sequence[float],
        sigma1: float,
        tau1: float,
        sigma2: float,
        tau2: float,
        context=None,
    ):
        self.sigma1 = _non_negative("TwoScaleGp", "primary amplitude", sigma1)
        self.tau1 = _positive("TwoScaleGp", "primary timescale", tau1)
        self.sigma2 = _non_negative("TwoScaleGp", "secondary amplitude", sigma2)
        self.tau2 = _positive("TwoScaleGp", "secondary timescale", tau2)
        super().__init__(times, context)

    def covariance(self, times):
        t = np.asarray(times, dtype=float)
        dt = np.subtract.outer(t, t)
        return (
            self.sigma1 ** 2 * np.exp(-0.5 * (dt / self.tau1) ** 2)
            + self.sigma2 ** 2 * np.exp(-0.5 * (dt / self.tau2) ** 2)
        )
