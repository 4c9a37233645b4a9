# tests/fixtures.py
import numpy as np

from lcmc.models import DeterministicModel, StochasticModel


def regular_cadence(n: int = 50, dt: float = 0.5, t0: float = 0.0) -> np.ndarray:
    return t0 + dt * np.arange(n)


def irregular_cadence(n: int = 60, span: float = 30.0, seed: int = 7) -> np.ndarray:
    """Unsorted, unevenly spaced times with a few exact duplicates."""
    rng = np.random.default_rng(seed)
    t = rng.uniform(0.0, span, size=n)
    t[5] = t[17]
    t[30] = t[2]
    return t


class InjectedFault(RuntimeError):
    pass


class FaultyModel(StochasticModel):
    """
    Draws ``n_draws`` normals from the borrowed stream, then fails while
    ``fail`` is True. Used to check that failed realizations leave no trace.
    """

    def __init__(self, times, n_draws: int = 10, fail: bool = True, context=None):
        self.n_draws = n_draws
        self.fail = fail
        self.calls = 0
        super().__init__(times, context)

    def _solve_fluxes(self, times, rng):
        self.calls += 1
        rng.draw_normal(self.n_draws)
        if self.fail:
            raise InjectedFault("simulated failure partway through a realization")
        return np.ones(times.size)


class UniformModel(StochasticModel):
    """Flux = 2U per unique time; mean one. Draws exactly one uniform per unique time."""

    NORMALIZATION = "mean"

    def _solve_fluxes(self, times, rng):
        unique, inverse = np.unique(times, return_inverse=True)
        return 2.0 * rng.draw_uniform(unique.size)[inverse]


class NanModel(StochasticModel):
    def _solve_fluxes(self, times, rng):
        rng.draw_uniform(3)
        out = np.ones(times.size)
        out[0] = np.nan
        return out


class NegativeWave(DeterministicModel):
    def _flux(self, times):
        return np.cos(times)
