"""
Light curve models: the shared contract and its two evaluation strategies.

A light curve is a set of observation times plus the fluxes a source would
show at those times. Two kinds exist:

- DeterministicModel: flux is a pure function of time and the constructor
  parameters. Evaluated from scratch on every request.
- StochasticModel: flux depends on a realization of a random process. The
  realization is drawn once, on the first request, from a borrowed copy of
  the shared stream in a SimulationContext, and cached.

All returned arrays are copies; mutating them never affects the model.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Literal, Optional, Sequence, TypeVar

import numpy as np

from lcmc.errors import ModelLogicError
from lcmc.rng import RandomStream, SimulationContext, global_context

# --- Types ---
Normalization = Literal["mean", "median", "mode"]

T = TypeVar("T")


def _as_times(times: Sequence[float]) -> np.ndarray:
    t = np.array(times, dtype=float).reshape(-1)
    if not np.isfinite(t).all():
        raise ValueError("Light curve times must be finite (no NaN or inf).")
    return t


def check_fluxes(fluxes: np.ndarray, n: int, who: str) -> np.ndarray:
    """
    Enforce the flux postconditions shared by all light curves.

    Raises ModelLogicError on a wrong length, NaN or negative values.
    """
    f = np.asarray(fluxes, dtype=float)
    if f.shape != (n,):
        raise ModelLogicError(f"{who} returned {f.shape} fluxes for {n} times.")
    if np.isnan(f).any():
        raise ModelLogicError(f"{who} returned NaN fluxes.")
    if (f < 0.0).any():
        raise ModelLogicError(f"{who} returned negative fluxes (min {f.min():g}).")
    return f


class OnceCell(Generic[T]):
    """Single-assignment slot: empty until set, then fixed for good."""

    __slots__ = ("_value", "_full")

    def __init__(self):
        self._value: Optional[T] = None
        self._full = False

    @property
    def is_set(self) -> bool:
        return self._full

    def get(self) -> T:
        if not self._full:
            raise LookupError("OnceCell has not been set.")
        return self._value

    def set(self, value: T) -> None:
        if self._full:
            raise ModelLogicError("OnceCell can only be set once.")
        self._value = value
        self._full = True


class LightCurve(ABC):
    """
    Interface for every light curve model.

    Invariants
    ----------
    - size() == len(get_times()) == len(get_fluxes())
    - no NaN in times or fluxes; fluxes are non-negative
    - equal times map to equal fluxes
    - over many times (and, for stochastic models, many instances) the flux
      has a mean, median or mode of one; each model names which in
      NORMALIZATION
    """

    NORMALIZATION: Normalization = "mean"

    @abstractmethod
    def get_times(self) -> np.ndarray:
        ...

    @abstractmethod
    def get_fluxes(self) -> np.ndarray:
        ...

    @abstractmethod
    def size(self) -> int:
        ...

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.size()})"


class DeterministicModel(LightCurve):
    """
    Light curve whose flux is a fixed function of time.

    Times are kept in the caller's order. Subclasses implement ``_flux``,
    vectorised over a float array of times.
    """

    def __init__(self, times: Sequence[float]):
        self._times = _as_times(times)

    def get_times(self) -> np.ndarray:
        return self._times.copy()

    def get_fluxes(self) -> np.ndarray:
        times = self.get_times()
        fluxes = self._flux(times)
        return check_fluxes(fluxes, times.size, type(self).__name__).copy()

    def size(self) -> int:
        return int(self._times.size)

    @abstractmethod
    def _flux(self, times: np.ndarray) -> np.ndarray:
        """
        Flux at each time, depending only on the time and the parameters
        given to the constructor.
        """


class StochasticModel(LightCurve):
    """
    Light curve holding one realization of a random process.

    Times are sorted ascending at construction so realizations can step
    through them in order. The realization is computed at most once:

    1. borrow a private clone of the context's shared stream
    2. ``_solve_fluxes`` draws only from that clone
    3. the result is checked against the flux postconditions
    4. the clone is committed back and the result cached

    Any exception in steps 1-3 propagates with the shared stream and the
    cache untouched, so the call can be retried.

    Parameters
    ----------
    times : sequence of float
        Observation times.
    context : SimulationContext, optional
        Owner of the shared stream. Defaults to ``global_context()``,
        resolved here so lazy initialization cannot fail later.
    """

    NORMALIZATION: Normalization = "median"

    def __init__(self, times: Sequence[float], context: Optional[SimulationContext] = None):
        self._times = np.sort(_as_times(times))
        self._context = context if context is not None else global_context()
        self._fluxes: OnceCell[np.ndarray] = OnceCell()

    @property
    def context(self) -> SimulationContext:
        return self._context

    @property
    def is_solved(self) -> bool:
        return self._fluxes.is_set

    def get_times(self) -> np.ndarray:
        return self._times.copy()

    def get_fluxes(self) -> np.ndarray:
        if not self._fluxes.is_set:
            self._realize()
        return self._fluxes.get().copy()

    def size(self) -> int:
        return int(self._times.size)

    def _realize(self) -> None:
        rng = self._context.borrow()
        fluxes = self._solve_fluxes(self.get_times(), rng)
        fluxes = check_fluxes(fluxes, self.size(), type(self).__name__).copy()
        fluxes.setflags(write=False)

        # no exceptions past this point
        self._context.commit(rng)
        self._fluxes.set(fluxes)

    @abstractmethod
    def _solve_fluxes(self, times: np.ndarray, rng: RandomStream) -> np.ndarray:
        """
        Compute one realization at ``times`` (sorted ascending), drawing
        only from ``rng``. Equal times must receive equal fluxes.
        """
