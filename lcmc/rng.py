# lcmc/rng.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

DEFAULT_SEED: int = 42


class RandomStream:
    """
    A single Mersenne Twister stream with uniform and standard-normal draws.

    The whole generator state lives in the bit generator, so two streams with
    the same ``state`` produce identical draws from that point on.

    Parameters
    ----------
    seed : int
        Seed for the underlying MT19937 bit generator.
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self._gen = np.random.Generator(np.random.MT19937(seed))

    @classmethod
    def _from_state(cls, state: dict[str, Any]) -> "RandomStream":
        stream = cls.__new__(cls)
        bit_gen = np.random.MT19937(0)
        bit_gen.state = state
        stream._gen = np.random.Generator(bit_gen)
        return stream

    @property
    def state(self) -> dict[str, Any]:
        """Snapshot of the bit generator state (a fresh dict every call)."""
        return self._gen.bit_generator.state

    def clone(self) -> "RandomStream":
        """Independent stream whose future draws match this one's."""
        return RandomStream._from_state(self.state)

    __copy__ = clone

    def __deepcopy__(self, memo: dict) -> "RandomStream":
        return self.clone()

    def assign(self, other: "RandomStream") -> None:
        """Overwrite this stream's state with ``other``'s."""
        self._gen.bit_generator.state = other.state

    def draw_uniform(self, size: Optional[int] = None):
        """Uniform variate(s) on [0, 1)."""
        return self._gen.random(size)

    def draw_normal(self, size: Optional[int] = None):
        """Standard normal variate(s), mean 0 and variance 1."""
        return self._gen.standard_normal(size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RandomStream):
            return NotImplemented
        a, b = self.state, other.state
        return (
            np.array_equal(a["state"]["key"], b["state"]["key"])
            and a["state"]["pos"] == b["state"]["pos"]
            and a.get("has_uint32") == b.get("has_uint32")
            and a.get("uinteger") == b.get("uinteger")
        )

    __hash__ = None


class SimulationContext:
    """
    Owner of the shared random stream that stochastic light curves draw from.

    Mutation goes through a two-phase protocol:

        stream = ctx.borrow()      # private clone, shared stream untouched
        ...draw from stream...
        ctx.commit(stream)         # only on success

    A borrowed stream that is never committed is simply dropped, so a failed
    computation leaves the shared draw order exactly where it was.

    Not safe for concurrent callers: two overlapping borrow/commit pairs both
    start from the same state and the last commit wins.
    """

    def __init__(self, seed: int = DEFAULT_SEED, *, stream: Optional[RandomStream] = None):
        self.seed = seed
        self._stream = stream if stream is not None else RandomStream(seed)

    def borrow(self) -> RandomStream:
        return self._stream.clone()

    def commit(self, handle: RandomStream) -> None:
        self._stream.assign(handle)

    def peek(self) -> RandomStream:
        """Clone of the current shared state, for inspection only."""
        return self._stream.clone()


# --- process-wide default context ---
_GLOBAL_CONTEXT: Optional[SimulationContext] = None
_GLOBAL_READY: bool = False


def global_context() -> SimulationContext:
    """
    Return the process-wide context, creating it with DEFAULT_SEED on first use.

    If construction raises, nothing is recorded and the next call retries.
    """
    global _GLOBAL_CONTEXT, _GLOBAL_READY
    if not _GLOBAL_READY:
        ctx = SimulationContext(DEFAULT_SEED)
        _GLOBAL_CONTEXT = ctx
        _GLOBAL_READY = True
    return _GLOBAL_CONTEXT


def reset_global_context(seed: int = DEFAULT_SEED) -> SimulationContext:
    """Replace the process-wide context with a freshly seeded one."""
    global _GLOBAL_CONTEXT, _GLOBAL_READY
    ctx = SimulationContext(seed)
    _GLOBAL_CONTEXT = ctx
    _GLOBAL_READY = True
    return ctx


@dataclass(frozen=True)
class SimStreams:
    # Parameter draws for each simulated light curve
    params: RandomStream

    # Measurement noise added on top of the model fluxes
    noise: RandomStream

    # Shared stream for stochastic light curve realizations
    lightcurves: SimulationContext


def _stream_from_seed_sequence(ss: np.random.SeedSequence) -> RandomStream:
    return RandomStream._from_state(np.random.MT19937(ss).state)


def make_streams(master_seed: int) -> SimStreams:
    """
    Deterministically create independent streams for one simulation run.

    Structure:
      run
        ├── params
        ├── noise
        └── lightcurves (shared, checkout/commit)
    """
    root = np.random.SeedSequence(master_seed)
    ss_params, ss_noise, ss_lc = root.spawn(3)

    return SimStreams(
        params=_stream_from_seed_sequence(ss_params),
        noise=_stream_from_seed_sequence(ss_noise),
        lightcurves=SimulationContext(
            master_seed, stream=_stream_from_seed_sequence(ss_lc)
        ),
    )
