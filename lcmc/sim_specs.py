from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

import numpy as np

from lcmc.registry import required_params


# --- Types ---
RangeDist = Literal["uniform", "loguniform"]


@dataclass(frozen=True)
class ParamRange:
    """
    Interval a light curve parameter is drawn from, once per simulation.

    - dist="uniform":    low + (high - low) * U
    - dist="loguniform": exp(log(low) + (log(high) - log(low)) * U), low > 0

    low == high fixes the parameter.
    """
    low: float
    high: float
    dist: RangeDist = "uniform"

    def __post_init__(self):
        if not (np.isfinite(self.low) and np.isfinite(self.high)):
            raise ValueError(f"Parameter range must be finite; got [{self.low}, {self.high}]")
        if self.low > self.high:
            raise ValueError(f"Parameter range is empty; got [{self.low}, {self.high}]")
        if self.dist not in ("uniform", "loguniform"):
            raise ValueError("dist must be one of {'uniform','loguniform'}")
        if self.dist == "loguniform" and self.low <= 0.0:
            raise ValueError(f"Log-uniform ranges need a positive lower bound; got {self.low}")

    @classmethod
    def fixed(cls, value: float) -> "ParamRange":
        return cls(value, value)


@dataclass(frozen=True)
class NoiseSpec:
    # Gaussian measurement noise in flux units, added after the model
    sigma: float = 0.0

    def __post_init__(self):
        if self.sigma < 0.0:
            raise ValueError(f"Noise sigma must be non-negative; got {self.sigma}")


@dataclass(frozen=True)
class SimSpec:
    """
    One place to declare *everything* needed for a Monte Carlo run.
    """
    name: str
    curve: str
    ranges: Mapping[str, ParamRange] = field(default_factory=dict)
    noise: NoiseSpec = NoiseSpec()
    n_sims: int = 10

    # RNG control
    master_seed: int = 42

    def __post_init__(self):
        if self.n_sims < 0:
            raise ValueError(f"n_sims must be non-negative; got {self.n_sims}")
        missing = [k for k in required_params(self.curve) if k not in self.ranges]
        if missing:
            raise ValueError(
                f"Light curve '{self.curve}' needs ranges for {missing}; "
                f"got {sorted(self.ranges)}"
            )
