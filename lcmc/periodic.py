"""
Periodic deterministic light curves.

Every periodic model shares three parameters:

    amp    : amplitude, > 0
    period : period in the same units as the times, > 0
    phase  : phase at t = 0, in [0, 1)

and evaluates a waveform at phase(t) = frac(phase + t / period).
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Sequence

import numpy as np

from lcmc.errors import BadParam
from lcmc.fluxmag import mag_to_flux
from lcmc.models import DeterministicModel


class FlatWave(DeterministicModel):
    """Constant flux of one; the control case with no variability."""

    NORMALIZATION = "mean"

    def _flux(self, times: np.ndarray) -> np.ndarray:
        return np.ones_like(times)


class PeriodicModel(DeterministicModel):
    """
    Base class for periodic waveforms.

    Subclasses implement ``_flux_phase(phase)`` on an array of phases in
    [0, 1), using ``self.amp`` and any extra parameters of their own.
    """

    # Largest amplitude a waveform accepts; dips can't go below zero flux
    MAX_AMP: float = np.inf

    def __init__(self, times: Sequence[float], amp: float, period: float, phase: float):
        amp, period, phase = float(amp), float(period), float(phase)
        name = type(self).__name__

        if not amp > 0.0:
            raise BadParam(f"All periodic light curves need positive amplitudes (gave {amp:g}).")
        if amp > self.MAX_AMP:
            raise BadParam(
                f"{name} must have amplitudes less than or equal to {self.MAX_AMP:g} (gave {amp:g})."
            )
        if not period > 0.0:
            raise BadParam(f"All periodic light curves need positive periods (gave {period:g}).")
        if not (0.0 <= phase < 1.0):
            raise BadParam(
                f"All periodic light curves need initial phases in the interval [0, 1) (gave {phase:g})."
            )

        super().__init__(times)
        self.amp = amp
        self.period = period
        self.phase = phase

    def phases(self, times: np.ndarray) -> np.ndarray:
        ph = self.phase + np.asarray(times, dtype=float) / self.period
        return ph - np.floor(ph)

    def _flux(self, times: np.ndarray) -> np.ndarray:
        return self._flux_phase(self.phases(times))

    @abstractmethod
    def _flux_phase(self, phase: np.ndarray) -> np.ndarray:
        ...


def _check_width(name: str, label: str, width: float, upper: float = np.inf) -> float:
    width = float(width)
    if not width > 0.0:
        raise BadParam(f"All {name} light curves need positive {label} (gave {width:g}).")
    if width > upper:
        raise BadParam(
            f"All {name} light curves need {label} less than or equal to {upper:g} (gave {width:g})."
        )
    return width


class SineWave(PeriodicModel):
    NORMALIZATION = "mean"
    MAX_AMP = 1.0

    def _flux_phase(self, phase):
        return 1.0 + self.amp * np.sin(2.0 * np.pi * phase)


class TriangleWave(PeriodicModel):
    """Asymmetric, sawtooth-like wave with a mean of one."""

    NORMALIZATION = "mean"
    MAX_AMP = 1.0

    def _flux_phase(self, phase):
        x = 2.0 * np.pi * phase
        return 1.0 + self.amp * 1.11803 * np.sin(x) / (1.5 + np.cos(x))


class EllipseWave(PeriodicModel):
    """Strongly skewed wave, as for an eccentric ellipsoidal variable."""

    NORMALIZATION = "mean"
    MAX_AMP = 1.0

    def _flux_phase(self, phase):
        x = 2.0 * np.pi * phase
        return 1.0 + self.amp * 0.458258 * np.sin(x) / (1.1 + np.cos(x))


class EclipseWave(PeriodicModel):
    """
    Detached eclipsing binary: a primary eclipse of depth ``amp`` and a
    secondary of depth ``0.7 * amp``, each lasting 5% of the period.
    """

    NORMALIZATION = "mode"
    MAX_AMP = 1.0

    def _flux_phase(self, phase):
        out = np.ones_like(phase)
        out[(phase >= 0.0) & (phase <= 0.05)] = 1.0 - self.amp
        out[(phase >= 0.5) & (phase <= 0.55)] = 1.0 - 0.7 * self.amp
        return out


class SharpPeakWave(PeriodicModel):
    """Narrow periodic maxima on a flat minimum of one."""

    NORMALIZATION = "mode"

    def _flux_phase(self, phase):
        flux = 1.0 + self.amp * (-0.05 + 0.105 / (1.1 + np.sin(2.0 * np.pi * phase)))
        # the minimum sits at exactly one up to rounding
        return np.maximum(flux, 1.0)


class MagSineWave(PeriodicModel):
    """Sinusoid in magnitudes; ``amp`` is the semi-amplitude in mag."""

    NORMALIZATION = "median"

    def _flux_phase(self, phase):
        return mag_to_flux(self.amp * np.sin(2.0 * np.pi * phase))


class AaTauWave(PeriodicModel):
    """
    AA Tau-like dimming: a cosine-shaped dip of ``amp`` magnitudes, centred on
    phase 0 and spanning ``width`` of the cycle.
    """

    NORMALIZATION = "mode"

    def __init__(self, times, amp, period, phase, width):
        self.width = _check_width("AaTauWave", "widths", width, upper=1.0)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        mag = np.zeros_like(phase)
        head = phase < 0.5 * self.width
        tail = phase > 1.0 - 0.5 * self.width
        mag[head] = self.amp * np.cos(np.pi * phase[head] / self.width)
        mag[tail] = self.amp * np.cos(np.pi * (phase[tail] - 1.0) / self.width)
        return mag_to_flux(mag)
