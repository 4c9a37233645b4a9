"""
Periodic outbursts (peaks) and fades (dips).

All of these sit at a flux of one for most of the cycle, so they are
normalized by their mode. Dips accept amplitudes up to one so the flux
never goes negative.
"""
from __future__ import annotations

import numpy as np

from lcmc.periodic import PeriodicModel, _check_width


class SlowPeak(PeriodicModel):
    """Gaussian-shaped outburst of width ``width`` (in phase) at phase 0."""

    NORMALIZATION = "mode"

    def __init__(self, times, amp, period, phase, width):
        self.width = _check_width("SlowPeak", "widths", width)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        w2 = 2.0 * self.width ** 2
        return (
            1.0
            + self.amp * np.exp(-(phase ** 2) / w2)
            + self.amp * np.exp(-((1.0 - phase) ** 2) / w2)
        )


class FlarePeak(PeriodicModel):
    """
    Flare: linear rise over the last ``rise`` of the cycle up to ``1 + amp`` at
    phase 0, then exponential decay with e-folding phase ``fade``.
    """

    NORMALIZATION = "mode"

    def __init__(self, times, amp, period, phase, rise, fade):
        self.rise = _check_width("FlarePeak", "rise times", rise)
        self.fade = _check_width("FlarePeak", "fade times", fade)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        tail = self.amp * np.exp(-phase / self.fade)
        rising = phase >= 1.0 - self.rise
        # linear from 1 + tail at the start of the rise to 1 + amp at phase 1
        ramp = 1.0 + self.amp - (self.amp - tail) * (1.0 - phase) / self.rise
        return np.where(rising, ramp, 1.0 + tail)


class SquarePeak(PeriodicModel):
    """Flux of ``1 + amp`` for the first ``width`` of each cycle."""

    NORMALIZATION = "mode"

    def __init__(self, times, amp, period, phase, width):
        self.width = _check_width("SquarePeak", "widths", width)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        return np.where(phase < self.width, 1.0 + self.amp, 1.0)


class SlowDip(PeriodicModel):
    NORMALIZATION = "mode"
    MAX_AMP = 1.0

    def __init__(self, times, amp, period, phase, width):
        self.width = _check_width("SlowDip", "widths", width)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        w2 = 2.0 * self.width ** 2
        raw = (
            1.0
            - self.amp * np.exp(-(phase ** 2) / w2)
            - self.amp * np.exp(-((1.0 - phase) ** 2) / w2)
        )
        # overlapping wings at large widths can cross zero
        return np.maximum(raw, 0.0)


class FlareDip(PeriodicModel):
    """
    Mirror image of FlarePeak: a linear fall over the last ``fade`` of the
    cycle to ``1 - amp``, then exponential recovery with e-folding ``width``.
    """

    NORMALIZATION = "mode"
    MAX_AMP = 1.0

    def __init__(self, times, amp, period, phase, fade, width):
        self.fade = _check_width("FlareDip", "fall times", fade)
        self.width = _check_width("FlareDip", "recovery times", width)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        tail = np.exp(-phase / self.width)
        falling = phase >= 1.0 - self.fade
        ramp = 1.0 - self.amp + self.amp * (1.0 - tail) * (1.0 - phase) / self.fade
        return np.where(falling, ramp, 1.0 - self.amp * tail)


class SquareDip(PeriodicModel):
    NORMALIZATION = "mode"
    MAX_AMP = 1.0

    def __init__(self, times, amp, period, phase, width):
        self.width = _check_width("SquareDip", "widths", width)
        super().__init__(times, amp, period, phase)

    def _flux_phase(self, phase):
        return np.where(phase < self.width, 1.0 - self.amp, 1.0)
