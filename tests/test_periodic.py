import numpy as np
import pytest

from lcmc.errors import BadParam
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

from tests.fixtures import irregular_cadence


# Dense, phase-uniform sampling of many cycles
DENSE = np.linspace(0.0, 100.0, 200_001)[:-1]


ALL_SHAPES = [
    (FlatWave, ()),
    (SineWave, (0.5, 1.0, 0.0)),
    (TriangleWave, (0.5, 1.0, 0.0)),
    (EllipseWave, (0.5, 1.0, 0.0)),
    (EclipseWave, (0.5, 1.0, 0.0)),
    (SharpPeakWave, (0.5, 1.0, 0.0)),
    (MagSineWave, (0.5, 1.0, 0.0)),
    (AaTauWave, (0.5, 1.0, 0.0, 0.3)),
    (SlowPeak, (0.5, 1.0, 0.0, 0.05)),
    (FlarePeak, (0.5, 1.0, 0.0, 0.05, 0.1)),
    (SquarePeak, (0.5, 1.0, 0.0, 0.1)),
    (SlowDip, (0.5, 1.0, 0.0, 0.05)),
    (FlareDip, (0.5, 1.0, 0.0, 0.05, 0.1)),
    (SquareDip, (0.5, 1.0, 0.0, 0.1)),
]


def _central(fluxes: np.ndarray, how: str) -> float:
    if how == "mean":
        return float(fluxes.mean())
    if how == "median":
        return float(np.median(fluxes))
    values, counts = np.unique(np.round(fluxes, 6), return_counts=True)
    return float(values[np.argmax(counts)])


@pytest.mark.parametrize("cls,args", ALL_SHAPES)
def test_shape_contract(cls, args):
    lc = cls(irregular_cadence(), *args)
    f = lc.get_fluxes()
    assert f.size == lc.size()
    assert not np.isnan(f).any()
    assert np.all(f >= 0.0)
    assert np.array_equal(f, lc.get_fluxes())

    t = lc.get_times()
    dup = t[5] == t[17]
    assert dup and f[5] == f[17]


@pytest.mark.parametrize(
    "cls,args",
    [s for s in ALL_SHAPES if s[0] not in (SharpPeakWave,)],
)
def test_shape_normalization(cls, args):
    lc = cls(DENSE, *args)
    c = _central(lc.get_fluxes(), lc.NORMALIZATION)
    assert abs(c - 1.0) < 1e-3, f"{cls.__name__}: {lc.NORMALIZATION} = {c}"


def test_sharp_peak_minimum_is_one():
    f = SharpPeakWave(DENSE, 0.5, 1.0, 0.0).get_fluxes()
    assert f.min() == pytest.approx(1.0, abs=1e-9)


def test_sine_values():
    lc = SineWave([0.0, 0.25, 0.5, 0.75], amp=0.4, period=1.0, phase=0.0)
    assert np.allclose(lc.get_fluxes(), [1.0, 1.4, 1.0, 0.6])


def test_phase_offset_and_period():
    a = SineWave([0.0], amp=0.4, period=2.0, phase=0.25).get_fluxes()
    b = SineWave([0.5], amp=0.4, period=2.0, phase=0.0).get_fluxes()
    assert np.allclose(a, b)


def test_periodicity():
    t = np.array([0.3, 1.1, 2.9])
    lc1 = TriangleWave(t, 0.7, 2.5, 0.4)
    lc2 = TriangleWave(t + 5 * 2.5, 0.7, 2.5, 0.4)
    assert np.allclose(lc1.get_fluxes(), lc2.get_fluxes())


def test_eclipse_depths():
    lc = EclipseWave([0.01, 0.2, 0.52, 0.8], amp=0.5, period=1.0, phase=0.0)
    assert np.allclose(lc.get_fluxes(), [0.5, 1.0, 0.65, 1.0])


def test_magsine_in_magnitudes():
    lc = MagSineWave([0.25, 0.75], amp=1.0, period=1.0, phase=0.0)
    assert np.allclose(lc.get_fluxes(), [10 ** -0.4, 10 ** 0.4])


def test_aatau_dims_at_phase_zero():
    lc = AaTauWave([0.0, 0.5], amp=0.5, period=1.0, phase=0.0, width=0.2)
    f = lc.get_fluxes()
    assert f[0] == pytest.approx(10 ** (-0.4 * 0.5))
    assert f[1] == 1.0


def test_flare_peak_is_continuous_and_peaks_at_phase_zero():
    amp, rise, fade = 0.8, 0.1, 0.05
    lc = FlarePeak(DENSE[:20_000], amp, 1.0, 0.0, rise, fade)
    f = lc.get_fluxes()
    assert f.max() == pytest.approx(1.0 + amp, abs=1e-3)
    assert np.max(np.abs(np.diff(f))) < 0.01


def test_flare_dip_is_continuous_and_bottoms_at_phase_zero():
    amp, fall, width = 0.6, 0.1, 0.05
    lc = FlareDip(DENSE[:20_000], amp, 1.0, 0.0, fall, width)
    f = lc.get_fluxes()
    assert f.min() == pytest.approx(1.0 - amp, abs=1e-3)
    assert np.max(np.abs(np.diff(f))) < 0.01


def test_square_peak_and_dip_levels():
    t = [0.05, 0.5]
    assert np.allclose(SquarePeak(t, 0.3, 1.0, 0.0, 0.1).get_fluxes(), [1.3, 1.0])
    assert np.allclose(SquareDip(t, 0.3, 1.0, 0.0, 0.1).get_fluxes(), [0.7, 1.0])


def test_slow_dip_clipped_at_zero():
    lc = SlowDip(DENSE[:2000], amp=1.0, period=1.0, phase=0.0, width=2.0)
    assert np.all(lc.get_fluxes() >= 0.0)


@pytest.mark.parametrize(
    "ctor",
    [
        lambda: SineWave([0.0], 0.0, 1.0, 0.0),
        lambda: SineWave([0.0], 1.5, 1.0, 0.0),
        lambda: SineWave([0.0], 0.5, 0.0, 0.0),
        lambda: SineWave([0.0], 0.5, 1.0, 1.0),
        lambda: SineWave([0.0], 0.5, 1.0, -0.1),
        lambda: EclipseWave([0.0], 1.2, 1.0, 0.0),
        lambda: SlowDip([0.0], 1.2, 1.0, 0.0, 0.1),
        lambda: SquarePeak([0.0], 0.5, 1.0, 0.0, 0.0),
        lambda: FlarePeak([0.0], 0.5, 1.0, 0.0, -0.1, 0.1),
        lambda: FlareDip([0.0], 0.5, 1.0, 0.0, 0.1, 0.0),
        lambda: AaTauWave([0.0], 0.5, 1.0, 0.0, 1.5),
    ],
)
def test_bad_params_rejected(ctor):
    with pytest.raises(BadParam):
        ctor()


def test_bad_param_is_value_error():
    with pytest.raises(ValueError):
        SineWave([0.0], -1.0, 1.0, 0.0)
