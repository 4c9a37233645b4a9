import numpy as np


def mag_to_flux(mag):
    """
    Convert magnitudes (relative to a reference of flux 1) to fluxes.

    Works element-wise on arrays; a scalar input returns a float.
    """
    out = np.power(10.0, -0.4 * np.asarray(mag, dtype=float))
    return float(out) if out.ndim == 0 else out


def flux_to_mag(flux):
    """Inverse of mag_to_flux. Non-positive fluxes map to NaN or inf."""
    with np.errstate(divide="ignore", invalid="ignore"):
        out = -2.5 * np.log10(np.asarray(flux, dtype=float))
    return float(out) if out.ndim == 0 else out
