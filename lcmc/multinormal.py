from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from scipy.linalg import eigh

# Eigenvalues in (-EIG_TOL, 0) are treated as rounding noise and set to zero.
EIG_TOL: float = 1e-12

# (covariance, half matrix) for the most recent call
_cache: Optional[Tuple[np.ndarray, np.ndarray]] = None


def half_matrix(covar: np.ndarray) -> np.ndarray:
    """
    Matrix A with A @ A.T == covar, from the eigendecomposition of covar.

    Raises
    ------
    ValueError
        If covar is not square or not positive semidefinite. Only the lower
        triangle of covar is read.
    """
    covar = np.asarray(covar, dtype=float)
    if covar.ndim != 2 or covar.shape[0] != covar.shape[1]:
        raise ValueError(f"Covariance matrix must be square (N,N); got shape {covar.shape}")

    eig_vals, eig_vecs = eigh(covar)

    if (eig_vals < -EIG_TOL).any():
        raise ValueError(
            f"Matrix is not positive semidefinite (min eigenvalue {eig_vals.min():g})."
        )
    eig_vals = np.maximum(eig_vals, 0.0)

    # Scale each eigenvector column by sqrt(eigenvalue)
    return eig_vecs * np.sqrt(eig_vals)[None, :]


def multi_normal(independent: np.ndarray, covar: np.ndarray) -> np.ndarray:
    """
    Turn a vector of independent standard normals into a correlated one.

    Parameters
    ----------
    independent : (N,) ndarray
        i.i.d. N(0, 1) variates.
    covar : (N, N) ndarray
        Target covariance matrix.

    Returns
    -------
    correlated : (N,) ndarray
        ``half_matrix(covar) @ independent``, distributed as N(0, covar).

    Notes
    -----
    The half matrix of the last covariance seen is cached, since a Monte Carlo
    run usually reuses one cadence and parameter set. The cache is replaced
    only after a new decomposition succeeds.
    """
    global _cache

    z = np.asarray(independent, dtype=float).reshape(-1)
    covar = np.asarray(covar, dtype=float)

    if covar.ndim != 2 or covar.shape[0] != covar.shape[1]:
        raise ValueError(f"Covariance matrix must be square (N,N); got shape {covar.shape}")
    if z.size != covar.shape[0]:
        raise ValueError(
            f"Vector of length {z.size} cannot be multiplied by "
            f"{covar.shape[0]}x{covar.shape[0]} covariance matrix."
        )

    if _cache is None or _cache[0].shape != covar.shape or not np.array_equal(_cache[0], covar):
        prefix = half_matrix(covar)
        _cache = (covar.copy(), prefix)

    return _cache[1] @ z


def clear_cache() -> None:
    global _cache
    _cache = None
