# runs/io.py
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

CURVE_COLUMNS = ("sim", "time", "model_flux", "flux")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def save_json(path: Path, obj: Any) -> None:
    ensure_dir(path.parent)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True))


def load_json(path: Path) -> Any:
    return json.loads(path.read_text())


def rows_to_csv(rows: Sequence[Dict[str, Any]], out_csv: Path) -> None:
    """
    Write dict rows as CSV. Columns are the union of all keys, in the order
    first seen; rows lacking a column leave it blank.
    """
    if not rows:
        raise ValueError("No rows to write.")
    ensure_dir(out_csv.parent)
    fieldnames: List[str] = []
    for r in rows:
        fieldnames.extend(k for k in r if k not in fieldnames)
    with out_csv.open("w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerows(rows)


def save_curves(curves: pd.DataFrame, out_csv: Path) -> None:
    """Long-format light curves, one row per (simulation, time)."""
    missing = set(CURVE_COLUMNS) - set(curves.columns)
    if missing:
        raise KeyError(f"Light curve table is missing columns {sorted(missing)}")
    ensure_dir(out_csv.parent)
    curves.loc[:, list(CURVE_COLUMNS)].to_csv(out_csv, index=False)


def load_csv(path: Path) -> pd.DataFrame:
    return pd.read_csv(path)


def load_times(path: Path) -> np.ndarray:
    """
    Read observation times from a whitespace-delimited text file.

    The first column is taken as the time stamp; blank lines and anything
    after a '#' are ignored.
    """
    try:
        df = pd.read_csv(path, sep=r"\s+", comment="#", header=None, usecols=[0])
    except pd.errors.EmptyDataError:
        raise ValueError(f"No time stamps found in {path}") from None
    times = df.iloc[:, 0].to_numpy(dtype=float)
    if times.size == 0:
        raise ValueError(f"No time stamps found in {path}")
    if np.isnan(times).any():
        raise ValueError(f"Time stamps in {path} contain NaN")
    return times


def load_light_curve(path: Path) -> tuple[np.ndarray, np.ndarray]:
    """
    Read an observed light curve (time, flux) from a whitespace-delimited
    text file: time in the first column, flux in the second, '#' comments.

    Rows are returned in file order; sorting is left to the caller.
    """
    try:
        df = pd.read_csv(path, sep=r"\s+", comment="#", header=None, usecols=[0, 1])
    except pd.errors.EmptyDataError:
        raise ValueError(f"No observations found in {path}") from None
    if df.empty:
        raise ValueError(f"No observations found in {path}")
    times = df.iloc[:, 0].to_numpy(dtype=float)
    fluxes = df.iloc[:, 1].to_numpy(dtype=float)
    if np.isnan(times).any() or np.isnan(fluxes).any():
        raise ValueError(f"Observations in {path} contain missing or NaN values")
    return times, fluxes
