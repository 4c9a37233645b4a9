# lcmc/plots.py
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _ensure_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def plot_light_curves(
    curves: pd.DataFrame,
    *,
    max_curves: int = 5,
    noisy: bool = True,
    title: str | None = None,
    out_png: str | Path | None = None,
) -> None:
    """
    Quick look at a run: flux vs time for the first ``max_curves`` simulations.

    ``curves`` is the long-format table written by a run
    (columns sim, time, model_flux, flux). Noiseless model fluxes are drawn
    as lines; with ``noisy`` the observed fluxes are overlaid as points.
    """
    if curves.empty:
        raise ValueError("No light curves to plot.")
    missing = {"sim", "time", "model_flux", "flux"} - set(curves.columns)
    if missing:
        raise KeyError(f"Light curve table is missing columns {sorted(missing)}")

    sims = np.unique(curves["sim"].to_numpy())[:max_curves]

    fig = plt.figure(figsize=(8, 1.6 * len(sims) + 1.0))
    for k, sim in enumerate(sims):
        lc = curves[curves["sim"] == sim].sort_values("time")
        # stack curves vertically so they do not overlap
        offset = 1.5 * k
        line = plt.plot(lc["time"], lc["model_flux"] + offset, linewidth=1.2, label=f"sim {sim}")
        if noisy:
            plt.plot(lc["time"], lc["flux"] + offset, ".", markersize=3, color=line[0].get_color())

    plt.xlabel("time")
    plt.ylabel("flux (offset per simulation)")
    plt.title(title or "Simulated light curves")
    plt.legend(frameon=False, fontsize="small")
    plt.tight_layout()

    if out_png is not None:
        out_png = Path(out_png)
        _ensure_dir(out_png)
        plt.savefig(out_png, dpi=200)
    plt.close(fig)


def plot_flux_histogram(
    curves: pd.DataFrame,
    *,
    column: str = "model_flux",
    bins: int = 50,
    title: str | None = None,
    out_png: str | Path | None = None,
) -> None:
    """
    Histogram of fluxes pooled over all simulations, with the mean and
    median marked. Useful for checking that a model is normalized to one.
    """
    if column not in curves.columns:
        raise KeyError(f"column='{column}' not found. Available: {sorted(curves.columns)}")
    vals = curves[column].to_numpy(dtype=float)
    if vals.size == 0:
        raise ValueError("No fluxes to plot.")

    fig = plt.figure()
    plt.hist(vals, bins=bins, alpha=0.7)
    plt.axvline(vals.mean(), linestyle="--", linewidth=1, label=f"mean {vals.mean():.3f}")
    plt.axvline(np.median(vals), linestyle=":", linewidth=1, label=f"median {np.median(vals):.3f}")
    plt.xlabel(column)
    plt.ylabel("count")
    plt.title(title or f"Distribution of {column}")
    plt.legend(frameon=False)
    plt.tight_layout()

    if out_png is not None:
        out_png = Path(out_png)
        _ensure_dir(out_png)
        plt.savefig(out_png, dpi=200)
    plt.close(fig)
