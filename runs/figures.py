from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lcmc.plots import plot_flux_histogram, plot_light_curves
from runs.io import ensure_dir, load_csv, load_json
from runs.paths import FIG_ROOT


def make(artifact_dir: Path, out_root: Optional[Path] = None) -> List[Path]:
    """Figures for one run directory written by runs.simulate."""
    artifact_dir = Path(artifact_dir)
    run_id = artifact_dir.name
    spec = load_json(artifact_dir / "spec.json")["sim_spec"]

    out_dir = Path(out_root or FIG_ROOT) / spec["name"] / run_id
    ensure_dir(out_dir)

    curves = load_csv(artifact_dir / "curves.csv")

    lc_png = out_dir / "light_curves.png"
    plot_light_curves(curves, title=f"{spec['curve']} ({spec['name']})", out_png=lc_png)

    hist_png = out_dir / "model_flux_hist.png"
    plot_flux_histogram(curves, title=f"{spec['curve']}: model fluxes", out_png=hist_png)
    return [lc_png, hist_png]


if __name__ == "__main__":
    import argparse
    ap = argparse.ArgumentParser()
    ap.add_argument("--artifact_dir", required=True)
    ap.add_argument("--out", type=Path, default=None)
    args = ap.parse_args()
    for p in make(Path(args.artifact_dir), out_root=args.out):
        print(p)
