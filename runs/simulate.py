# runs/simulate.py
from __future__ import annotations

import argparse
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from lcmc.base_cases import BASE_CASE
from lcmc.registry import known_light_curves, required_params
from lcmc.sim_specs import NoiseSpec, ParamRange, SimSpec
from lcmc.simulation import SimResult, make_inject_noise, run_simulations

from runs.io import (
    CURVE_COLUMNS,
    ensure_dir,
    load_light_curve,
    load_times,
    rows_to_csv,
    save_curves,
    save_json,
)
from runs.meta import make_run_id, run_manifest, spec_to_jsonable
from runs.paths import ARTIFACT_ROOT


@dataclass(frozen=True)
class SimRunResult:
    run_id: str
    artifact_dir: Path
    curves_csv: Path
    params_csv: Path
    meta_json: Path
    spec_json: Path


def results_to_frames(results: Sequence[SimResult]) -> tuple[pd.DataFrame, List[Dict[str, Any]]]:
    """
    Long-format light curves (sim, time, model_flux, flux) and one row of
    drawn parameters per simulation.
    """
    curves = [
        pd.DataFrame(
            {
                "sim": r.sim,
                "time": r.times,
                "model_flux": r.model_fluxes,
                "flux": r.fluxes,
            }
        )
        for r in results
    ]
    curves_df = (
        pd.concat(curves, ignore_index=True)
        if curves
        else pd.DataFrame(columns=list(CURVE_COLUMNS))
    )
    param_rows = [{"sim": r.sim, "curve": r.curve, **r.params} for r in results]
    return curves_df, param_rows


def run_spec(spec: SimSpec, times: np.ndarray, tag: str = "main",
             out_root: Optional[Path] = None,
             base_noise: Optional[np.ndarray] = None,
             injected_from: Optional[Path] = None) -> SimRunResult:
    """
    Simulate ``spec`` at ``times`` and write the run artifacts.

    With ``base_noise`` (see make_inject_noise) the simulated signals are
    injected into that fixed noise instead of white noise.
    """
    if spec.n_sims < 1:
        raise ValueError("Nothing to simulate: n_sims must be at least 1.")
    times = np.asarray(times, dtype=float).reshape(-1)

    run_id = make_run_id(spec.name, tag)
    artifact_dir = Path(out_root or ARTIFACT_ROOT) / spec.name / run_id
    ensure_dir(artifact_dir)

    results = run_simulations(spec, times, base_noise=base_noise)
    curves_df, param_rows = results_to_frames(results)

    curves_csv = artifact_dir / "curves.csv"
    params_csv = artifact_dir / "params.csv"
    meta_json = artifact_dir / "meta.json"
    spec_json = artifact_dir / "spec.json"

    save_curves(curves_df, curves_csv)
    rows_to_csv(param_rows, params_csv)

    save_json(spec_json, {"sim_spec": spec_to_jsonable(spec), "n_times": int(times.size)})
    save_json(
        meta_json,
        run_manifest(
            spec,
            run_id=run_id,
            tag=tag,
            artifact_dir=artifact_dir,
            n_times=times.size,
            injected_from=injected_from,
        ),
    )

    return SimRunResult(
        run_id=run_id,
        artifact_dir=artifact_dir,
        curves_csv=curves_csv,
        params_csv=params_csv,
        meta_json=meta_json,
        spec_json=spec_json,
    )


def _parse_range(text: str) -> tuple[str, ParamRange]:
    """
    KEY=VALUE, KEY=LOW:HIGH or KEY=LOW:HIGH:log
    """
    try:
        key, value = text.split("=", 1)
        parts = value.split(":")
        if len(parts) == 1:
            return key, ParamRange.fixed(float(parts[0]))
        if len(parts) == 2:
            return key, ParamRange(float(parts[0]), float(parts[1]))
        if len(parts) == 3 and parts[2] == "log":
            return key, ParamRange(float(parts[0]), float(parts[1]), dist="loguniform")
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Bad parameter range '{text}': {e}") from e
    raise argparse.ArgumentTypeError(
        f"Bad parameter range '{text}'; use KEY=VALUE, KEY=LOW:HIGH or KEY=LOW:HIGH:log"
    )


def build_spec(args: argparse.Namespace) -> SimSpec:
    if args.curve is None:
        spec = BASE_CASE
    else:
        spec = SimSpec(name=args.curve, curve=args.curve, ranges=dict(args.param))
    overrides: Dict[str, Any] = {}
    if args.curve is None and args.param:
        overrides["ranges"] = {**spec.ranges, **dict(args.param)}
    if args.n_sims is not None:
        overrides["n_sims"] = args.n_sims
    if args.seed is not None:
        overrides["master_seed"] = args.seed
    if args.noise is not None:
        overrides["noise"] = NoiseSpec(sigma=args.noise)
    if args.name is not None:
        overrides["name"] = args.name
    return replace(spec, **overrides) if overrides else spec


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Simulate Monte Carlo light curves at a given cadence.")
    ap.add_argument("times", type=Path, nargs="?", default=None,
                    help="Text file of observation times (first column).")
    ap.add_argument("--curve", choices=known_light_curves(), default=None,
                    help="Light curve model (default: the base case).")
    ap.add_argument("--param", action="append", type=_parse_range, default=[],
                    metavar="KEY=LOW[:HIGH[:log]]", help="Parameter range; repeat per parameter.")
    ap.add_argument("--n-sims", type=int, default=None, help="Number of simulated light curves.")
    ap.add_argument("--noise", type=float, default=None, help="Gaussian flux noise sigma.")
    ap.add_argument("--inject", type=Path, default=None, metavar="FILE",
                    help="Observed light curve (time, flux) to inject the simulations into; "
                         "replaces both the times file and white noise.")
    ap.add_argument("--seed", type=int, default=None, help="Master seed for the run.")
    ap.add_argument("--name", default=None, help="Spec name used in output paths.")
    ap.add_argument("--tag", default="main", help="Run tag embedded in output paths / metadata.")
    ap.add_argument("--out", type=Path, default=None, help="Artifact root (default: OUTPUT_ROOT/artifacts).")
    ap.add_argument("--list", action="store_true", help="List light curves and their parameters, then exit.")

    args = ap.parse_args(argv)

    if args.list:
        for name in known_light_curves():
            print(f"{name:12s} {', '.join(required_params(name)) or '-'}")
        return
    if args.inject is not None:
        if args.times is not None:
            ap.error("give either a times file or --inject, not both")
        if args.noise is not None:
            ap.error("--noise cannot be combined with --inject")
    elif args.times is None:
        ap.error("the times file is required unless --list or --inject is given")

    try:
        spec = build_spec(args)
    except ValueError as e:
        ap.error(str(e))

    base_noise = None
    source = f"seed {spec.master_seed}"
    if args.inject is not None:
        times, base_noise = make_inject_noise(*load_light_curve(args.inject))
        source += f", injected into {args.inject.name}"
    else:
        times = load_times(args.times)

    print(f"[{spec.name}] {spec.n_sims} x {spec.curve} on {times.size} times ({source})")
    res = run_spec(spec, times, tag=args.tag, out_root=args.out,
                   base_noise=base_noise, injected_from=args.inject)
    print(f"[{spec.name}] Artifacts: {res.artifact_dir}")


if __name__ == "__main__":
    main()
