# runs/meta.py
from __future__ import annotations

import datetime
import platform
import subprocess
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import numpy as np
import scipy

from runs.paths import REPO_ROOT


def utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat()


def git_info(repo: Path = REPO_ROOT) -> Dict[str, Any]:
    """Commit hash and dirty flag of ``repo``; both None outside a git checkout."""
    def git(*cmd: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git", *cmd], cwd=repo, capture_output=True, text=True, check=True
        )

    try:
        commit = git("rev-parse", "HEAD").stdout.strip()
        dirty = bool(git("status", "--porcelain", "--untracked-files=no").stdout.strip())
    except (OSError, subprocess.CalledProcessError):
        return {"hash": None, "dirty": None}
    return {"hash": commit, "dirty": dirty}


def make_run_id(name: str, tag: str) -> str:
    short = (git_info()["hash"] or "nogit")[:8]
    ts = utc_now_iso().replace(":", "-")
    return f"{ts}_{short}_{name}_{tag}"


def environment_info() -> Dict[str, str]:
    """Interpreter and numeric library versions; seeds only reproduce within these."""
    return {
        "python": platform.python_version(),
        "numpy": np.__version__,
        "scipy": scipy.__version__,
    }


def spec_to_jsonable(spec: Any) -> Any:
    """
    JSON-safe dump of SimSpec-like objects: nested dataclasses, mappings,
    sequences and numpy scalars/arrays.
    """
    def conv(x: Any) -> Any:
        if is_dataclass(x) and not isinstance(x, type):
            return {k: conv(v) for k, v in asdict(x).items()}
        if isinstance(x, Mapping):
            return {str(k): conv(v) for k, v in x.items()}
        if isinstance(x, (list, tuple)):
            return [conv(v) for v in x]
        if isinstance(x, np.ndarray):
            return x.tolist()
        if isinstance(x, np.generic):
            return x.item()
        return x

    return conv(spec)


def run_manifest(
    spec: Any,
    *,
    run_id: str,
    tag: str,
    artifact_dir: Path,
    n_times: int,
    injected_from: Optional[Path] = None,
) -> Dict[str, Any]:
    return {
        "run_id": run_id,
        "tag": tag,
        "timestamp_utc": utc_now_iso(),
        "git": git_info(),
        "environment": environment_info(),
        "curve": spec.curve,
        "master_seed": int(spec.master_seed),
        "n_sims": int(spec.n_sims),
        "n_times": int(n_times),
        "artifact_dir": str(artifact_dir),
        # observed light curve used as noise, None for white noise
        "injected_from": None if injected_from is None else str(injected_from),
    }
