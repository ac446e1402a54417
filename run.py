#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
run.py — case runner for ballquad (single dict; cached JSON per case)

Usage:
  python run.py <case_name> [--force]
  python run.py all [--force]
"""

from __future__ import annotations
import subprocess, sys
from pathlib import Path
from typing import Any, Dict, List

ROOT = Path(__file__).resolve().parent
SRC  = ROOT / "src"
OUT  = ROOT / "outputs"

# ------------------------------- CONFIG -------------------------------

CONFIG: Dict[str, Any] = {
  "cases": {
    # ---- end-to-end checks with closed forms ----
    "identity": {
      "args": {"--integrand": "identity", "--a": "0", "--b": "1", "--goal": "10"},
      "expect": {"real": "1/2", "radius_below_bits": 10}
    },
    "reciprocal": {
      "args": {"--integrand": "reciprocal", "--a": "1", "--b": "2", "--goal": "20"},
      "expect": {"real": "log2", "radius_below_bits": 20}
    },

    # ---- smooth integrands at higher accuracy ----
    "exp": {
      "args": {"--integrand": "exp", "--a": "0", "--b": "1", "--goal": "53", "--prec": "80"},
      "expect": {"radius_below_bits": 50}
    },
    "gauss": {
      "args": {"--integrand": "gauss", "--a": "-3", "--b": "3", "--goal": "40"}
    },
    "runge": {
      "args": {"--integrand": "runge", "--a": "-1", "--b": "1", "--goal": "40"}
    },

    # ---- complex segment ----
    "sin_complex": {
      "args": {"--integrand": "sin", "--a": "0", "--b": "1", "--b-imag": "1", "--goal": "30"}
    },

    # ---- branch point at the left endpoint ----
    "sqrt": {
      "args": {"--integrand": "sqrt", "--a": "0", "--b": "1", "--goal": "20"}
    },

    # ---- not holomorphic: bisection only, ends on a budget ----
    "abs_sin_budget": {
      "args": {"--integrand": "abs_sin", "--a": "0", "--b": "10", "--goal": "20",
               "--eval-limit": "200"}
    },
  }
}

# ----------------------------- helpers (generic) -----------------------------

def jpath(case: str) -> Path:
    return OUT / f"{case}.json"

def exists(p: Path) -> bool:
    try:
        return p.is_file() and p.stat().st_size > 0
    except OSError:
        return False

def run_cmd(cmd: list[str]) -> None:
    print(" ".join(cmd))
    subprocess.run(cmd, check=True)

def build_args(case: str) -> List[str]:
    spec = CONFIG["cases"].get(case)
    if spec is None:
        raise SystemExit(f"[run.py] Unknown case '{case}'. Add it under CONFIG['cases'].")
    argv: List[str] = []
    for flag, val in spec.get("args", {}).items():
        if val is None or val == "":
            raise SystemExit(f"[run.py] Missing CLI value for {flag} in {case}.")
        argv += [flag, str(val)]
    argv += ["--reference", "--case", case, "--json-out", str(jpath(case))]
    return argv

def ensure_ran(case: str, force: bool) -> None:
    pj = jpath(case)
    argv = build_args(case)
    if exists(pj) and not force:
        print(f"[run.py] {case}: using cached {pj} (use --force to re-run)")
        return
    OUT.mkdir(exist_ok=True, parents=True)
    cmd = [sys.executable, str(SRC / "ballquad.py"), *argv]
    run_cmd(cmd)
    if not exists(pj):
        raise SystemExit(f"[run.py] '{case}' ran but did not write its JSON: {pj}")
    print(f"[run.py] wrote {pj}")

# --------------------------------- main ---------------------------------

def main(argv: List[str]) -> int:
    if len(argv) not in (1, 2) or (len(argv) == 2 and argv[1] != "--force"):
        print("Usage: python run.py <case_name|all> [--force]")
        return 2
    target = argv[0]
    force = len(argv) == 2
    targets = sorted(CONFIG["cases"]) if target == "all" else [target]
    for case in targets:
        ensure_ran(case, force=force)
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
