#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ballquad.py — certified ∫_a^b f(z) dz for a named integrand (CLI only)

ETHOS
  • Consumes ONLY CLI flags (provided by hand or by run.py).
  • Endpoints are "p/q" or decimal strings, rounded once to exact binary
    values at --prec bits; everything after that is ball arithmetic.
  • Deterministic JSON written to outputs/<case>.json (or --json-out).

WHAT THIS CERTIFIES
  A complex ball [mid ± rad] that provably contains the integral along the
  straight segment from a to b. Limits never make the run fail; they only make
  the ball wider (see stats.stop_reason).

INPUTS
  --integrand NAME   one of integrands.INTEGRANDS
  --a, --b           real parts of the endpoints
  --a-imag, --b-imag imaginary parts (default 0)
  --goal BITS        relative accuracy goal
  --tol X            absolute tolerance floor (default 0)
  --prec BITS        working precision (default 64)
  --deg-limit / --eval-limit / --depth-limit   0 = defaults
  --reference        also compute an mpmath (non-rigorous) reference value

OUTPUT
  outputs/<case>.json with inputs echoed, outputs.integral as a ball,
  outputs.reference (optional), stats, status.

Usage:
  python src/ballquad.py --integrand reciprocal --a 1 --b 2 --goal 20 --reference
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

import mpmath as mp

import integrands
from enclosure import as_acb, contains_zero, workprec
from integrate import VERBOSE, QuadStats, integrate
from mag import Mag
from quad_utils import (
    ParsedNumber,
    ball_json,
    configure_logging,
    console_show,
    default_json_out,
    ensure_finite,
    ledger_header,
    mag_json,
    make_meta,
    parse_number,
    write_json,
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Certified adaptive integration of a named integrand (ball arithmetic)."
    )
    ap.add_argument("--integrand", required=True, choices=sorted(integrands.INTEGRANDS),
                    help="Integrand name.")
    ap.add_argument("--a", required=True, type=str, help='Lower endpoint, real part ("p/q" or decimal).')
    ap.add_argument("--b", required=True, type=str, help='Upper endpoint, real part ("p/q" or decimal).')
    ap.add_argument("--a-imag", default="0", type=str, help="Lower endpoint, imaginary part.")
    ap.add_argument("--b-imag", default="0", type=str, help="Upper endpoint, imaginary part.")
    ap.add_argument("--goal", type=int, default=53, help="Relative accuracy goal in bits.")
    ap.add_argument("--tol", type=str, default="0", help="Absolute tolerance floor.")
    ap.add_argument("--prec", type=int, default=64, help="Working precision in bits.")
    ap.add_argument("--deg-limit", type=int, default=0, help="Max Gauss-Legendre degree (0 = 0.5*goal+10).")
    ap.add_argument("--eval-limit", type=int, default=0, help="Max evaluations (0 = 1000*prec).")
    ap.add_argument("--depth-limit", type=int, default=0, help="Max stack depth (0 = 2*prec).")
    ap.add_argument("--verbose", action="store_true", help="Log stopping conditions and a summary.")
    ap.add_argument("--reference", action="store_true", help="Also compute an mpmath reference value.")
    ap.add_argument("--case", type=str, default=None, help="Case name for the default JSON path.")
    ap.add_argument("--json-out", type=str, default=None, help="JSON output path.")
    return ap


def run_case(args: argparse.Namespace) -> Dict[str, Any]:
    """Parse, integrate, and assemble the JSON payload for one case."""
    if args.prec < 2:
        raise SystemExit(f"[ballquad] --prec must be >= 2, got {args.prec}")

    with mp.workprec(args.prec):
        try:
            nums: Dict[str, ParsedNumber] = {
                "a": parse_number(args.a), "a_imag": parse_number(args.a_imag),
                "b": parse_number(args.b), "b_imag": parse_number(args.b_imag),
                "tol": parse_number(args.tol),
            }
        except ValueError as e:
            raise SystemExit(f"[ballquad] {e}") from e
        ensure_finite((k, v.float) for k, v in nums.items())
        a = mp.mpc(nums["a"].float, nums["a_imag"].float)
        b = mp.mpc(nums["b"].float, nums["b_imag"].float)
        if nums["tol"].float < 0:
            raise SystemExit("[ballquad] --tol must be non-negative")
        tol = Mag(nums["tol"].float)

    spec = integrands.get(args.integrand)
    stats = QuadStats()
    flags = VERBOSE if args.verbose else 0

    with workprec(args.prec):
        a_ball, b_ball = as_acb(a), as_acb(b)
        result = integrate(spec.ball, a_ball, b_ball, goal=args.goal, tol=tol,
                           deg_limit=args.deg_limit, eval_limit=args.eval_limit,
                           depth_limit=args.depth_limit, flags=flags, prec=args.prec,
                           stats=stats)

    ledger_header(f"∫ {spec.desc} over [{mp.nstr(a, 12)}, {mp.nstr(b, 12)}]")
    console_show("integral", result)
    console_show("radius", ball_json(result)["radius"])
    console_show("evals", f"{stats.evals}/{stats.eval_limit}")
    console_show("depth", f"{stats.depth_max}/{stats.depth_limit}")
    if stats.stop_reason:
        console_show("stopped", stats.stop_reason)

    outputs: Dict[str, Any] = {
        "integral": {**ball_json(result), "desc": f"Certified enclosure of ∫ {spec.desc}."},
    }

    if args.reference:
        with mp.workprec(args.prec + 20):
            ref = integrands.reference(args.integrand, a, b)
        with workprec(args.prec + 20):
            inside = contains_zero(result - as_acb(ref))
        console_show("reference", ref)
        console_show("contains", inside)
        outputs["reference"] = {
            "decimal": {"real": mp.nstr(mp.re(ref), 40), "imag": mp.nstr(mp.im(ref), 40)},
            "contained": bool(inside),
            "desc": "mpmath quadrature (non-rigorous), for comparison only.",
        }
    print()

    return {
        "meta": make_meta(__file__, description="Certified adaptive integration (ball arithmetic)."),
        "inputs": {
            "integrand": args.integrand,
            "a": {"real": nums["a"].raw, "imag": nums["a_imag"].raw},
            "b": {"real": nums["b"].raw, "imag": nums["b_imag"].raw},
            "goal": int(args.goal),
            "tol": nums["tol"].raw,
            "prec": int(args.prec),
            "deg_limit": int(args.deg_limit),
            "eval_limit": int(args.eval_limit),
            "depth_limit": int(args.depth_limit),
        },
        "outputs": outputs,
        "stats": {
            "evals": stats.evals,
            "eval_limit": stats.eval_limit,
            "depth_max": stats.depth_max,
            "depth_limit": stats.depth_limit,
            "refined": stats.refined,
            "splits": stats.splits,
            "stop_reason": stats.stop_reason,
            "tolerance": mag_json(stats.tolerance),
        },
        "status": {"ok": True},
    }


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    out = run_case(args)

    out_path: Path = default_json_out(args.json_out, __file__, stem=args.case)
    write_json(out_path, out)
    print(f"Wrote JSON results to: {out_path}")


if __name__ == "__main__":
    main()
