#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
quad_utils.py — shared CLI/number/JSON helpers for the ballquad scripts

ETHOS
  • Scripts consume ONLY CLI flags. No JSON file reads inside helpers.
  • No Python floats for endpoints: "p/q" and decimal strings go through
    mp.mpf / Fraction and become exact binary balls at the working precision.
  • Balls are reported as strings (midpoint, radius) so JSON never rounds them.

WHAT THIS PROVIDES
  Parsing & Numbers
    - parse_number("1/3")  -> ParsedNumber(raw="1/3", rational="1/3", float=mpf, ...)
    - parse_number("0.25") -> ParsedNumber(raw="0.25", rational=None,  float=mpf, ...)
    - parse_endpoint("1", "0") -> mp.mpc(1, 0)

  JSON I/O (write only) & Meta
    - default_json_out(args.json_out, __file__, stem="reciprocal")
    - write_json(path, payload)
    - make_meta(__file__, description="...")
    - ball_json(acb) / mag_json(Mag)

  Console Ledger & Logging
    - ledger_header("Title")
    - console_show("integral", acb)
    - configure_logging(verbose)
"""

from __future__ import annotations

import json
import logging
import os
import platform
import sys
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import mpmath as mp
from flint import acb, arb

from enclosure import radius
from mag import Mag

LOG_FORMAT = "%(asctime)s - %(name)s - %(message)s"
LOG_ENV = "BALLQUAD_LOGGING"

# ------------------------------- data classes --------------------------------

@dataclass(frozen=True)
class ParsedNumber:
    """Uniform representation of a CLI-provided scalar (no Python floats)."""
    raw: str                 # original CLI string as passed on CLI
    rational: Optional[str]  # "p/q" if provided, else None
    float: mp.mpf            # mpmath value at the current precision
    fraction: Optional[Fraction]  # Fraction if rational is not None, else None

# ------------------------------- num parsing ---------------------------------

def parse_rat_or_float(s: str) -> Tuple[Optional[str], mp.mpf]:
    """
    Accept 'p/q' or a decimal-like string; return (rational_str_or_None, mpf_value).
    The mpf is rounded once, at the current mp precision.
    """
    t = str(s).strip()
    if "/" in t:
        fr = Fraction(t)  # exact rational
        val = mp.mpf(fr.numerator) / mp.mpf(fr.denominator)  # no float round-trip
        return f"{fr.numerator}/{fr.denominator}", val
    return None, mp.mpf(t)

def parse_number(s: str) -> ParsedNumber:
    """Parse a CLI scalar into (raw, rational tag, mpf)."""
    try:
        rat, mpv = parse_rat_or_float(s)
    except (ValueError, ZeroDivisionError) as e:
        raise ValueError(f"Cannot parse number {s!r}") from e
    if not mp.isfinite(mpv):
        raise ValueError(f"Non-finite value after parsing {s!r}")
    fr = Fraction(rat) if rat else None
    return ParsedNumber(raw=s, rational=rat, float=mpv, fraction=fr)

def parse_endpoint(re_s: str, im_s: str = "0") -> mp.mpc:
    """Complex endpoint from separate real/imaginary CLI strings."""
    return mp.mpc(parse_number(re_s).float, parse_number(im_s).float)

# ----------------------------- formatting helpers ----------------------------

def arb_json(x: arb, digits: int = 40) -> Dict[str, str]:
    return {
        "mid": x.mid().str(digits, radius=False),
        "rad": x.rad().str(5, radius=False),
    }

def mag_json(m: Mag) -> str:
    return str(m) if m.is_finite() else "inf"

def ball_json(z: acb, digits: int = 40) -> Dict[str, Any]:
    """Serializable view of a complex ball: parts as (mid, rad) strings."""
    return {
        "real": arb_json(z.real, digits),
        "imag": arb_json(z.imag, digits),
        "radius": mag_json(radius(z)),
        "str": z.str(digits),
    }

# ------------------------------ JSON utilities -------------------------------

def default_json_out(arg: Optional[str], script_file: str, stem: Optional[str] = None) -> Path:
    """
    Compute the output JSON path following the project convention:
      - if arg is provided, use it (create parent dirs)
      - else write to outputs/<stem or script_basename>.json
    """
    if arg:
        p = Path(arg)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    outdir = Path("outputs")
    outdir.mkdir(parents=True, exist_ok=True)
    name = stem or Path(script_file).stem
    return outdir / f"{name}.json"

def write_json(path: Path | str, payload: Dict[str, Any]) -> None:
    """
    Deterministically write JSON (sorted keys, 2-space indent).
    (Callers pass balls through ball_json so no float rounding sneaks in.)
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

def make_meta(script_file: str, *, description: Optional[str] = None) -> Dict[str, Any]:
    """
    Standard meta block with script name, runtime, and optional description.
    """
    return {
        "schema_version": "1.0",
        "script": Path(script_file).name,
        "run_env": {"python": sys.version.split()[0], "platform": platform.platform()},
        **({"description": description} if description else {}),
    }

# ----------------------------- console formatting ----------------------------

def ledger_header(title: str) -> None:
    print(f"\n=== {title} ===")

def console_show(name: str, value: Any, width: int = 12, digits: int = 24) -> None:
    """Pretty console line: right-aligned name, then the ball or scalar."""
    if isinstance(value, (acb, arb)):
        v_str = value.str(digits)
    elif isinstance(value, Mag):
        v_str = str(value)
    elif isinstance(value, (mp.mpf, mp.mpc)):
        v_str = mp.nstr(value, digits)
    else:
        v_str = str(value)
    print(f"{name:>{width}} : {v_str}")

# --------------------------------- logging -----------------------------------

def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Root logger to stderr. Level from $BALLQUAD_LOGGING (default INFO);
    DEBUG when verbose and the environment does not say otherwise.
    """
    default = "DEBUG" if verbose else "INFO"
    level = getattr(logging, os.environ.get(LOG_ENV, default).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root

# ------------------------------ validations ----------------------------------

def ensure_finite(name_value_pairs: Iterable[Tuple[str, Any]]) -> None:
    """
    Assert all values are finite mpf/mpc; raise ValueError otherwise.
    """
    for name, v in name_value_pairs:
        if isinstance(v, float):
            raise TypeError(f"Python float is not allowed for {name}. Use mp.mpf instead.")
        if not mp.isfinite(v):
            raise ValueError(f"Non-finite value for {name}: {v!r}")
