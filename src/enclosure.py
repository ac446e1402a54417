#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
enclosure.py — python-flint ball helpers shared by the rules and the driver

Balls are python-flint `arb` (real) and `acb` (complex) values. This module adds
the handful of operations the integration code needs on top of them:

  • workprec(prec)         set flint's working precision for a block
  • as_acb(x)              exact conversion of endpoints (int, float, complex,
                           mpf, mpc, arb, acb)
  • radius(z)              hypot of the real/imag radii, as an upward Mag
  • mag_lower(z)           lower bound of |z|, as a downward Mag
  • abs_upper(z)           upper bound of |z|, as an upward Mag
  • widen(z, re, im)       add Mag radii to the real/imag parts
  • is_finite / is_real / contains_zero
  • evaluate(f, z, ...)    call an integrand, checking it returned a ball
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import mpmath as mp
from flint import acb, arb, ctx

from mag import Mag

# flags bit shared by the driver and the refined rules
VERBOSE = 1


@contextmanager
def workprec(prec: Optional[int]) -> Iterator[int]:
    """Run a block at `prec` bits (None keeps the current precision)."""
    saved = ctx.prec
    if prec is not None:
        ctx.prec = int(prec)
    try:
        yield ctx.prec
    finally:
        ctx.prec = saved


# ------------------------------- conversions --------------------------------

def _mpf_to_arb(x: mp.mpf) -> arb:
    if not mp.isfinite(x):
        raise ValueError(f"Non-finite endpoint {x!r}")
    sign, man, exp, _ = x._mpf_
    if not man:
        return arb(0)
    man = -int(man) if sign else int(man)
    return arb(man) * arb(2) ** int(exp)


def as_acb(x: Any) -> acb:
    """Convert a number to an acb; binary inputs are converted exactly."""
    if isinstance(x, acb):
        return x
    if isinstance(x, arb):
        return acb(x)
    if isinstance(x, bool):
        raise TypeError("bool is not a valid endpoint")
    if isinstance(x, (int, float, complex)):
        return acb(x)
    if isinstance(x, mp.mpf):
        return acb(_mpf_to_arb(x))
    if isinstance(x, mp.mpc):
        return acb(_mpf_to_arb(x.real), _mpf_to_arb(x.imag))
    raise TypeError(f"Cannot convert {type(x).__name__} to acb")


def _exact_to_mag(x: arb, *, lower: bool = False) -> Mag:
    # x must be an exact (zero-radius) arb
    if not x.is_finite():
        return Mag.zero() if lower else Mag.inf()
    man, exp = x.man_exp()
    return Mag.from_man_exp(int(man), int(exp), lower=lower)


def mag_to_arb(m: Mag) -> arb:
    """Exact arb holding the value of m (inf maps to an infinite arb)."""
    if not m.is_finite():
        return arb(float("inf"))
    man, exp = m.man_exp()
    if man == 0:
        return arb(0)
    return arb(man) * arb(2) ** exp


# ------------------------------- magnitudes ---------------------------------

def rad_mag(x: arb) -> Mag:
    return _exact_to_mag(x.rad())


def radius(z: acb) -> Mag:
    """Combined error radius hypot(rad(re z), rad(im z))."""
    return rad_mag(z.real).hypot(rad_mag(z.imag))


def abs_upper(z: Any) -> Mag:
    a = abs(z)
    if not a.is_finite():
        return Mag.inf()
    return _exact_to_mag(a.upper())


def mag_lower(z: Any) -> Mag:
    """Lower bound for |z|; zero when the ball touches the origin."""
    a = abs(z)
    if not a.is_finite():
        return Mag.zero()
    lo = a.lower()
    if lo <= 0:
        return Mag.zero()
    return _exact_to_mag(lo, lower=True)


# ------------------------------- predicates ---------------------------------

def is_finite(z: acb) -> bool:
    return z.real.is_finite() and z.imag.is_finite()


def is_real(z: acb) -> bool:
    """True when the imaginary part is exactly zero (midpoint and radius)."""
    return z.imag.is_zero()


def contains_zero(z: acb) -> bool:
    return z.real.contains(0) and z.imag.contains(0)


# ------------------------------- construction -------------------------------

def add_error(x: arb, m: Mag) -> arb:
    if m.is_zero():
        return x
    return x + arb(0, mag_to_arb(m))


def widen(z: acb, re: Mag, im: Mag) -> acb:
    """Inflate the real and imaginary radii of z by re and im."""
    return acb(add_error(z.real, re), add_error(z.imag, im))


def indeterminate() -> acb:
    """A ball that is not finite; integrands return it where they are undefined."""
    nan = arb(0, float("inf"))
    return acb(nan, nan)


def evaluate(f: Callable[[acb, int, int], Any], z: acb, order: int, prec: int) -> acb:
    """Call an integrand f(z, order, prec) and insist on a ball back."""
    y = f(z, order, prec)
    if isinstance(y, acb):
        return y
    if isinstance(y, (arb, int, float, complex)) and not isinstance(y, bool):
        return acb(y)
    raise TypeError(f"Integrand returned {type(y).__name__}, expected acb")
