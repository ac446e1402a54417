#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gauss_legendre.py — automatic-degree Gauss–Legendre rule with a rigorous tail

CONTRACT (refined rule)
  gl_auto_deg(f, a, b, tol, deg_limit, flags, prec) -> (value, evals)
    evals > 0   value encloses ∫_a^b f and its truncation error is <= tol
    evals == 0  failure; value is None and must not be used

ERROR BOUND (Petras)
  If f is holomorphic inside the Bernstein ellipse E_ρ (foci ±1, semi-axes
  (ρ+1/ρ)/2 and (ρ−1/ρ)/2) mapped onto [a, b] and |f| <= M there, the n-point
  rule on [a, b] = mid + δ·[-1, 1] satisfies

      |E_n| <= |δ| · 64 M / (15 (ρ² − 1) ρ^(2n−2)).

  M comes from ONE order-1 evaluation of f on a box enclosing the mapped
  ellipse; an integrand that is not holomorphic there must return a
  non-finite ball. ρ runs over exact rationals so the constant is bounded
  with upward rounding only.

NODES
  arb.legendre_p_root(n, k, weight=True) gives rigorous nodes and weights;
  they are cached per (n, prec).
"""

from __future__ import annotations

import logging
from fractions import Fraction
from functools import lru_cache
from typing import Any, Callable, Optional, Tuple

from flint import acb, arb

from enclosure import (
    VERBOSE,
    abs_upper,
    add_error,
    evaluate,
    is_finite,
    mag_to_arb,
    workprec,
)
from mag import Mag

logger = logging.getLogger(__name__)

# Decreasing ellipse parameters; a smaller ρ needs a thinner analytic strip.
RHOS = (
    Fraction(64), Fraction(16), Fraction(8), Fraction(4), Fraction(2),
    Fraction(3, 2), Fraction(5, 4), Fraction(9, 8), Fraction(17, 16),
)


@lru_cache(maxsize=256)
def gl_nodes(n: int, prec: int) -> Tuple[Tuple[arb, arb], ...]:
    """Nodes and weights of the n-point rule on [-1, 1] at `prec` bits."""
    with workprec(prec):
        return tuple(arb.legendre_p_root(n, k, weight=True) for k in range(n))


def ellipse_box(rho: Fraction) -> acb:
    """Ball box [-A, A] + i[-B, B] enclosing the Bernstein ellipse E_ρ."""
    p, q = rho.numerator, rho.denominator
    # A = (ρ + 1/ρ)/2 = (p² + q²)/(2pq), B = (ρ − 1/ρ)/2 = (p² − q²)/(2pq)
    semi_a = Mag.from_ratio(p * p + q * q, 2 * p * q)
    semi_b = Mag.from_ratio(p * p - q * q, 2 * p * q)
    return acb(arb(0, mag_to_arb(semi_a)), arb(0, mag_to_arb(semi_b)))


def petras_bound(rho: Fraction, m: Mag, half_width: Mag, n: int) -> Mag:
    """|δ| · 64 M / (15 (ρ² − 1) ρ^(2n−2)) for the n-point rule, rounded up."""
    p, q = rho.numerator, rho.denominator
    factor = Mag.from_ratio(64 * q * q, 15 * (p * p - q * q))
    shrink = Mag.from_ratio(q * q, p * p)
    return factor * m * half_width * shrink ** (n - 1)


def pick_degree(rho: Fraction, m: Mag, half_width: Mag, tol: Mag,
                deg_limit: int) -> Optional[Tuple[int, Mag]]:
    """Smallest n <= deg_limit whose bound meets tol, with that bound."""
    if not m.is_finite():
        return None
    for n in range(1, deg_limit + 1):
        err = petras_bound(rho, m, half_width, n)
        if err <= tol:
            return n, err
    return None


def gl_auto_deg(f: Callable[[acb, int, int], Any], a: acb, b: acb, tol: Mag,
                deg_limit: int, flags: int, prec: int) -> Tuple[Optional[acb], int]:
    with workprec(prec):
        delta = (b - a) * 0.5
        mid = (a + b) * 0.5
        half_width = abs_upper(delta)
        if not half_width.is_finite():
            return None, 0

        evals = 0
        best: Optional[Tuple[int, Mag, Fraction]] = None
        for rho in RHOS:
            fz = evaluate(f, mid + delta * ellipse_box(rho), 1, prec)
            evals += 1
            if not is_finite(fz):
                continue
            pick = pick_degree(rho, abs_upper(fz), half_width, tol, deg_limit)
            if pick is None:
                if best is not None:
                    break
                continue
            n, err = pick
            if best is not None and n >= best[0]:
                break
            best = (n, err, rho)

        if best is None:
            return None, 0

        n, err, rho = best
        s = acb(0)
        for x, w in gl_nodes(n, prec):
            s += w * evaluate(f, mid + delta * x, 0, prec)
        s *= delta
        evals += n

        if not is_finite(s):
            return None, 0

        if flags & VERBOSE:
            logger.debug("gl: n=%d rho=%s err<=%s evals=%d", n, rho, err, evals)

        return acb(add_error(s.real, err), add_error(s.imag, err)), evals
