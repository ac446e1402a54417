#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
integrands.py — named ball integrands for the CLI, the batch runner and tests

Each entry pairs a ball evaluator f(z, order, prec) -> acb with the same
function written for mpmath, which is only used for (non-rigorous) reference
values printed next to the certified result.

order >= 1 asks the evaluator to certify holomorphy on z: functions with a
branch cut return a non-finite ball when z touches the cut, and `abs_sin`
(not holomorphic anywhere off the real line) always does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict

import mpmath as mp
from flint import acb

from enclosure import indeterminate

BallFunction = Callable[[acb, int, int], acb]


def plain(fn: Callable[[acb], acb]) -> BallFunction:
    """Adapt a one-argument ball function (entire or meromorphic) to f(z, order, prec)."""
    def f(z: acb, order: int, prec: int) -> acb:
        return fn(z)
    f.__name__ = getattr(fn, "__name__", "integrand")
    return f


def _touches_negative_axis(z: acb) -> bool:
    # principal branch cut (-inf, 0]
    return z.imag.contains(0) and not (z.real > 0)


def _sqrt(z: acb, order: int, prec: int) -> acb:
    if order >= 1 and _touches_negative_axis(z):
        return indeterminate()
    return z.sqrt()


def _log(z: acb, order: int, prec: int) -> acb:
    if order >= 1 and _touches_negative_axis(z):
        return indeterminate()
    return z.log()


def _abs_sin(z: acb, order: int, prec: int) -> acb:
    if order >= 1:
        return indeterminate()
    return acb(abs(z.sin()))


@dataclass(frozen=True)
class Integrand:
    name: str
    ball: BallFunction
    point: Callable[[Any], Any]
    desc: str


INTEGRANDS: Dict[str, Integrand] = {
    "constant": Integrand("constant", plain(lambda z: acb(1)), lambda x: mp.mpf(1), "f(z) = 1"),
    "identity": Integrand("identity", plain(lambda z: z), lambda x: x, "f(z) = z"),
    "reciprocal": Integrand("reciprocal", plain(lambda z: 1 / z), lambda x: 1 / x, "f(z) = 1/z"),
    "exp": Integrand("exp", plain(lambda z: z.exp()), mp.exp, "f(z) = exp(z)"),
    "sin": Integrand("sin", plain(lambda z: z.sin()), mp.sin, "f(z) = sin(z)"),
    "gauss": Integrand("gauss", plain(lambda z: (-z * z).exp()),
                       lambda x: mp.exp(-x * x), "f(z) = exp(-z^2)"),
    "runge": Integrand("runge", plain(lambda z: 1 / (1 + 25 * z * z)),
                       lambda x: 1 / (1 + 25 * x * x), "f(z) = 1/(1 + 25 z^2)"),
    "sqrt": Integrand("sqrt", _sqrt, mp.sqrt, "f(z) = sqrt(z), principal branch"),
    "log": Integrand("log", _log, mp.log, "f(z) = log(z), principal branch"),
    "abs_sin": Integrand("abs_sin", _abs_sin, lambda x: abs(mp.sin(x)),
                         "f(x) = |sin x| on real segments (not holomorphic)"),
}


def get(name: str) -> Integrand:
    try:
        return INTEGRANDS[name]
    except KeyError:
        raise ValueError(f"Unknown integrand {name!r}; choose from {sorted(INTEGRANDS)}") from None


def reference(name: str, a: Any, b: Any) -> Any:
    """mpmath value of the integral along [a, b] (at the current mp precision)."""
    point = get(name).point
    if name == "abs_sin":
        # kinks at multiples of pi
        lo, hi = sorted((mp.re(a), mp.re(b)))
        cuts = [lo] + [k * mp.pi for k in range(int(mp.ceil(lo / mp.pi)), int(mp.floor(hi / mp.pi)) + 1)
                       if lo < k * mp.pi < hi] + [hi]
        total = mp.fsum(mp.quad(point, [u, v]) for u, v in zip(cuts[:-1], cuts[1:]))
        return total if mp.re(a) <= mp.re(b) else -total
    return mp.quad(point, [a, b])
