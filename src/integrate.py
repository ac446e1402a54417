#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
integrate.py — rigorous adaptive integration of a ball-valued integrand

WHAT THIS COMPUTES
  An acb ball guaranteed to contain ∫_a^b f(z) dz along the straight segment
  from a to b, given an evaluator f(z, order, prec) returning balls that contain
  every value of the integrand over the input ball z.

ALGORITHM (explicit stack, no native recursion)
  • Seed the stack with [a, b] and its trivial estimate (one evaluation).
  • Look at the top sub-interval X:
      - evaluation budget nearly spent      → stopping
      - radius(X) < tol, or zero width,
        or stopping                         → add X to the sum, pop
      - X finite and the refined rule
        meets tol                           → add the refined value, pop
      - depth budget nearly spent           → stopping (X is forced next pass)
      - otherwise                           → bisect, larger-error half on top
  • The absolute tolerance only grows: max(tol, |partial| · 2^-goal) for every
    new partial result.

  Hitting a limit never raises; the returned ball stays valid, just wider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Tuple

from flint import acb, arb, ctx

from enclosure import (
    VERBOSE,
    abs_upper,
    as_acb,
    contains_zero,
    evaluate,
    is_finite,
    is_real,
    mag_lower,
    radius,
    widen,
    workprec,
)
from gauss_legendre import gl_auto_deg
from mag import Mag

logger = logging.getLogger(__name__)

Integrand = Callable[[acb, int, int], acb]


class RefinedRule(Protocol):
    """Oracle contract: (value, evals) with evals <= 0 meaning failure."""

    def __call__(self, f: Integrand, a: acb, b: acb, tol: Mag,
                 deg_limit: int, flags: int, prec: int) -> Tuple[Optional[acb], int]: ...


# ------------------------------- trivial rule -------------------------------

def quad_simple(f: Integrand, a: acb, b: acb, prec: int) -> acb:
    """
    Enclosure of ∫_a^b f from a single evaluation on a ball covering [a, b]:
    (b - a) · f(mid ± |delta|) with mid = (a+b)/2, delta = (b-a)/2.
    """
    delta = (b - a) * 0.5
    if delta.is_zero():
        # zero width: the integrand is never evaluated
        return acb(0)
    mid = (a + b) * 0.5
    wide = widen(mid, abs_upper(delta.real), abs_upper(delta.imag))
    y = evaluate(f, wide, 0, prec)
    return y * delta * 2


# --------------------------------- options ----------------------------------

@dataclass(frozen=True)
class QuadOptions:
    """Effective limits after defaults and clamps are applied."""

    goal: int
    tol: Mag
    deg_limit: int
    eval_limit: int
    depth_limit: int
    flags: int
    prec: int

    @classmethod
    def resolve(cls, *, goal: int = 0, tol: Any = 0, deg_limit: int = 0,
                eval_limit: int = 0, depth_limit: int = 0, flags: int = 0,
                prec: int) -> "QuadOptions":
        for name, v in (("goal", goal), ("deg_limit", deg_limit), ("eval_limit", eval_limit),
                        ("depth_limit", depth_limit), ("flags", flags), ("prec", prec)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int, got {type(v).__name__}")
        if prec < 2:
            raise ValueError(f"prec must be at least 2 bits, got {prec}")
        try:
            tol = tol if isinstance(tol, Mag) else Mag(tol)
        except ValueError as e:
            raise ValueError(f"tol must be a non-negative magnitude, got {tol!r}") from e

        if depth_limit <= 0:
            depth_limit = 2 * prec
        depth_limit = max(depth_limit, 1)

        if eval_limit <= 0:
            eval_limit = 1000 * prec
        eval_limit = max(eval_limit, 1)

        goal = max(goal, 0)
        if deg_limit <= 0:
            deg_limit = int(0.5 * goal + 10)

        return cls(goal=goal, tol=tol, deg_limit=deg_limit, eval_limit=eval_limit,
                   depth_limit=depth_limit, flags=flags, prec=prec)

    @property
    def verbose(self) -> bool:
        return bool(self.flags & VERBOSE)


@dataclass
class QuadStats:
    """What one run spent; filled in place by the driver."""

    evals: int = 0
    depth_max: int = 0
    eval_limit: int = 0
    depth_limit: int = 0
    stop_reason: Optional[str] = None
    refined: int = 0
    splits: int = 0
    tolerance: Mag = field(default_factory=Mag.zero)


@dataclass
class SubInterval:
    lower: acb
    upper: acb
    estimate: acb

    def is_degenerate(self) -> bool:
        return contains_zero(self.upper - self.lower)


# --------------------------------- driver -----------------------------------

class AdaptiveIntegrator:
    """
    Explicit-stack bisection engine. `step()` performs one decision on the top
    sub-interval; `run()` steps until the stack is empty and returns the sum.
    """

    def __init__(self, f: Integrand, a: Any, b: Any, options: QuadOptions,
                 rule: Optional[RefinedRule] = None, stats: Optional[QuadStats] = None):
        if rule is None:
            rule = gl_auto_deg
        self.f = f
        self.options = options
        self.rule = rule
        self.stats = stats if stats is not None else QuadStats()
        self.stats.eval_limit = options.eval_limit
        self.stats.depth_limit = options.depth_limit
        self.stopping = False
        self.stack: List[SubInterval] = []

        with workprec(options.prec):
            a, b = as_acb(a), as_acb(b)
            self.total = acb(0)
            seed = SubInterval(a, b, quad_simple(f, a, b, options.prec))
            self.stack.append(seed)
            self.stats.evals = 1
            self.stats.depth_max = 1
            self.tolerance = options.tol
            self._bootstrap(seed.estimate)

    @property
    def depth(self) -> int:
        return len(self.stack)

    @property
    def done(self) -> bool:
        return not self.stack

    def _bootstrap(self, partial: acb) -> None:
        floor = mag_lower(partial).mul_2exp(-self.options.goal)
        self.tolerance = self.tolerance.max(floor)
        self.stats.tolerance = self.tolerance

    def _stop(self, reason: str, limit: int) -> None:
        if self.options.verbose:
            logger.info("stopping at %s %d", reason, limit)
        self.stopping = True
        self.stats.stop_reason = reason

    def _accept(self, value: acb) -> None:
        self.total += value
        self.stack.pop()

    def step(self) -> None:
        if self.done:
            raise RuntimeError("integration already finished")
        opts = self.options
        with workprec(opts.prec):
            if not self.stopping and self.stats.evals >= opts.eval_limit - 1:
                self._stop("eval_limit", opts.eval_limit)
                return

            top = self.stack[-1]
            if self.stopping or radius(top.estimate) < self.tolerance or top.is_degenerate():
                self._accept(top.estimate)
                return

            if is_finite(top.estimate):
                # a trivial estimate with exactly zero imaginary part proves the
                # integral is real
                real_valued = is_real(top.estimate)
                value, feval = self.rule(self.f, top.lower, top.upper, self.tolerance,
                                         opts.deg_limit, opts.flags, opts.prec)
                if feval > 0:
                    self.stats.evals += feval
                    self.stats.refined += 1
                    if real_valued:
                        value = acb(value.real)
                    self._accept(value)
                    self._bootstrap(value)
                    return

            if self.depth >= opts.depth_limit - 1:
                self._stop("depth_limit", opts.depth_limit)
                return

            self._bisect()

    def _bisect(self) -> None:
        prec = self.options.prec
        top = self.stack.pop()
        mid = (top.lower + top.upper) * 0.5
        left = SubInterval(top.lower, mid, quad_simple(self.f, top.lower, mid, prec))
        right = SubInterval(mid, top.upper, quad_simple(self.f, mid, top.upper, prec))
        self.stats.evals += 2
        self.stats.splits += 1

        if radius(left.estimate) > radius(right.estimate):
            self.stack += [right, left]
        else:
            self.stack += [left, right]

        self._bootstrap(left.estimate)
        self._bootstrap(right.estimate)
        self.stats.depth_max = max(self.stats.depth_max, self.depth)

    def run(self) -> acb:
        while not self.done:
            self.step()
        if self.options.verbose:
            logger.info("depth %d/%d, eval %d/%d", self.stats.depth_max,
                        self.options.depth_limit, self.stats.evals, self.options.eval_limit)
        return self.total


def integrate(f: Integrand, a: Any, b: Any, goal: int = 0, tol: Any = 0,
              deg_limit: int = 0, eval_limit: int = 0, depth_limit: int = 0,
              flags: int = 0, prec: Optional[int] = None,
              rule: Optional[RefinedRule] = None,
              stats: Optional[QuadStats] = None) -> acb:
    """
    Rigorous enclosure of ∫_a^b f(z) dz.

    goal is a relative precision in bits, tol an absolute floor. Non-positive
    limits pick defaults: deg_limit = 0.5*goal + 10, eval_limit = 1000*prec,
    depth_limit = 2*prec. prec=None uses flint's current ctx.prec.
    """
    if prec is None:
        prec = ctx.prec
    options = QuadOptions.resolve(goal=goal, tol=tol, deg_limit=deg_limit,
                                  eval_limit=eval_limit, depth_limit=depth_limit,
                                  flags=flags, prec=prec)
    return AdaptiveIntegrator(f, a, b, options, rule=rule, stats=stats).run()
