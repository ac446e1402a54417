#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mag.py — upward-rounded error magnitudes (mpmath libmp, 30-bit mantissa)

A Mag is a non-negative bound used for error bookkeeping only: radii, tolerances,
truncation bounds. Every arithmetic operation rounds AWAY from zero, so a Mag
computed from upper bounds is itself an upper bound. The explicit lower-bound
constructors (`lower=True`) round toward zero instead and are only used for
magnitude lower bounds (tolerance bootstrapping).

Mags never hold a "true" value and never feed back into ball midpoints.

Representation: the raw mpmath libmp tuple (sign, man, exp, bc), so conversions
from exact mantissa/exponent pairs are free of any global mpmath precision.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any

import mpmath as mp
from mpmath import libmp

MAG_BITS = 30

_UP = libmp.round_up
_DOWN = libmp.round_down


def _checked(t: tuple) -> tuple:
    if t == libmp.fnan:
        raise ValueError("Mag cannot hold NaN")
    if t[0]:
        raise ValueError("Mag cannot hold a negative value")
    return t


class Mag:
    """Non-negative magnitude bound with upward rounding."""

    __slots__ = ("_t",)

    def __init__(self, value: Any = 0, *, lower: bool = False):
        if isinstance(value, Mag):
            self._t = value._t
            return
        if isinstance(value, Fraction):
            self._t = Mag.from_ratio(value.numerator, value.denominator, lower=lower)._t
            return
        if isinstance(value, float):
            t = libmp.from_float(value)
        elif isinstance(value, int):
            t = libmp.from_int(value)
        else:
            t = mp.mpf(value)._mpf_
        self._t = _checked(libmp.mpf_pos(t, MAG_BITS, _DOWN if lower else _UP))

    # ----------------------------- constructors -----------------------------

    @classmethod
    def _raw(cls, t: tuple) -> "Mag":
        m = cls.__new__(cls)
        m._t = _checked(t)
        return m

    @classmethod
    def zero(cls) -> "Mag":
        return cls._raw(libmp.fzero)

    @classmethod
    def inf(cls) -> "Mag":
        return cls._raw(libmp.finf)

    @classmethod
    def from_man_exp(cls, man: int, exp: int, *, lower: bool = False) -> "Mag":
        """|man| * 2^exp, rounded up (or down with lower=True)."""
        man = abs(int(man))
        return cls._raw(libmp.from_man_exp(man, int(exp), MAG_BITS, _DOWN if lower else _UP))

    @classmethod
    def from_ratio(cls, p: int, q: int, *, lower: bool = False) -> "Mag":
        """|p/q|, rounded up (or down with lower=True)."""
        if q == 0:
            raise ValueError("Mag.from_ratio: zero denominator")
        return cls._raw(libmp.from_rational(abs(int(p)), abs(int(q)), MAG_BITS,
                                            _DOWN if lower else _UP))

    # ------------------------------ predicates ------------------------------

    def is_zero(self) -> bool:
        return self._t == libmp.fzero

    def is_finite(self) -> bool:
        return self._t != libmp.finf

    # ------------------------------ arithmetic ------------------------------

    def __add__(self, other: "Mag") -> "Mag":
        other = _as_mag(other)
        return Mag._raw(libmp.mpf_add(self._t, other._t, MAG_BITS, _UP))

    __radd__ = __add__

    def __mul__(self, other: "Mag") -> "Mag":
        other = _as_mag(other)
        if self.is_zero() or other.is_zero():
            return Mag.zero()
        return Mag._raw(libmp.mpf_mul(self._t, other._t, MAG_BITS, _UP))

    __rmul__ = __mul__

    def __pow__(self, n: int) -> "Mag":
        if n < 0:
            raise ValueError("Mag powers must be non-negative")
        out = Mag(1)
        for _ in range(n):
            out = out * self
        return out

    def mul_2exp(self, e: int) -> "Mag":
        """Exact scaling by 2^e."""
        return Mag._raw(libmp.mpf_shift(self._t, int(e)))

    def hypot(self, other: "Mag") -> "Mag":
        other = _as_mag(other)
        if not (self.is_finite() and other.is_finite()):
            return Mag.inf()
        s = libmp.mpf_add(libmp.mpf_mul(self._t, self._t, MAG_BITS, _UP),
                          libmp.mpf_mul(other._t, other._t, MAG_BITS, _UP),
                          MAG_BITS, _UP)
        return Mag._raw(libmp.mpf_sqrt(s, MAG_BITS, _UP))

    def max(self, other: "Mag") -> "Mag":
        other = _as_mag(other)
        return self if libmp.mpf_cmp(self._t, other._t) >= 0 else other

    # ------------------------------ comparison ------------------------------

    def _cmp(self, other: Any) -> int:
        return libmp.mpf_cmp(self._t, _as_mag(other)._t)

    def __lt__(self, other: Any) -> bool:
        return self._cmp(other) < 0

    def __le__(self, other: Any) -> bool:
        return self._cmp(other) <= 0

    def __gt__(self, other: Any) -> bool:
        return self._cmp(other) > 0

    def __ge__(self, other: Any) -> bool:
        return self._cmp(other) >= 0

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, (Mag, int, float, Fraction)):
            return NotImplemented
        return self._cmp(other) == 0

    def __hash__(self) -> int:
        return hash(self._t)

    # ------------------------------ conversions -----------------------------

    def man_exp(self) -> tuple[int, int]:
        """Exact (mantissa, exponent); only for finite values."""
        if not self.is_finite():
            raise ValueError("infinite Mag has no mantissa/exponent")
        if self.is_zero():
            return 0, 0
        _, man, exp, _ = self._t
        return int(man), int(exp)

    def to_mpf(self) -> mp.mpf:
        return mp.mp.make_mpf(self._t)

    def __float__(self) -> float:
        return libmp.to_float(self._t)

    def __str__(self) -> str:
        return libmp.to_str(self._t, 8)

    def __repr__(self) -> str:
        return f"Mag({libmp.to_str(self._t, 12)})"


def _as_mag(x: Any) -> Mag:
    return x if isinstance(x, Mag) else Mag(x)
