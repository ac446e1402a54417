"""
Shared pytest fixtures for ballquad tests.
"""

import logging
from fractions import Fraction

import mpmath as mp
import pytest
from flint import acb, ctx

from enclosure import as_acb, workprec


@pytest.fixture(autouse=True)
def _restore_precision():
    """Every test starts at 64 flint bits / 53 mpmath bits and leaves them untouched."""
    saved_flint, saved_mp = ctx.prec, mp.mp.prec
    ctx.prec = 64
    mp.mp.prec = 53
    yield
    ctx.prec, mp.mp.prec = saved_flint, saved_mp


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.fixture
def encloses():
    """
    encloses(ball, value) -> True if the acb ball contains value, where value is an
    mpmath number (converted exactly) or a much tighter acb reference ball.
    """
    def check(ball: acb, value) -> bool:
        with workprec(512):
            ref = value if isinstance(value, acb) else as_acb(value)
            return bool(ball.real.contains(ref.real) and ball.imag.contains(ref.imag))
    return check


@pytest.fixture
def exact():
    """exact(x) -> Fraction of the real midpoint of an exact ball."""
    def to_fraction(x) -> Fraction:
        x = x.real if isinstance(x, acb) else x
        man, exp = x.mid().man_exp()
        return Fraction(int(man)) * Fraction(2) ** int(exp)
    return to_fraction
