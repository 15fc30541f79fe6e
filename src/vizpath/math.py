# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, getcontext
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import sympy as sp

type Symbol = "sp.Symbol"
type Expr = "sp.Expr"


@dataclass(frozen=True)
class Precision:
    """
    Control numerical precision for mixed symbolic/numeric operations.

    ``baseline`` defines the primary target precision, while ``additional``
    can be used to carry extra guard digits during intermediate computations.

    :ivar baseline: Baseline number of significant digits.
    :ivar additional: Additional guard digits to be used internally.
    """

    baseline: int
    additional: int

    @property
    def full(self) -> int:
        """
        Full number of significant digits to use.

        :return: ``baseline + additional``.
        """
        return self.baseline + self.additional


DEFAULT_PRECISION = Precision(24, 8)


def canonical_decimal(x: Decimal) -> Decimal:
    """
    Normalize a :class:`~decimal.Decimal` to a canonical form.

    :return: ``Decimal(0)`` for any zero value, otherwise ``x.normalize()``.
    """
    return Decimal(0) if x == 0 else x.normalize()


def dec_to_rat(x: Decimal) -> Expr:
    """
    Convert a :class:`~decimal.Decimal` to a SymPy :class:`sympy.Rational`.

    The conversion is exact with respect to the decimal representation.
    """
    import sympy as sp

    return sp.Rational(str(x))


def rat_to_dec(x: Expr, *, n: Precision | None = None) -> Decimal:
    """
    Convert a SymPy expression to :class:`~decimal.Decimal`.

    The expression is evaluated with ``n.full`` significant digits if ``n`` is
    given, otherwise with the precision of the current decimal context.
    """
    digits = n.full if n is not None else getcontext().prec
    return canonical_decimal(Decimal(str(x.evalf(n=digits))))


def exact_precision(*values: Decimal) -> int:
    """
    Number of significant digits at which sums and doubles of ``values`` are
    computed without rounding.

    :return: At least the precision of the current decimal context.
    """
    finite = [v for v in values if v.is_finite()]
    if not finite:
        return getcontext().prec
    top = max(v.adjusted() for v in finite)
    bottom = min(int(v.as_tuple().exponent) for v in finite)
    return max(getcontext().prec, top - bottom + 3)


def real_roots(poly: Expr, x: Symbol, *, n: Precision | None = None) -> list[Decimal]:
    """
    Real roots of a univariate polynomial in ``x``, in nondecreasing order.

    Roots are isolated exactly by SymPy (so the degree is not limited) and only
    then converted to :class:`~decimal.Decimal`. Repeated roots are reported
    once.

    :raises ValueError: For the identically zero polynomial.
    """
    import sympy as sp

    ppoly = sp.Poly(poly, x)
    if ppoly.is_zero:
        raise ValueError("Infinitely many solutions!")
    if ppoly.degree() < 1:
        return []
    roots = {rat_to_dec(r, n=n) for r in ppoly.real_roots()}
    return sorted(roots)


def argmin_unit_interval(f: Expr, x: Symbol, *, n: Precision | None = None) -> Decimal:
    r"""
    Parameter :math:`t ∈ [0, 1]` minimizing the polynomial ``f(t)``.

    Candidates are the interval bounds and the real roots of :math:`f'(t)`
    inside the interval. A constant ``f`` yields ``0``.
    """
    import sympy as sp

    df = sp.diff(f, x)
    candidates = [Decimal(0), Decimal(1)]
    if not sp.Poly(df, x).is_zero:
        candidates += [t for t in real_roots(df, x, n=n) if 0 <= t <= 1]

    def value(t: Decimal) -> Decimal:
        return rat_to_dec(f.subs(x, dec_to_rat(t)), n=n)

    return min(candidates, key=value)
