# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""
Bézier helpers working on control polygons given as sequences of
:class:`~vizpath.geometry.Point`.

A control polygon ``[p0, p1]`` is a line segment, ``[p0, p1, p2]`` a quadratic
and ``[p0, p1, p2, p3]`` a cubic curve.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from .geometry import Number, Point, Vec2
from .math import DEFAULT_PRECISION, Expr, Precision, Symbol, argmin_unit_interval


def de_casteljau(
    points: Sequence[Point], t: Number
) -> tuple[list[Point], list[Point]]:
    r"""
    Subdivide a Bézier curve of any degree at parameter ``t``.

    Repeated linear interpolation of the control polygon yields the control
    polygons of the two halves :math:`[0, t]` and :math:`[t, 1]`; the last point
    of the left half is the first point of the right half and equals
    :math:`B(t)`.
    """
    t = Decimal(t)
    left, right = [points[0]], [points[-1]]
    level = list(points)
    while len(level) > 1:
        level = [a.lerp(b, t) for a, b in zip(level, level[1:])]
        left.append(level[0])
        right.append(level[-1])
    right.reverse()
    return left, right


def point_at(points: Sequence[Point], t: Number) -> Point:
    """Evaluate :math:`B(t)` via :func:`de_casteljau`."""
    return de_casteljau(points, t)[0][-1]


def quadratic_to_cubic(p0: Point, p1: Point, p2: Point) -> tuple[Point, Point, Point]:
    r"""
    Exact degree elevation of a quadratic curve.

    .. math::

        q_1 = \tfrac23 p_1 + \tfrac13 p_0, \quad
        q_2 = \tfrac23 p_1 + \tfrac13 p_2, \quad
        q_3 = p_2.

    :return: The cubic controls and end point ``(q1, q2, q3)``.
    """
    two_thirds = Decimal(2) / 3
    return (
        p1 * two_thirds + p0 / 3,
        p1 * two_thirds + p2 / 3,
        p2,
    )


def fit_quadratic(p0: Point, a: Point, p2: Point) -> tuple[Point, Decimal]:
    r"""
    Quadratic curve from ``p0`` to ``p2`` passing through ``a``.

    The parameter at which the curve passes through ``a`` is chosen by chord
    length, :math:`t = |a - p_0| / (|a - p_0| + |p_2 - a|)`, and the control
    point solves :math:`B(t) = a`:

    .. math::

        c = \frac{a - (1-t)^2 p_0 - t^2 p_2}{2 t (1 - t)}.

    Degenerate configurations (``a`` on an end point) fall back to
    :math:`t = 1/2`.

    :return: The control point and the parameter of ``a``.
    """
    d0, d1 = a.distance(p0), p2.distance(a)
    if d0 == 0 or d1 == 0:
        t = Decimal("0.5")
    else:
        t = d0 / (d0 + d1)
    s = 1 - t
    control = (a - p0 * (s * s) - p2 * (t * t)) / (2 * t * s)
    return control, t


def chord_control(a: Point, b: Point) -> Point:
    r"""
    Control point synthesized for a single chord from anchor ``a`` to ``b``.

    .. math::

        T = A + \left(\frac{B_y - A_y}{d}, \frac{B_x - A_x}{d}\right) ⋅ \frac d3,
        \quad d = |B - A|.

    A zero-length chord yields ``a`` itself.
    """
    d = b.distance(a)
    if d == 0:
        return Point(a.x, a.y)
    direction = Point((b.y - a.y) / d, (b.x - a.x) / d)
    return a + direction * (d / 3)


def polynomial(points: Sequence[Point], t: Symbol) -> Vec2:
    r"""
    Bernstein form :math:`B(t) = \sum_i \binom{n}{i} (1-t)^{n-i} t^i p_i`
    with exact SymPy coefficients.
    """
    import sympy as sp

    n = len(points) - 1
    result = Vec2(sp.S.Zero, sp.S.Zero)
    for i, p in enumerate(points):
        weight: Expr = sp.binomial(n, i) * (1 - t) ** (n - i) * t**i
        result = result + p.vec2 * weight
    return result


def nearest_parameter(
    points: Sequence[Point], target: Point, *, n: Precision = DEFAULT_PRECISION
) -> Decimal:
    r"""
    Parameter :math:`t ∈ [0, 1]` of the curve point closest to ``target``.

    Minimizes :math:`‖B(t) - q‖^2`, a polynomial of degree :math:`2n`, by
    examining the real roots of its derivative.
    """
    import sympy as sp

    t = sp.Symbol("t", real=True)
    delta = polynomial(points, t) - target.vec2
    return argmin_unit_interval(sp.expand(delta.dot(delta)), t, n=n)
