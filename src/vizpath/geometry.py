# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Any, final, override

from .errors import InvalidOperation
from .math import Expr, dec_to_rat, exact_precision

Number = Decimal | int | float | str

# ------------------------------------------------------------------------------
# Basic geometric primitives
# ------------------------------------------------------------------------------


class Point:
    """2D point with :class:`decimal.Decimal` coordinates."""

    __slots__ = ("x", "y")

    def __init__(self, x: Number, y: Number) -> None:
        self.x: Decimal = Decimal(x)
        self.y: Decimal = Decimal(y)

    def __iter__(self) -> Iterator[Decimal]:
        """Iterate as ``(x, y)``."""
        yield self.x
        yield self.y

    @override
    def __eq__(self, other: Any) -> bool:
        """
        Compare coordinates for exact equality.

        :return: ``True`` iff ``other`` is a :class:`Point` with equal ``x`` and ``y``.
        """
        if isinstance(other, Point):
            return self.x == other.x and self.y == other.y
        return False

    @override
    def __hash__(self) -> int:
        return hash((self.x, self.y))

    @property
    def vec2(self) -> Vec2:
        """
        Exact conversion to :class:`Vec2`.

        Coordinates are converted to SymPy rationals via :func:`dec_to_rat`.
        """
        return Vec2.from_point(self)

    @override
    def __str__(self) -> str:
        """Human-readable representation ``(x, y)`` with decimal formatting."""
        return f"({self.x:f}, {self.y:f})"

    @override
    def __repr__(self) -> str:
        """Debug representation ``Point(x, y)`` with decimal formatting."""
        return f"Point({self.x:f}, {self.y:f})"

    @property
    def length(self) -> Decimal:
        """Euclidean norm :math:`‖v‖_2 = \\sqrt{x^2 + y^2}`."""
        return (self.x * self.x + self.y * self.y).sqrt()

    def distance(self, other: Point) -> Decimal:
        """Euclidean distance to ``other``."""
        return (self - other).length

    def reflected(self, center: Point) -> Point:
        """Point reflection through ``center``: :math:`2c - v`, without rounding."""
        with localcontext() as ctx:
            ctx.prec = exact_precision(*self, *center)
            return center * 2 - self

    def lerp(self, other: Point, t: Number) -> Point:
        """Linear interpolation :math:`v + (w - v)\\,t`."""
        return self + (other - self) * t

    # ---- vector arithmetic -------------------------------------------------------

    def __neg__(self) -> Point:
        """Unary minus :math:`-v`."""
        return Point(-self.x, -self.y)

    def __add__(self, other: Point) -> Point:
        """Vector addition :math:`v + w`."""
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        """Vector subtraction :math:`v - w`."""
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Number) -> Point:
        r"""Scalar multiplication :math:`v ⋅ λ`."""
        other = Decimal(other)
        return Point(self.x * other, self.y * other)

    def __truediv__(self, other: Number) -> Point:
        """Scalar division :math:`v / λ`."""
        other = Decimal(other)
        return Point(self.x / other, self.y / other)


@dataclass
class Vec2:
    """
    2D vector with SymPy coordinates.

    Used where a curve has to be handled as a polynomial in its parameter.
    """

    x: Expr
    y: Expr

    @staticmethod
    def from_point(p: Point) -> Vec2:
        """Construct a :class:`Vec2` from a :class:`Point` (exact)."""
        return Vec2(dec_to_rat(p.x), dec_to_rat(p.y))

    def dot(self, other: Vec2) -> Expr:
        """Scalar product :math:`v ⋅ w`."""
        return self.x * other.x + self.y * other.y

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Expr) -> Vec2:
        return Vec2(self.x * other, self.y * other)


# ------------------------------------------------------------------------------
# Affine placement
# ------------------------------------------------------------------------------


@final
class Transform:
    r"""
    Affine placement matrix of the edited shape.

    The six numbers follow the SVG ``matrix(a b c d e f)`` convention:

    .. math::

        \begin{pmatrix} x' \\ y' \end{pmatrix}
        =
        \begin{pmatrix} a & c \\ b & d \end{pmatrix}
        \begin{pmatrix} x \\ y \end{pmatrix}
        +
        \begin{pmatrix} e \\ f \end{pmatrix}.

    Path coordinates live in the local frame; pointer positions reported by the
    host live in the absolute frame.
    """

    __slots__ = ("a", "b", "c", "d", "e", "f")

    def __init__(
        self, a: Number, b: Number, c: Number, d: Number, e: Number, f: Number
    ) -> None:
        self.a: Decimal = Decimal(a)
        self.b: Decimal = Decimal(b)
        self.c: Decimal = Decimal(c)
        self.d: Decimal = Decimal(d)
        self.e: Decimal = Decimal(e)
        self.f: Decimal = Decimal(f)

    @staticmethod
    def identity() -> Transform:
        return Transform(1, 0, 0, 1, 0, 0)

    @staticmethod
    def translation(dx: Number, dy: Number) -> Transform:
        return Transform(1, 0, 0, 1, dx, dy)

    def __iter__(self) -> Iterator[Decimal]:
        yield from (self.a, self.b, self.c, self.d, self.e, self.f)

    @override
    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Transform):
            return tuple(self) == tuple(other)
        return False

    @override
    def __hash__(self) -> int:
        return hash(tuple(self))

    @override
    def __repr__(self) -> str:
        return "Transform({})".format(", ".join(f"{v:f}" for v in self))

    @property
    def offset(self) -> Point:
        """Translation part :math:`(e, f)`."""
        return Point(self.e, self.f)

    @property
    def determinant(self) -> Decimal:
        return self.a * self.d - self.b * self.c

    @property
    def inverse(self) -> Transform:
        """
        Inverse placement.

        :raises InvalidOperation: If the linear part is singular.
        """
        det = self.determinant
        if det == 0:
            raise InvalidOperation(f"Singular transform cannot be inverted: {self!r}")
        a, b, c, d = self.d / det, -self.b / det, -self.c / det, self.a / det
        e = -(a * self.e + c * self.f)
        f = -(b * self.e + d * self.f)
        return Transform(a, b, c, d, e, f)

    def __matmul__(self, other: Transform) -> Transform:
        """Composition ``self @ other`` (``other`` is applied first)."""
        return Transform(
            self.a * other.a + self.c * other.b,
            self.b * other.a + self.d * other.b,
            self.a * other.c + self.c * other.d,
            self.b * other.c + self.d * other.d,
            self.a * other.e + self.c * other.f + self.e,
            self.b * other.e + self.d * other.f + self.f,
        )

    def translated(self, dx: Number, dy: Number) -> Transform:
        """Return this placement moved by ``(dx, dy)`` in the absolute frame."""
        return Transform.translation(dx, dy) @ self

    def apply(self, p: Point) -> Point:
        return Point(
            self.a * p.x + self.c * p.y + self.e,
            self.b * p.x + self.d * p.y + self.f,
        )

    def to_absolute(self, p: Point) -> Point:
        """Map a path-local point into the host's absolute frame."""
        return self.apply(p)

    def to_relative(self, p: Point) -> Point:
        """Map an absolute (pointer) position into the path-local frame."""
        if self.a == 1 and self.b == 0 and self.c == 0 and self.d == 1:
            return Point(p.x - self.e, p.y - self.f)
        return self.inverse.apply(p)


def to_absolute(p: Point, transform: Transform) -> Point:
    return transform.to_absolute(p)


def to_relative(p: Point, transform: Transform) -> Point:
    return transform.to_relative(p)
