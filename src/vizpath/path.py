# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from decimal import Decimal
from typing import ClassVar, Final, TypedDict, final, override

from .bezier import quadratic_to_cubic
from .errors import InvalidOperation, ParseError
from .geometry import Point
from .path_parser import PathParser

logger = logging.getLogger(__name__)

_number_strip_trailing_zeros: Final = re.compile(r"^(-?[0-9]*\.([0-9]*[1-9])?)0*$")
_number_strip_dot: Final = re.compile(r"\.$")
_number_leading_zero: Final = re.compile(r"^(-?)0\.")
_minify_cmd_space: Final = re.compile(r"^([a-zA-Z]) ")
_minify_dot_gap: Final = re.compile(r"(\.[0-9]+) (?=\.)")
_format_spec: Final = re.compile(r"(m?)(?:\.([0-9]+))?(m?)")


def format_number(v: Decimal, d: int | None, minify: bool = False) -> str:
    """Format a number with optional fixed decimals and path number minification."""
    s = f"{v:.{d}f}" if d is not None else f"{v:f}"
    s = _number_strip_trailing_zeros.sub(r"\1", s)
    s = _number_strip_dot.sub("", s)
    if s == "-0":
        s = "0"
    if minify:
        s = _number_leading_zero.sub(r"\1.", s)
    return s


def parse_format_spec(spec: str) -> tuple[int | None, bool]:
    """
    Parse a format specification of the form ``[m][.N][m]``.

    :return: ``(decimals, minify)``.
    :raises ValueError: For any other specification.
    """
    match = _format_spec.fullmatch(spec)
    if match is None or (match.group(1) and match.group(3)):
        raise ValueError(f"Invalid format specifier: {spec!r}")
    decimals = int(match.group(2)) if match.group(2) is not None else None
    return decimals, bool(match.group(1) or match.group(3))


class Instruction:
    """
    Base class of a single path instruction.

    ``points`` holds the control points followed by the anchor point; an
    instruction without points (:class:`Close`) has no anchor.
    """

    key: ClassVar[str]
    arity: ClassVar[int]

    def __init__(self, points: Sequence[Point], id: int | None = None) -> None:
        if len(points) != self.arity:
            raise ValueError(
                f"{self.__class__.__name__} takes {self.arity} points, got {len(points)}"
            )
        self.points: list[Point] = [Point(p.x, p.y) for p in points]
        self.id: int | None = id

    @staticmethod
    def make(key: str, points: Sequence[Point], id: int | None = None) -> Instruction:
        """Construct an instruction from its (absolute) command letter."""
        mapping: dict[str, type[Instruction]] = {
            Move.key: Move,
            Line.key: Line,
            Quad.key: Quad,
            Cubic.key: Cubic,
            Close.key: Close,
        }
        cls = mapping.get(key.upper())
        if not cls:
            raise ValueError(f"Invalid instruction type: {key!r}")
        return cls(points, id)

    @property
    def anchor(self) -> Point:
        """Terminal coordinate of this instruction."""
        return self.points[-1]

    @anchor.setter
    def anchor(self, p: Point) -> None:
        self.points[-1] = Point(p.x, p.y)

    @property
    def controls(self) -> list[Point]:
        """Control coordinates, ordered along the direction of travel."""
        return self.points[:-1]

    def set_control(self, index: int, p: Point) -> None:
        if not 0 <= index < self.degree:
            raise InvalidOperation(f"{self!r} has no control point {index}")
        self.points[index] = Point(p.x, p.y)

    @property
    def degree(self) -> int:
        """Number of control points: 0 for lines, 1 for quadratics, 2 for cubics."""
        return max(self.arity - 1, 0)

    def control_polygon(self, start: Point) -> list[Point]:
        """Bézier control polygon of the segment starting at ``start``."""
        return [start, *self.points]

    def clone(self, id: int | None = None) -> Instruction:
        """Copy of this instruction; keeps the id unless another one is given."""
        return self.__class__(self.points, self.id if id is None else id)

    def translate(self, dx: Decimal, dy: Decimal) -> None:
        """Translate all points in place."""
        self.points = [Point(p.x + dx, p.y + dy) for p in self.points]

    def as_string(
        self,
        decimals: int | None = None,
        minify: bool = False,
        trailing_items: Sequence[Instruction] = (),
    ) -> str:
        """
        Serialize this instruction (optionally together with same-typed trailing
        items) into a path fragment.
        """
        points = [*self.points, *(p for it in trailing_items for p in it.points)]
        values = [format_number(v, decimals, minify) for p in points for v in p]
        return " ".join([self.key, *values])

    @override
    def __str__(self) -> str:
        return self.as_string()

    @override
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} #{self.id}: {self}>"


@final
class Move(Instruction):
    key = "M"
    arity = 1


class Segment(Instruction):
    """Instruction drawing a line or curve from the previous anchor."""


@final
class Line(Segment):
    key = "L"
    arity = 1


@final
class Quad(Segment):
    key = "Q"
    arity = 2

    def to_cubic(self, start: Point) -> Cubic:
        """Exact cubic representation of this quadratic starting at ``start``."""
        return Cubic(quadratic_to_cubic(start, *self.points), self.id)


@final
class Cubic(Segment):
    key = "C"
    arity = 3


@final
class Close(Instruction):
    key = "Z"
    arity = 0

    @property
    @override
    def anchor(self) -> Point:
        raise InvalidOperation("Close has no anchor")

    @property
    @override
    def controls(self) -> list[Point]:
        return []


class _Grouped(TypedDict):
    key: str
    item: Instruction
    trailing: list[Instruction]


class Path:
    """
    Mutable, normalized sequence of :class:`Instruction` objects.

    The path is the arena of its instructions: every instruction carries an id
    that is unique within the path and stays attached to the instruction while
    it is edited, so anchors and handles can be addressed by id.
    """

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        self.instructions: list[Instruction] = []
        self._next_id: int = 0
        for item in instructions:
            self.append(item)

    # ---- construction ------------------------------------------------------------

    @staticmethod
    def load(raw: str, offset: Point | None = None) -> Path:
        """
        Parse and normalize a path string.

        :param offset: Separately tracked origin offset to be folded into the
                       coordinates.
        :raises ParseError: If ``raw`` is malformed.
        """
        path = Path.from_items(PathParser.parse(raw))
        path.normalize(offset)
        logger.debug("Loaded path with %d instructions", len(path))
        return path

    @staticmethod
    def from_items(raw_items: Iterable[list[str]]) -> Path:
        """
        Build a path from parsed commands, resolving relative coordinates and
        the shorthands ``H``, ``V``, ``S`` and ``T`` into absolute instructions.
        """
        path = Path()
        current = start = Point(0, 0)
        previous: Instruction | None = None

        for raw in raw_items:
            cmd = raw[0]
            key = cmd.upper()
            values = [Decimal(v) for v in raw[1:]]
            base = current if cmd.islower() else Point(0, 0)

            def pt(i: int) -> Point:
                return Point(base.x + values[i], base.y + values[i + 1])

            item: Instruction
            match key:
                case "M":
                    item = Move([pt(0)])
                    start = item.anchor
                case "L":
                    item = Line([pt(0)])
                case "H":
                    item = Line([Point(base.x + values[0], current.y)])
                case "V":
                    item = Line([Point(current.x, base.y + values[0])])
                case "C":
                    item = Cubic([pt(0), pt(2), pt(4)])
                case "S":
                    if isinstance(previous, Cubic):
                        c1 = previous.controls[1].reflected(current)
                    else:
                        c1 = current
                    item = Cubic([c1, pt(0), pt(2)])
                case "Q":
                    item = Quad([pt(0), pt(2)])
                case "T":
                    if isinstance(previous, Quad):
                        c = previous.controls[0].reflected(current)
                    else:
                        c = current
                    item = Quad([c, pt(0)])
                case "Z":
                    item = Close([])
                case _:
                    raise ParseError(f"Invalid command type: {cmd!r}")

            path.append(item)
            current = start if isinstance(item, Close) else item.anchor
            previous = item

        return path

    def normalize(self, offset: Point | None = None) -> None:
        """
        Normalize in place.

        * subtract ``offset`` from every coordinate,
        * start every subpath with a :class:`Move`, also after a :class:`Close`,
        * make the closing segment of every closed subpath explicit, so that the
          anchor before :class:`Close` coincides with the subpath start,
        * drop repeated :class:`Close` instructions.

        Running it on a normalized path changes nothing.
        """
        if offset is not None and (offset.x != 0 or offset.y != 0):
            for item in self.instructions:
                item.translate(-offset.x, -offset.y)

        result: list[Instruction] = []
        start: Point | None = None
        for item in self.instructions:
            if isinstance(item, Move):
                start = item.anchor
            elif start is None:
                raise InvalidOperation("Path must start with a move")
            elif isinstance(item, Close):
                last = result[-1]
                if isinstance(last, Close):
                    continue
                if last.anchor != start:
                    result.append(self._adopt(Line([start])))
            elif isinstance(result[-1], Close):
                result.append(self._adopt(Move([start])))
            result.append(item)
        self.instructions = result

    def clone(self) -> Path:
        """Deep copy; ids are preserved."""
        clone = Path()
        clone.instructions = [it.clone() for it in self.instructions]
        clone._next_id = self._next_id
        return clone

    # ---- arena access ------------------------------------------------------------

    def _adopt(self, item: Instruction) -> Instruction:
        if item.id is None:
            item.id = self._next_id
            self._next_id += 1
        else:
            self._next_id = max(self._next_id, item.id + 1)
        return item

    def new_id(self) -> int:
        """Reserve a fresh instruction id."""
        self._next_id += 1
        return self._next_id - 1

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __contains__(self, id: object) -> bool:
        return any(it.id == id for it in self.instructions)

    def index_of(self, id: int) -> int:
        """
        Index of the instruction with the given id.

        :raises InvalidOperation: If no such instruction exists.
        """
        for idx, item in enumerate(self.instructions):
            if item.id == id:
                return idx
        raise InvalidOperation(f"No instruction with id {id} in path")

    def get(self, id: int) -> Instruction:
        return self.instructions[self.index_of(id)]

    def append(self, item: Instruction) -> Instruction:
        self.instructions.append(self._adopt(item))
        return item

    def insert(self, index: int, item: Instruction) -> Instruction:
        self.instructions.insert(index, self._adopt(item))
        return item

    def replace(self, id: int, item: Instruction) -> Instruction:
        """Replace the instruction ``id`` by ``item``, which takes over the id."""
        idx = self.index_of(id)
        item.id = id
        self.instructions[idx] = item
        return item

    def splice(self, start: int, stop: int, items: Iterable[Instruction]) -> None:
        """Replace ``instructions[start:stop]`` by ``items``."""
        self.instructions[start:stop] = [self._adopt(it) for it in items]

    # ---- serialization -----------------------------------------------------------

    def as_string(self, decimals: int | None = None, minify: bool = False) -> str:
        """Serialize the entire path to a path string."""
        grouped: list[_Grouped] = []
        for it in self.instructions:
            key = it.key
            if minify and grouped and (last := grouped[-1])["key"] == key:
                last["trailing"].append(it)
                continue
            gkey = Line.key if key == Move.key else key
            grouped.append({"key": gkey, "item": it, "trailing": []})

        out_parts: list[str] = []
        for g in grouped:
            s = g["item"].as_string(decimals, minify, g["trailing"])
            if minify:
                s = _minify_cmd_space.sub(r"\1", s)
                s = s.replace(" -", "-")
                s = _minify_dot_gap.sub(r"\1", s)
            out_parts.append(s)

        return "".join(out_parts) if minify else " ".join(out_parts)

    @override
    def __str__(self) -> str:
        return self.as_string()

    @override
    def __repr__(self) -> str:
        return f"Path({self.as_string()!r})"

    @override
    def __format__(self, format_spec: str) -> str:
        """
        Format with ``[m][.N][m]``: ``N`` fixed decimals, ``m`` minified output.
        """
        decimals, minify = parse_format_spec(format_spec)
        return self.as_string(decimals, minify)
