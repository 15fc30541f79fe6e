# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import InvalidOperation
from .geometry import Point
from .path import Close, Cubic, Instruction, Line, Move, Path, Quad, Segment


@dataclass
class Subpath:
    """
    A maximal run of instructions starting with a :class:`Move`.

    :ivar index: Position of the subpath among all subpaths of the path.
    :ivar start: Index of the first instruction within the path.
    :ivar instructions: The instructions, shared with the path.
    """

    index: int
    start: int
    instructions: list[Instruction]

    @property
    def stop(self) -> int:
        return self.start + len(self.instructions)

    @property
    def closed(self) -> bool:
        return isinstance(self.instructions[-1], Close)

    @property
    def head(self) -> Instruction:
        return self.instructions[0]

    @property
    def body(self) -> list[Instruction]:
        """All instructions except a trailing :class:`Close`."""
        return self.instructions[:-1] if self.closed else list(self.instructions)

    @property
    def anchors(self) -> list[Instruction]:
        """
        Instructions owning a distinct anchor.

        In a closed subpath the instruction before :class:`Close` lands on the
        start point; it is the same anchor as the head and is left out.
        """
        body = self.body
        if self.closed and len(body) > 1:
            return body[:-1]
        return body

    @property
    def closing(self) -> Instruction | None:
        """The instruction duplicating the start point of a closed subpath."""
        body = self.body
        if self.closed and len(body) > 1:
            return body[-1]
        return None

    def position(self, id: int) -> int:
        for idx, item in enumerate(self.instructions):
            if item.id == id:
                return idx
        raise InvalidOperation(f"No instruction with id {id} in subpath")

    def __contains__(self, id: object) -> bool:
        return any(it.id == id for it in self.instructions)


@dataclass
class Neighbors:
    """Instructions around ``cur`` within its subpath."""

    pre: Instruction | None
    cur: Instruction
    next: Instruction | None


def split_into_subpaths(path: Path | Sequence[Instruction]) -> list[Subpath]:
    """Split at every :class:`Move` and after every :class:`Close`."""
    subpaths: list[Subpath] = []
    current: list[Instruction] = []
    start = 0

    def flush(stop: int) -> None:
        nonlocal current, start
        if current:
            subpaths.append(Subpath(len(subpaths), start, current))
        current, start = [], stop

    for idx, item in enumerate(path):
        if isinstance(item, Move):
            flush(idx)
        current.append(item)
        if isinstance(item, Close):
            flush(idx + 1)
    flush(len(path))
    return subpaths


def subpath_of(path: Path, id: int) -> Subpath:
    """
    The subpath containing instruction ``id``.

    :raises InvalidOperation: If there is no such instruction.
    """
    for subpath in split_into_subpaths(path):
        if id in subpath:
            return subpath
    raise InvalidOperation(f"No instruction with id {id} in path")


def neighbors(path: Path, id: int) -> Neighbors:
    """
    Previous and next instruction of ``id`` within its subpath.

    Closed subpaths are circular: the head's ``pre`` is the instruction before
    :class:`Close`, and a ``next`` that would be :class:`Close` is the head.
    Open subpaths have ``None`` at their boundaries.
    """
    subpath = subpath_of(path, id)
    items = subpath.instructions
    i = subpath.position(id)
    cur = items[i]

    pre: Instruction | None = None
    if i > 0:
        pre = items[i - 1]
    elif subpath.closed and len(items) > 2:
        pre = items[-2]

    nxt: Instruction | None = items[i + 1] if i + 1 < len(items) else None
    if isinstance(nxt, Close):
        nxt = items[0] if i != 0 else None

    return Neighbors(pre, cur, nxt)


def anchor_id(path: Path, id: int) -> int:
    """Anchor id of instruction ``id``: the closing duplicate maps to its head."""
    subpath = subpath_of(path, id)
    closing = subpath.closing
    if closing is not None and closing.id == id:
        head = subpath.head.id
        assert head is not None
        return head
    return id


def incoming(path: Path, id: int) -> Segment | None:
    """Segment ending at anchor ``id`` (wrapping around in closed subpaths)."""
    cur = path.get(id)
    if isinstance(cur, Segment):
        return cur
    pre = neighbors(path, id).pre
    if isinstance(cur, Move) and isinstance(pre, Segment):
        return pre
    return None


def outgoing(path: Path, id: int) -> Segment | None:
    """Segment leaving anchor ``id``."""
    nxt = neighbors(path, id).next
    return nxt if isinstance(nxt, Segment) else None


def segment_start(path: Path, id: int) -> Point:
    """Start point of segment ``id``: the anchor of the instruction before it."""
    idx = path.index_of(id)
    item = path.instructions[idx]
    if not isinstance(item, Segment) or idx == 0:
        raise InvalidOperation(f"Instruction {id} is not a segment")
    return path.instructions[idx - 1].anchor


def is_endpoint(path: Path, id: int) -> bool:
    """Whether anchor ``id`` is the first or last anchor of an open subpath."""
    subpath = subpath_of(path, id)
    if subpath.closed:
        return False
    anchors = subpath.anchors
    return id in (anchors[0].id, anchors[-1].id)


def invert(instructions: Sequence[Instruction]) -> list[Instruction]:
    """
    Reverse the direction of travel of a subpath.

    The result starts with a :class:`Move` at the original last anchor; each
    segment now ends at its former start point, cubic controls swap roles and
    a quadratic keeps its control. Instruction ids travel with their anchors,
    so anchor ids stay valid. A closed subpath stays closed.
    """
    closed = bool(instructions) and isinstance(instructions[-1], Close)
    body = [it for it in instructions if not isinstance(it, Close)]
    if not body:
        return []

    anchors = [it.anchor for it in body]
    ids = [it.id for it in body]
    out: list[Instruction] = [Move([anchors[-1]], ids[-1])]

    for k in range(len(body) - 1, 0, -1):
        segment, start, id = body[k], anchors[k - 1], ids[k - 1]
        match segment:
            case Cubic():
                c1, c2 = segment.controls
                out.append(Cubic([c2, c1, start], id))
            case Quad():
                out.append(Quad([*segment.controls, start], id))
            case Line():
                out.append(Line([start], id))
            case _:
                raise ValueError(f"Cannot invert {segment!r} inside a subpath")

    if closed:
        out.append(Close([], instructions[-1].id))
        if len(out) > 2:
            # The head keeps the id of the logical start anchor
            out[0].id, out[-2].id = out[-2].id, out[0].id
    return out


def invert_subpath(path: Path, id: int) -> Subpath:
    """Invert, in place, the subpath owning instruction ``id``."""
    subpath = subpath_of(path, id)
    path.splice(subpath.start, subpath.stop, invert(subpath.instructions))
    return subpath_of(path, id)
