# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""
Anchors and curve handles as transient views of a :class:`~vizpath.path.Path`.

Views only hold ids and copies of coordinates. They are recomputed from the
path whenever needed and must not be kept across structural edits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .errors import InvalidOperation
from .geometry import Point
from .path import Path, Segment
from .topology import anchor_id, incoming, outgoing, split_into_subpaths


class Side(StrEnum):
    """Tangent governed by a handle: incoming (``pre``) or outgoing (``next``)."""

    PRE = "pre"
    NEXT = "next"


@dataclass(frozen=True)
class HandleRef:
    """
    Address of a curve handle.

    :ivar instruction_id: Segment owning the control coordinate.
    :ivar index: Index of the control within the segment.
    :ivar side: ``pre`` for the control next to the segment's end anchor,
                ``next`` for the one next to its start anchor. A quadratic's
                only control is reachable from both sides.
    """

    instruction_id: int
    index: int
    side: Side


@dataclass(frozen=True)
class Anchor:
    id: int
    position: Point
    subpath: int
    closed: bool
    endpoint: bool


@dataclass(frozen=True)
class CurveHandle:
    ref: HandleRef
    anchor_id: int
    position: Point
    anchor_position: Point

    @property
    def visible(self) -> bool:
        """A handle on top of its anchor does not show a tangent."""
        return self.position != self.anchor_position

    @property
    def guide(self) -> tuple[Point, Point]:
        """Guide segment drawn between the anchor and the handle."""
        return self.anchor_position, self.position


def anchors(path: Path) -> list[Anchor]:
    """All anchors of the path in instruction order."""
    result: list[Anchor] = []
    for subpath in split_into_subpaths(path):
        items = subpath.anchors
        for idx, item in enumerate(items):
            assert item.id is not None
            endpoint = not subpath.closed and idx in (0, len(items) - 1)
            result.append(
                Anchor(item.id, item.anchor, subpath.index, subpath.closed, endpoint)
            )
    return result


def handle_refs(path: Path, id: int) -> tuple[HandleRef | None, HandleRef | None]:
    """References of the ``pre`` and ``next`` handles at anchor ``id``."""
    pre: HandleRef | None = None
    nxt: HandleRef | None = None
    if (segment := incoming(path, id)) is not None and segment.degree:
        assert segment.id is not None
        pre = HandleRef(segment.id, segment.degree - 1, Side.PRE)
    if (segment := outgoing(path, id)) is not None and segment.degree:
        assert segment.id is not None
        nxt = HandleRef(segment.id, 0, Side.NEXT)
    return pre, nxt


def handle_anchor(path: Path, ref: HandleRef) -> int:
    """
    Id of the anchor a handle belongs to.

    :raises InvalidOperation: If ``ref`` does not address a control point.
    """
    idx = path.index_of(ref.instruction_id)
    segment = path.instructions[idx]
    if not isinstance(segment, Segment) or not segment.degree:
        raise InvalidOperation(f"Instruction {ref.instruction_id} has no handles")
    expected = segment.degree - 1 if ref.side == Side.PRE else 0
    if ref.index != expected:
        raise InvalidOperation(f"No {ref.side} handle {ref.index} on {segment!r}")
    if ref.side == Side.PRE:
        return anchor_id(path, ref.instruction_id)
    previous = path.instructions[idx - 1]
    assert previous.id is not None
    return anchor_id(path, previous.id)


def resolve_handle(path: Path, ref: HandleRef) -> CurveHandle:
    """Current view of the handle addressed by ``ref``."""
    owner = handle_anchor(path, ref)
    position = path.get(ref.instruction_id).controls[ref.index]
    return CurveHandle(ref, owner, position, path.get(owner).anchor)


def handles_at(path: Path, id: int) -> tuple[CurveHandle | None, CurveHandle | None]:
    """The ``pre`` and ``next`` handle views at anchor ``id``."""
    pre, nxt = handle_refs(path, id)
    return (
        resolve_handle(path, pre) if pre else None,
        resolve_handle(path, nxt) if nxt else None,
    )


def handles(path: Path) -> list[CurveHandle]:
    """All handle views, grouped by anchor (``pre`` before ``next``)."""
    result: list[CurveHandle] = []
    for anchor in anchors(path):
        result.extend(h for h in handles_at(path, anchor.id) if h is not None)
    return result
