# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""
Editing operations on a :class:`~vizpath.path.Path`.

Every operation mutates the path in place and reports what it touched in an
:class:`EditResult`. Ids that are not part of the path raise
:class:`~vizpath.errors.InvalidOperation`; requests that do not apply to the
current geometry (e.g. degrading a line) return an unchanged result.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .bezier import (
    chord_control,
    de_casteljau,
    fit_quadratic,
    nearest_parameter,
    quadratic_to_cubic,
)
from .continuity import mirror_partner, mirrored_position
from .errors import InvalidOperation
from .geometry import Point
from .math import DEFAULT_PRECISION, Precision
from .path import Close, Cubic, Instruction, Line, Move, Path, Quad, Segment
from .topology import (
    Subpath,
    anchor_id,
    incoming,
    invert_subpath,
    is_endpoint,
    outgoing,
    segment_start,
    split_into_subpaths,
    subpath_of,
)
from .views import HandleRef, Side, handle_anchor, handle_refs

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """
    Outcome of an edit operation.

    :ivar changed: Whether the path was modified.
    :ivar structural: Whether instructions were added, removed or reordered;
                      previously derived views are stale in that case.
    :ivar anchors: Ids of the anchors that were created or moved.
    :ivar handles: Handles whose position or guide segment changed.
    """

    changed: bool = False
    structural: bool = False
    anchors: list[int] = field(default_factory=list)
    handles: list[HandleRef] = field(default_factory=list)

    def update(self, other: EditResult) -> None:
        """Accumulate ``other`` into this result."""
        self.changed |= other.changed
        self.structural |= other.structural
        self.anchors += [a for a in other.anchors if a not in self.anchors]
        self.handles += [h for h in other.handles if h not in self.handles]


def _anchor(path: Path, id: int) -> int:
    if isinstance(path.get(id), Close):
        raise InvalidOperation(f"Instruction {id} is not an anchor")
    return anchor_id(path, id)


def _handles(path: Path, id: int) -> list[HandleRef]:
    return [ref for ref in handle_refs(path, id) if ref is not None]


# ------------------------------------------------------------------------------
# Moving anchors and handles
# ------------------------------------------------------------------------------


def move_anchor(path: Path, id: int, pos: Point) -> EditResult:
    """
    Move anchor ``id`` to ``pos``.

    Handles stay where they are. The start anchor of a closed subpath also
    moves its closing duplicate.
    """
    aid = _anchor(path, id)
    subpath = subpath_of(path, aid)
    path.get(aid).anchor = pos
    if (closing := subpath.closing) is not None and subpath.head.id == aid:
        closing.anchor = pos
    return EditResult(True, anchors=[aid], handles=_handles(path, aid))


def move_anchors(path: Path, moves: Mapping[int, Point]) -> EditResult:
    """Move several anchors at once, each independently."""
    result = EditResult()
    for id, pos in moves.items():
        result.update(move_anchor(path, id, pos))
    return result


def move_handle(
    path: Path, ref: HandleRef, pos: Point, *, mirror: bool = True
) -> EditResult:
    """
    Move a curve handle to ``pos``.

    If the handles at the owning anchor are mirrored and ``mirror`` is set, the
    partner handle follows to the point reflection of ``pos``.
    """
    owner = handle_anchor(path, ref)
    partner = mirror_partner(path, ref) if mirror else None

    path.get(ref.instruction_id).set_control(ref.index, pos)
    result = EditResult(True, anchors=[owner], handles=[ref])

    if partner is not None:
        target = mirrored_position(path.get(owner).anchor, pos)
        path.get(partner.instruction_id).set_control(partner.index, target)
        result.handles.append(partner)
    return result


# ------------------------------------------------------------------------------
# Degree elevation and reduction
# ------------------------------------------------------------------------------


def elevate_to_curve(
    path: Path, id: int, *, n: Precision = DEFAULT_PRECISION
) -> EditResult:
    """
    Turn the line segment(s) at anchor ``id`` into quadratic curves.

    With a segment on both sides of which at least one is already a curve, a
    quadratic through the previous anchor, this anchor and the next anchor is
    split at the parameter nearest this anchor, and its halves replace the two
    segments. Otherwise only one line is bent, using a control point offset
    from the anchor by a third of the chord.
    """
    aid = _anchor(path, id)
    anchor = path.get(aid).anchor
    seg_in, seg_out = incoming(path, aid), outgoing(path, aid)

    if (
        seg_in is not None
        and seg_out is not None
        and seg_in is not seg_out
        and (seg_in.degree or seg_out.degree)
    ):
        assert seg_in.id is not None and seg_out.id is not None
        p0, p2 = segment_start(path, seg_in.id), seg_out.anchor
        control, _ = fit_quadratic(p0, anchor, p2)
        t = nearest_parameter([p0, control, p2], anchor, n=n)
        left, right = de_casteljau([p0, control, p2], t)
        path.replace(seg_in.id, Quad([left[1], anchor]))
        path.replace(seg_out.id, Quad([right[1], p2]))
        logger.debug("Elevated both segments at anchor %d (t=%s)", aid, t)
    elif isinstance(seg_in, Line):
        assert seg_in.id is not None
        other = segment_start(path, seg_in.id)
        path.replace(seg_in.id, Quad([chord_control(anchor, other), anchor]))
    elif seg_in is None and isinstance(seg_out, Line):
        assert seg_out.id is not None
        other = seg_out.anchor
        path.replace(seg_out.id, Quad([chord_control(anchor, other), other]))
    else:
        return EditResult()

    return EditResult(True, anchors=[aid], handles=_handles(path, aid))


def degrade_to_line(path: Path, id: int, side: Side) -> EditResult:
    """
    Drop the controls of the incoming (``pre``) or outgoing (``next``) segment
    of anchor ``id``; its end points stay in place.
    """
    aid = _anchor(path, id)
    segment = incoming(path, aid) if side == Side.PRE else outgoing(path, aid)
    if segment is None or not segment.degree:
        return EditResult()
    assert segment.id is not None
    path.replace(segment.id, Line([segment.anchor]))
    return EditResult(True, anchors=[aid])


def elevate_quadratic(path: Path, id: int) -> EditResult:
    """Replace quadratic segment ``id`` by the identical cubic curve."""
    item = path.get(id)
    if not isinstance(item, Quad):
        return EditResult()
    path.replace(id, item.to_cubic(segment_start(path, id)))
    return EditResult(True, anchors=[anchor_id(path, id)])


# ------------------------------------------------------------------------------
# Adding anchors
# ------------------------------------------------------------------------------


def _segment(path: Path, id: int) -> Segment:
    item = path.get(id)
    if not isinstance(item, Segment):
        raise InvalidOperation(f"Instruction {id} is not a segment")
    return item


def split_segment(
    path: Path, id: int, pos: Point, *, n: Precision = DEFAULT_PRECISION
) -> EditResult:
    """
    Add an anchor on segment ``id`` at the curve point nearest ``pos``.

    The segment is subdivided with De Casteljau's algorithm, so the drawn shape
    does not change.
    """
    item = _segment(path, id)
    polygon = item.control_polygon(segment_start(path, id))
    t = nearest_parameter(polygon, pos, n=n)
    if t <= 0 or t >= 1:
        return EditResult()

    left, right = de_casteljau(polygon, t)
    path.replace(id, Instruction.make(item.key, right[1:]))
    first = path.insert(path.index_of(id), Instruction.make(item.key, left[1:]))
    assert first.id is not None
    return EditResult(True, True, anchors=[first.id], handles=_handles(path, first.id))


def insert_anchor(
    path: Path, id: int, pos: Point, *, n: Precision = DEFAULT_PRECISION
) -> EditResult:
    """
    Raise the degree of segment ``id`` by one step, using ``pos`` as the new
    control point: a line becomes ``Q pos p``, a quadratic ``Q c p`` becomes
    ``C c pos p``. A cubic cannot take another control and is subdivided at
    ``pos`` instead (see :func:`split_segment`).
    """
    item = _segment(path, id)
    match item:
        case Line():
            path.replace(id, Quad([pos, item.anchor]))
        case Quad():
            path.replace(id, Cubic([item.controls[0], pos, item.anchor]))
        case _:
            return split_segment(path, id, pos, n=n)
    aid = anchor_id(path, id)
    return EditResult(True, anchors=[aid], handles=_handles(path, aid))


def append_anchor(
    path: Path, id: int, pos: Point, handle: Point | None = None
) -> EditResult:
    """
    Extend an open subpath from its endpoint ``id`` by a new anchor at ``pos``.

    Without ``handle`` the new segment is a line (corner point). When the
    pointer was dragged to ``handle`` after placing the point, the segment is a
    quadratic whose control is ``handle`` reflected through ``pos``.

    :raises InvalidOperation: If ``id`` is not an endpoint of an open subpath.
    """
    aid = _anchor(path, id)
    if not is_endpoint(path, aid):
        raise InvalidOperation(f"Anchor {aid} is not an endpoint of an open subpath")
    subpath = subpath_of(path, aid)

    def segment(to: Point) -> Segment:
        if handle is None:
            return Line([to])
        return Quad([handle.reflected(pos), to])

    if subpath.anchors[-1].id == aid:
        new = path.insert(subpath.stop, segment(pos))
    else:
        head = subpath.head
        assert head.id is not None
        path.replace(head.id, segment(head.anchor))
        new = path.insert(subpath.start, Move([pos]))
    assert new.id is not None
    return EditResult(True, True, anchors=[new.id], handles=_handles(path, new.id))


def start_subpath(path: Path, pos: Point) -> EditResult:
    """Start a new subpath consisting of a single anchor at ``pos``."""
    new = path.append(Move([pos]))
    assert new.id is not None
    return EditResult(True, True, anchors=[new.id])


# ------------------------------------------------------------------------------
# Splitting, removing and merging
# ------------------------------------------------------------------------------

type _Ring = list[tuple[int, Instruction]]


def _ring(subpath: Subpath) -> _Ring:
    """
    ``(anchor id, segment ending there)`` around a closed subpath, starting at
    its head.
    """
    closing = subpath.closing
    head = subpath.head
    assert closing is not None and head.id is not None
    ring: _Ring = [(head.id, closing)]
    for item in subpath.anchors[1:]:
        assert item.id is not None
        ring.append((item.id, item))
    return ring


def _unroll(path: Path, ring: _Ring, close: Instruction | None) -> list[Instruction]:
    """
    Instructions visiting a ring of anchors starting and ending at its first
    entry; closed with ``close`` if given.
    """
    head_id, head_segment = ring[0]
    ids = {aid for aid, _ in ring}
    items: list[Instruction] = [Move([head_segment.anchor], head_id)]
    items += [segment.clone(id=aid) for aid, segment in ring[1:]]
    closing_id = head_segment.id if head_segment.id not in ids else path.new_id()
    items.append(head_segment.clone(id=closing_id))
    if close is not None:
        items.append(close)
    return items


def _cubic_controls(start: Point, segment: Instruction) -> tuple[Point, Point]:
    match segment:
        case Cubic():
            c1, c2 = segment.controls
            return c1, c2
        case Quad():
            q1, q2, _ = quadratic_to_cubic(start, segment.controls[0], segment.anchor)
            return q1, q2
        case _:
            return start, segment.anchor


def _weld(start: Point, seg_in: Instruction, seg_out: Instruction) -> Segment:
    """Single segment replacing ``seg_in`` followed by ``seg_out``."""
    if not seg_in.degree and not seg_out.degree:
        return Line([seg_out.anchor])
    c1, _ = _cubic_controls(start, seg_in)
    _, c2 = _cubic_controls(seg_in.anchor, seg_out)
    return Cubic([c1, c2, seg_out.anchor])


def split_at_anchor(path: Path, id: int) -> EditResult:
    """
    Break the subpath at anchor ``id``.

    An interior anchor of an open subpath becomes the end of one open subpath
    and the start of another; both stay coincident there. A closed subpath is
    opened into a single subpath starting and ending at the anchor. Endpoints
    of open subpaths are left alone.
    """
    aid = _anchor(path, id)
    subpath = subpath_of(path, aid)

    if subpath.closed:
        if subpath.closing is None:
            path.splice(subpath.stop - 1, subpath.stop, [])
            return EditResult(True, True, anchors=[aid])
        ring = _ring(subpath)
        s = next(i for i, (rid, _) in enumerate(ring) if rid == aid)
        path.splice(subpath.start, subpath.stop, _unroll(path, ring[s:] + ring[:s], None))
        return EditResult(True, True, anchors=[aid])

    if is_endpoint(path, aid):
        return EditResult()
    new = path.insert(path.index_of(aid) + 1, Move([path.get(aid).anchor]))
    assert new.id is not None
    return EditResult(True, True, anchors=[aid, new.id])


def _remove_open_boundary(path: Path, subpath: Subpath, aid: int) -> None:
    anchors = subpath.anchors
    if len(anchors) == 1:
        path.splice(subpath.start, subpath.stop, [])
    elif anchors[0].id == aid:
        successor = anchors[1]
        assert successor.id is not None
        path.replace(successor.id, Move([successor.anchor]))
        path.splice(subpath.start, subpath.start + 1, [])
    else:
        idx = path.index_of(aid)
        path.splice(idx, idx + 1, [])


def _weld_anchor(path: Path, subpath: Subpath, aid: int) -> None:
    if not subpath.closed:
        anchors = subpath.anchors
        i = next(k for k, it in enumerate(anchors) if it.id == aid)
        seg_in, seg_out = anchors[i], anchors[i + 1]
        assert seg_out.id is not None
        path.replace(seg_out.id, _weld(anchors[i - 1].anchor, seg_in, seg_out))
        idx = path.index_of(aid)
        path.splice(idx, idx + 1, [])
        return

    if subpath.closing is None:
        path.splice(subpath.start, subpath.stop, [])
        return
    ring = _ring(subpath)
    if len(ring) <= 2:
        # Nothing left to close
        rest = [Move([seg.anchor], rid) for rid, seg in ring if rid != aid]
        path.splice(subpath.start, subpath.stop, rest)
        return

    s = next(i for i, (rid, _) in enumerate(ring) if rid == aid)
    m = len(ring)
    before, removed, after = ring[(s - 1) % m], ring[s], ring[(s + 1) % m]
    welded = _weld(before[1].anchor, removed[1], after[1])
    ring[(s + 1) % m] = (after[0], welded)
    del ring[s]
    path.splice(subpath.start, subpath.stop, _unroll(path, ring, subpath.instructions[-1]))


def remove_anchors(path: Path, ids: Iterable[int], *, weld: bool = False) -> EditResult:
    """
    Remove anchors.

    Endpoints of open subpaths are dropped and their neighbor becomes the new
    endpoint. For any other anchor the default is to cut the subpath there
    (see :func:`split_at_anchor`); with ``weld`` the anchor disappears and its
    two segments are joined into one. Ids no longer present are ignored.
    """
    result = EditResult()
    for id in dict.fromkeys(ids):
        if id not in path:
            logger.debug("Anchor %d already removed", id)
            continue
        aid = _anchor(path, id)
        subpath = subpath_of(path, aid)
        if not subpath.closed and is_endpoint(path, aid):
            _remove_open_boundary(path, subpath, aid)
        elif weld:
            _weld_anchor(path, subpath, aid)
        else:
            result.update(split_at_anchor(path, aid))
            continue
        result.update(EditResult(True, True))
    return result


def merge_subpaths(path: Path, a: int, b: int) -> EditResult:
    """
    Join two endpoints.

    Two endpoints of the same subpath close it. Endpoints of different
    subpaths are oriented tail-to-head (inverting subpaths where necessary)
    and concatenated; coincident joint points collapse into one anchor, others
    are connected by a line. Anything but two distinct endpoints is ignored.
    """
    aid, bid = _anchor(path, a), _anchor(path, b)
    if aid == bid or not (is_endpoint(path, aid) and is_endpoint(path, bid)):
        logger.debug("Merge of anchors %d and %d rejected", aid, bid)
        return EditResult()

    sa, sb = subpath_of(path, aid), subpath_of(path, bid)
    if sa.index == sb.index:
        head, tail = sa.anchors[0], sa.anchors[-1]
        items: list[Instruction] = []
        if tail.anchor != head.anchor:
            items.append(Line([head.anchor]))
        items.append(Close([]))
        path.splice(sa.stop, sa.stop, items)
        return EditResult(True, True, anchors=[aid, bid])

    if sa.anchors[-1].id != aid:
        invert_subpath(path, aid)
    if subpath_of(path, bid).anchors[0].id != bid:
        invert_subpath(path, bid)
    sa, sb = subpath_of(path, aid), subpath_of(path, bid)

    joint = sb.head
    merged = list(sa.instructions)
    if joint.anchor != path.get(aid).anchor:
        merged.append(Line([joint.anchor], joint.id))
    merged += sb.instructions[1:]

    items = []
    for subpath in split_into_subpaths(path):
        if subpath.index == sa.index:
            items += merged
        elif subpath.index != sb.index:
            items += subpath.instructions
    path.splice(0, len(path), items)
    return EditResult(True, True, anchors=[aid])


def reverse_subpath(path: Path, id: int) -> EditResult:
    """Reverse the direction of the subpath owning anchor ``id``."""
    aid = _anchor(path, id)
    invert_subpath(path, aid)
    return EditResult(True, True, anchors=[aid])
