# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from decimal import Decimal
from typing import Final

import pytest

from vizpath import Cubic, HandleRef, InvalidOperation, Path, Point, Side
from vizpath.bezier import point_at
from vizpath.operations import (
    EditResult,
    append_anchor,
    degrade_to_line,
    elevate_quadratic,
    elevate_to_curve,
    insert_anchor,
    merge_subpaths,
    move_anchor,
    move_anchors,
    remove_anchors,
    reverse_subpath,
    split_at_anchor,
    split_segment,
)
from vizpath.topology import split_into_subpaths

# Ids: M#0 L#1 L#2 L#4 Z#3
square: Final = "M 0 0 L 4 0 L 4 4 Z"


def test_move_anchor() -> None:
    """Move single anchors, including the start of a closed subpath."""
    path = Path.load(square)
    result = move_anchor(path, 1, Point(5, -1))
    assert str(path) == "M 0 0 L 5 -1 L 4 4 L 0 0 Z"
    assert result == EditResult(True, False, [1], [])

    # The start of a closed subpath drags its closing duplicate along
    move_anchor(path, 0, Point(-1, -1))
    assert str(path) == "M -1 -1 L 5 -1 L 4 4 L -1 -1 Z"
    move_anchor(path, 4, Point(0, 0))
    assert str(path) == "M 0 0 L 5 -1 L 4 4 L 0 0 Z"

    with pytest.raises(InvalidOperation, match="not an anchor"):
        move_anchor(path, 3, Point(0, 0))
    with pytest.raises(InvalidOperation, match="No instruction with id 9"):
        move_anchor(path, 9, Point(0, 0))


def test_move_anchors_keeps_handles() -> None:
    """A group move leaves the handles where they are."""
    path = Path.load("M 0 0 C 1 1 2 1 3 0 L 6 0")
    result = move_anchors(path, {0: Point(0, 1), 1: Point(3, 1)})
    assert str(path) == "M 0 1 C 1 1 2 1 3 1 L 6 0"
    assert result.anchors == [0, 1]
    assert result.handles == [HandleRef(1, 0, Side.NEXT), HandleRef(1, 1, Side.PRE)]


def test_elevate_single_line() -> None:
    """Bend a line with a control offset from the anchor."""
    path = Path.load("M 0 0 L 3 0")
    elevate_to_curve(path, 0)
    assert str(path) == "M 0 0 Q 0 1 3 0"

    path = Path.load("M 0 0 L 3 0")
    result = elevate_to_curve(path, 1)
    assert str(path) == "M 0 0 Q 3 -1 3 0"
    assert result.handles == [HandleRef(1, 0, Side.PRE)]

    path = Path.load("M 0 0 L 3 0 L 6 0")
    elevate_to_curve(path, 1)
    assert str(path) == "M 0 0 Q 3 -1 3 0 L 6 0"


def test_elevate_through_anchor() -> None:
    """Next to a curve, both segments become halves of one quadratic."""
    path = Path.load("M 0 0 Q 0 2 2 2 L 4 0")
    result = elevate_to_curve(path, 1)
    assert str(path) == "M 0 0 Q 1 2 2 2 Q 3 2 4 0"
    assert path.get(1).anchor == Point(2, 2)
    assert result.handles == [HandleRef(1, 0, Side.PRE), HandleRef(2, 0, Side.NEXT)]

    path = Path.load("M 0 0 Q 1 1 2 0 L 4 0")
    elevate_to_curve(path, 1)
    assert str(path) == "M 0 0 Q 1 0 2 0 Q 3 0 4 0"


def test_elevate_noop() -> None:
    """An anchor at the end of a curve has nothing to elevate."""
    path = Path.load("M 0 0 Q 1 1 2 0")
    assert not elevate_to_curve(path, 1).changed
    assert str(path) == "M 0 0 Q 1 1 2 0"


def test_elevate_degrade_roundtrip() -> None:
    """Elevating and then degrading restores the line."""
    path = Path.load("M 0 0 L 3 0 L 6 2")
    elevate_to_curve(path, 0)
    assert str(path) != "M 0 0 L 3 0 L 6 2"
    degrade_to_line(path, 0, Side.NEXT)
    assert str(path) == "M 0 0 L 3 0 L 6 2"


def test_degrade() -> None:
    """Turn curves on either side of an anchor into lines."""
    path = Path.load("M 0 0 Q 0 1 3 0 C 4 1 5 1 6 0")
    degrade_to_line(path, 1, Side.NEXT)
    assert str(path) == "M 0 0 Q 0 1 3 0 L 6 0"
    degrade_to_line(path, 1, Side.PRE)
    assert str(path) == "M 0 0 L 3 0 L 6 0"
    assert not degrade_to_line(path, 1, Side.PRE).changed
    assert not degrade_to_line(path, 0, Side.PRE).changed


def test_elevate_quadratic() -> None:
    """Replace a quadratic by the identical cubic."""
    path = Path.load("M 0 0 Q 3 3 6 0")
    elevate_quadratic(path, 1)
    cubic = path.get(1)
    assert isinstance(cubic, Cubic)
    assert cubic.anchor == Point(6, 0)
    c1, c2 = cubic.controls
    assert c1.distance(Point(2, 2)) < Decimal("1e-20")
    assert c2.distance(Point(4, 2)) < Decimal("1e-20")

    assert not elevate_quadratic(path, 1).changed


def test_insert_anchor() -> None:
    """Raise the degree of a segment step by step."""
    path = Path.load("M 0 0 L 4 0")
    insert_anchor(path, 1, Point(2, 2))
    assert str(path) == "M 0 0 Q 2 2 4 0"
    insert_anchor(path, 1, Point(3, 3))
    assert str(path) == "M 0 0 C 2 2 3 3 4 0"

    with pytest.raises(InvalidOperation, match="not a segment"):
        insert_anchor(path, 0, Point(1, 1))


def test_split_segment() -> None:
    """Add an anchor on a line at the nearest point."""
    path = Path.load("M 0 0 L 4 0")
    result = split_segment(path, 1, Point(1, 3))
    assert str(path) == "M 0 0 L 1 0 L 4 0"
    assert result.structural
    assert result.anchors == [2]
    assert path.get(1).anchor == Point(4, 0)

    # At an end point there is nothing to split
    assert not split_segment(path, 1, Point(9, 0)).changed


def test_split_segment_keeps_shape() -> None:
    path = Path.load("M 0 0 C 0 4 4 4 4 0")
    split_segment(path, 1, Point(2, 5))
    assert str(path) == "M 0 0 C 0 2 1 3 2 3 C 3 3 4 2 4 0"

    original = [Point(0, 0), Point(0, 4), Point(4, 4), Point(4, 0)]
    left = [Point(0, 0), *path.instructions[1].points]
    assert point_at(left, "0.5") == point_at(original, "0.25")


def test_append_anchor() -> None:
    """Extend an open subpath from either endpoint."""
    path = Path.load("M 0 0 L 1 0")
    append_anchor(path, 1, Point(2, 0))
    assert str(path) == "M 0 0 L 1 0 L 2 0"

    result = append_anchor(path, 0, Point(-1, 0))
    assert str(path) == "M -1 0 L 0 0 L 1 0 L 2 0"
    assert path.get(0).anchor == Point(0, 0)
    assert path.instructions[0].id in result.anchors

    # Dragging out a handle makes the new segment a curve
    append_anchor(path, 2, Point(3, 0), Point(4, 1))
    assert str(path) == "M -1 0 L 0 0 L 1 0 L 2 0 Q 2 -1 3 0"

    with pytest.raises(InvalidOperation, match="not an endpoint"):
        append_anchor(path, 1, Point(5, 5))
    with pytest.raises(InvalidOperation, match="not an endpoint"):
        append_anchor(Path.load(square), 1, Point(5, 5))


def test_split_at_anchor() -> None:
    """Cut open and closed subpaths at an anchor."""
    path = Path.load("M 0 0 L 1 0 L 2 0")
    result = split_at_anchor(path, 1)
    assert str(path) == "M 0 0 L 1 0 M 1 0 L 2 0"
    assert len(result.anchors) == 2
    assert not split_at_anchor(path, 0).changed

    path = Path.load(square)
    split_at_anchor(path, 2)
    assert str(path) == "M 4 4 L 0 0 L 4 0 L 4 4"
    (subpath,) = split_into_subpaths(path)
    assert not subpath.closed
    assert subpath.head.id == 2


def test_remove_endpoints() -> None:
    """Remove endpoints of open subpaths."""
    path = Path.load("M 0 0 L 1 0 L 2 0")
    remove_anchors(path, [2])
    assert str(path) == "M 0 0 L 1 0"

    path = Path.load("M 0 0 L 1 0 L 2 0")
    remove_anchors(path, [0])
    assert str(path) == "M 1 0 L 2 0"
    remove_anchors(path, [1, 2])
    assert str(path) == ""


def test_remove_interior() -> None:
    """Cut or weld at a removed interior anchor."""
    path = Path.load("M 0 0 L 1 0 L 2 0")
    remove_anchors(path, [1])
    assert str(path) == "M 0 0 L 1 0 M 1 0 L 2 0"

    path = Path.load("M 0 0 L 1 0 L 2 0")
    remove_anchors(path, [1], weld=True)
    assert str(path) == "M 0 0 L 2 0"

    path = Path.load("M 0 0 Q 1 1 2 0 L 4 0")
    remove_anchors(path, [1], weld=True)
    assert len(path) == 2
    welded = path.get(2)
    assert isinstance(welded, Cubic)
    assert welded.anchor == Point(4, 0)
    assert welded.controls[1] == Point(4, 0)


def test_remove_closed() -> None:
    """Remove anchors of a closed subpath."""
    path = Path.load(square)
    remove_anchors(path, [1])
    assert str(path) == "M 4 0 L 4 4 L 0 0 L 4 0"

    path = Path.load(square)
    remove_anchors(path, [1], weld=True)
    assert str(path) == "M 0 0 L 4 4 L 0 0 Z"
    remove_anchors(path, [2], weld=True)
    assert str(path) == "M 0 0"


def test_remove_absent() -> None:
    """Removing an absent anchor changes nothing."""
    path = Path.load("M 0 0 L 1 0")
    result = remove_anchors(path, [7])
    assert not result.changed
    assert str(path) == "M 0 0 L 1 0"


def test_merge_closes_subpath() -> None:
    """Merging both endpoints of a subpath closes it."""
    path = Path.load("M 0 0 L 4 0 L 4 4")
    merge_subpaths(path, 0, 2)
    assert str(path) == "M 0 0 L 4 0 L 4 4 L 0 0 Z"

    path = Path.load("M 0 0 L 4 0 L 0 0")
    merge_subpaths(path, 2, 0)
    assert str(path) == "M 0 0 L 4 0 L 0 0 Z"


def test_merge_subpaths() -> None:
    """Join the tail of one subpath to the head of another."""
    path = Path.load("M 0 0 L 1 0 M 2 0 L 3 0")
    merge_subpaths(path, 1, 2)
    assert str(path) == "M 0 0 L 1 0 L 2 0 L 3 0"
    assert [it.id for it in path] == [0, 1, 2, 3]

    path = Path.load("M 0 0 L 1 0 M 1 0 L 3 0")
    merge_subpaths(path, 1, 2)
    assert str(path) == "M 0 0 L 1 0 L 3 0"


def test_merge_inverts() -> None:
    """Subpaths are inverted so that the endpoints meet tail to head."""
    path = Path.load("M 0 0 L 1 0 M 2 0 L 3 0 M 9 9")
    merge_subpaths(path, 0, 3)
    assert str(path) == "M 1 0 L 0 0 L 3 0 L 2 0 M 9 9"
    assert path.get(0).anchor == Point(0, 0)
    assert path.get(3).anchor == Point(3, 0)


def test_merge_rejected() -> None:
    """Only distinct endpoints can be merged."""
    path = Path.load("M 0 0 L 1 0 L 2 0 M 5 5 L 6 6")
    assert not merge_subpaths(path, 0, 1).changed
    assert not merge_subpaths(path, 0, 0).changed
    assert str(path) == "M 0 0 L 1 0 L 2 0 M 5 5 L 6 6"


def test_reverse_subpath() -> None:
    path = Path.load("M 0 0 L 1 0 M 5 5 L 6 6")
    result = reverse_subpath(path, 3)
    assert str(path) == "M 0 0 L 1 0 M 6 6 L 5 5"
    assert result.structural


def test_merge_coincident_endpoints() -> None:
    """Coincident endpoints collapse into one anchor."""
    path = Path.load("M 0 0 L 10 0 M 10 0 L 20 0")
    assert merge_subpaths(path, 1, 2).changed
    assert str(path) == "M 0 0 L 10 0 L 20 0"
