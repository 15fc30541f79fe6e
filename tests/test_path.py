# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from decimal import Decimal

import pytest

from vizpath import Cubic, InvalidOperation, Line, Move, Path, Point, Quad
from vizpath.path import format_number


@pytest.mark.parametrize(
    ("raw", "normalized"),
    [
        ("M 0 0 L 10 0 L 10 10 Z", "M 0 0 L 10 0 L 10 10 L 0 0 Z"),
        ("M 0 0 L 10 0 L 0 0 Z", "M 0 0 L 10 0 L 0 0 Z"),
        ("m 1 1 l 2 0 v 3 h -2 z", "M 1 1 L 3 1 L 3 4 L 1 4 L 1 1 Z"),
        ("M 0 0 L 1 0 L 1 1 Z L 5 5", "M 0 0 L 1 0 L 1 1 L 0 0 Z M 0 0 L 5 5"),
        ("M 0 0 L 1 0 Z Z", "M 0 0 L 1 0 L 0 0 Z"),
        ("M 0 0 C 1 1 2 1 3 0 S 5 -1 6 0", "M 0 0 C 1 1 2 1 3 0 C 4 -1 5 -1 6 0"),
        ("M 0 0 L 3 0 S 5 1 6 0", "M 0 0 L 3 0 C 3 0 5 1 6 0"),
        ("M 0 0 Q 1 1 2 0 T 4 0", "M 0 0 Q 1 1 2 0 Q 3 -1 4 0"),
    ],
)
def test_load_normalizes(raw: str, normalized: str) -> None:
    """Normalize paths on load."""
    path = Path.load(raw)
    assert str(path) == normalized

    # Normalization is idempotent
    assert str(Path.load(str(path))) == normalized


def test_load_folds_offset() -> None:
    """Subtract an origin offset from all coordinates."""
    assert str(Path.load("M 10 10 L 20 10", Point(10, 10))) == "M 0 0 L 10 0"
    assert str(Path.load("M 10 10 L 20 10", Point(0, 0))) == "M 10 10 L 20 10"


def test_ids_unique() -> None:
    """Instruction ids are unique and survive cloning."""
    path = Path.load("M 0 0 L 10 0 L 10 10 Z M 5 5 L 6 6 Z")
    ids = [it.id for it in path]
    assert None not in ids
    assert len(set(ids)) == len(ids)

    clone = path.clone()
    assert [it.id for it in clone] == ids
    clone.get(ids[1]).anchor = Point(99, 99)
    assert path.get(ids[1]).anchor == Point(10, 0)

    # Fresh ids never collide with existing ones
    assert path.new_id() not in ids


def test_normalize_requires_move() -> None:
    path = Path([Line([Point(1, 1)])])
    with pytest.raises(InvalidOperation, match="start with a move"):
        path.normalize()


def test_arena_access() -> None:
    """Look up and replace instructions by id."""
    path = Path.load("M 0 0 L 1 0")
    assert 1 in path
    assert 7 not in path
    with pytest.raises(InvalidOperation, match="No instruction with id 7"):
        path.get(7)

    path.replace(1, Quad([Point(1, 1), Point(2, 0)]))
    assert str(path) == "M 0 0 Q 1 1 2 0"
    assert path.get(1).degree == 1


def test_instruction_points() -> None:
    """Control and anchor points of instructions."""
    with pytest.raises(ValueError, match="takes 3 points"):
        Cubic([Point(0, 0)])

    cubic = Cubic([Point(1, 1), Point(2, 2), Point(3, 0)], 5)
    assert cubic.controls == [Point(1, 1), Point(2, 2)]
    assert cubic.anchor == Point(3, 0)
    assert repr(cubic) == "<Cubic #5: C 1 1 2 2 3 0>"
    with pytest.raises(InvalidOperation, match="no control point 2"):
        cubic.set_control(2, Point(0, 0))
    with pytest.raises(InvalidOperation):
        Line([Point(0, 0)]).set_control(0, Point(1, 1))

    assert isinstance(Move([Point(0, 0)]).clone(), Move)


def test_format() -> None:
    """Fixed decimals and minification."""
    path = Path.load("M 0.5 0 L 1.26 -0.5")
    assert f"{path}" == "M 0.5 0 L 1.26 -0.5"
    assert f"{path:.1}" == "M 0.5 0 L 1.3 -0.5"
    assert f"{path:m}" == "M.5 0 1.26-.5"
    assert f"{path:m.1}" == "M.5 0 1.3-.5"
    with pytest.raises(ValueError, match="Invalid format specifier"):
        f"{path:x}"

    assert format_number(Decimal("-0.0001"), 2) == "0"
    assert format_number(Decimal("2.500"), None) == "2.5"
    assert format_number(Decimal("-0.25"), None, True) == "-.25"
