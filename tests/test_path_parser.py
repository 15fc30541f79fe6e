# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

import pytest

from vizpath import ParseError, PathParser


def test_parse_simple() -> None:
    assert PathParser.parse("M 1 2 L 3 4") == [["M", "1", "2"], ["L", "3", "4"]]
    assert PathParser.parse("") == []


def test_parse_separators() -> None:
    """Commas, signs and exponents as separators."""
    assert PathParser.parse("M0,0C1,1,2,2,3,3Z") == [
        ["M", "0", "0"],
        ["C", "1", "1", "2", "2", "3", "3"],
        ["Z"],
    ]
    assert PathParser.parse("M-1-2.5.5 1") == [["M", "-1", "-2.5"], ["L", ".5", "1"]]
    assert PathParser.parse("M1e1 2") == [["M", "1e1", "2"]]


def test_parse_implicit_commands() -> None:
    """Repeated parameter groups repeat the command; after a move they are lines."""
    assert PathParser.parse("M1 2 3 4") == [["M", "1", "2"], ["L", "3", "4"]]
    assert PathParser.parse("m1 2 3 4") == [["m", "1", "2"], ["l", "3", "4"]]
    assert PathParser.parse("M0 0 h1 2") == [["M", "0", "0"], ["h", "1"], ["h", "2"]]


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("L 1 2", "must start with a move"),
        ("M 0 0 X 1", "invalid command"),
        ("M 0", "expects 2 numbers"),
        ("M 0 0 L 1 Z", "expects 2 numbers"),
        ("M 0 0 Z 1 2", "unexpected number"),
        ("M 0 0 # 1 1", "unexpected '#'"),
    ],
)
def test_parse_malformed(path: str, message: str) -> None:
    """Reject malformed paths with a descriptive error."""
    with pytest.raises(ParseError, match=message):
        PathParser.parse(path)


def test_parse_rejects_arcs() -> None:
    """Elliptical arcs are not supported."""
    with pytest.raises(ParseError, match="elliptical arcs"):
        PathParser.parse("M 0 0 A 1 1 0 0 1 5 5")


def test_tokenize() -> None:
    assert PathParser.tokenize("M1,-2z") == [
        ("command", "M"),
        ("number", "1"),
        ("number", "-2"),
        ("command", "z"),
    ]
