# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import re
from typing import Final

from .errors import ParseError

_token: Final = re.compile(
    r"(?P<command>[A-Za-z])|(?P<number>[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)
_separator: Final = re.compile(r"^[\s,]*$")

# Number of parameters per command
_arity: Final = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "Z": 0,
}


class PathParser:
    """
    Tokenizer for path data.

    The result of :meth:`parse` is one list per command: the command letter as
    written followed by its parameters as strings. Implicitly repeated commands
    are expanded, and extra coordinate pairs after a move become line commands.
    """

    @staticmethod
    def tokenize(path: str) -> list[tuple[str, str]]:
        """Split ``path`` into ``("command" | "number", text)`` tokens."""
        tokens: list[tuple[str, str]] = []
        pos = 0
        for match in _token.finditer(path):
            gap = path[pos : match.start()]
            if not _separator.match(gap):
                raise ParseError(f"malformed path: unexpected {gap.strip()!r}")
            kind = match.lastgroup
            assert kind is not None
            tokens.append((kind, match.group()))
            pos = match.end()
        if not _separator.match(path[pos:]):
            raise ParseError(f"malformed path: unexpected {path[pos:].strip()!r}")
        return tokens

    @staticmethod
    def parse(path: str) -> list[list[str]]:
        """
        Parse a path string.

        :raises ParseError: If the string is malformed, uses an unknown or
                            unsupported command, or does not start with a move.
        """
        tokens = PathParser.tokenize(path)
        items: list[list[str]] = []
        command: str | None = None
        i = 0

        def take_group(cmd: str) -> None:
            nonlocal i
            arity = _arity[cmd.upper()]
            group = tokens[i : i + arity]
            if len(group) < arity or any(kind != "number" for kind, _ in group):
                raise ParseError(f"malformed path: {cmd!r} expects {arity} numbers")
            items.append([cmd, *(text for _, text in group)])
            i += arity

        while i < len(tokens):
            kind, text = tokens[i]
            if kind == "command":
                i += 1
                key = text.upper()
                if key == "A":
                    raise ParseError("unsupported command: elliptical arcs ('A')")
                if key not in _arity:
                    raise ParseError(f"malformed path: invalid command {text!r}")
                if not items and key != "M":
                    raise ParseError("malformed path: must start with a move command")
                if key == "Z":
                    items.append([text])
                    command = None
                    continue
                take_group(text)
            else:
                if command is None:
                    raise ParseError(f"malformed path: unexpected number {text!r}")
                take_group(command)

            last = items[-1][0]
            if last == "M":
                command = "L"
            elif last == "m":
                command = "l"
            else:
                command = last

        return items
