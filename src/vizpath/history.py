# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import logging
from dataclasses import dataclass

from .geometry import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryRecord:
    """
    Snapshot of a committed state.

    :ivar path: Serialized path.
    :ivar offset: Translation of the shape's placement at commit time.
    """

    path: str
    offset: Point


class History:
    """
    Bounded undo/redo history.

    Records are kept in commit order together with a cursor on the current
    one. Undo moves the cursor back, redo forward; pushing a new record drops
    everything after the cursor. Once more than ``limit`` records are stored,
    the oldest ones are forgotten.
    """

    def __init__(self, limit: int = 100) -> None:
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit: int = limit
        self._records: list[HistoryRecord] = []
        self._cursor: int = -1

    def reset(self, record: HistoryRecord) -> None:
        """Forget everything and start over from ``record`` as baseline."""
        self._records = [record]
        self._cursor = 0

    def push(self, record: HistoryRecord) -> None:
        """Commit ``record`` as the new current state."""
        if self._cursor + 1 < len(self._records):
            logger.debug("Discarding %d redo records", len(self._records) - self._cursor - 1)
        del self._records[self._cursor + 1 :]
        self._records.append(record)
        overflow = len(self._records) - self.limit
        if overflow > 0:
            del self._records[:overflow]
        self._cursor = len(self._records) - 1

    @property
    def current(self) -> HistoryRecord | None:
        return self._records[self._cursor] if self._records else None

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor + 1 < len(self._records)

    def undo(self) -> HistoryRecord | None:
        """Step back; returns the record to restore or ``None`` at the baseline."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._records[self._cursor]

    def redo(self) -> HistoryRecord | None:
        """Step forward again; returns the record to restore or ``None``."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._records[self._cursor]

    def __len__(self) -> int:
        return len(self._records)
