# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

from . import operations as ops
from .continuity import is_mirrored
from .errors import InvalidOperation
from .geometry import Point, Transform
from .history import History, HistoryRecord
from .math import DEFAULT_PRECISION, Precision
from .path import Path
from .views import HandleRef, Side, anchors, handle_anchor, handles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorOptions:
    """
    Editor configuration.

    :ivar history_limit: Maximum number of history records kept.
    :ivar decimals: Fixed decimals used when serializing the path for the host.
    :ivar minify: Whether the serialized path is minified.
    :ivar precision: Precision of nearest-point computations on curves.
    """

    history_limit: int = 100
    decimals: int | None = None
    minify: bool = False
    precision: Precision = DEFAULT_PRECISION


@dataclass(frozen=True)
class Modifiers:
    """
    Modifier state of the host's input layer for a single request.

    :ivar mirror: Let mirrored handles follow each other while dragging.
    :ivar weld: Join the neighbors of a removed anchor instead of cutting.
    """

    mirror: bool = True
    weld: bool = False


@dataclass(frozen=True)
class AnchorState:
    id: int
    position: Point
    subpath: int
    closed: bool
    endpoint: bool
    mirrored: bool


@dataclass(frozen=True)
class HandleState:
    ref: HandleRef
    anchor_id: int
    position: Point
    anchor_position: Point
    visible: bool
    mirrored: bool


@dataclass(frozen=True)
class EditorState:
    """Everything the host needs to redraw, in absolute coordinates."""

    path: str
    anchors: list[AnchorState]
    handles: list[HandleState]
    can_undo: bool
    can_redo: bool


class PathEditor:
    """
    Host-facing editor of a single path.

    Positions passed in and reported back are in the host's absolute frame and
    are converted with the shape's placement :class:`~vizpath.geometry.Transform`.
    Each request is applied to a copy of the path and committed only when it
    succeeds; every committed change is recorded in the :class:`History`.
    """

    def __init__(
        self,
        raw: str = "",
        transform: Transform | None = None,
        options: EditorOptions | None = None,
        offset: Point | None = None,
    ) -> None:
        self.options: EditorOptions = options or EditorOptions()
        self.transform: Transform = transform or Transform.identity()
        self.history: History = History(self.options.history_limit)
        self._path: Path = Path()
        self._in_gesture: bool = False
        self._gesture_changed: bool = False
        self.load(raw, offset)

    @property
    def path(self) -> Path:
        """The committed path. Treat as read-only."""
        return self._path

    # ---- loading and history -----------------------------------------------------

    def load(self, raw: str, offset: Point | None = None) -> None:
        """
        Replace the edited path and restart the history from it.

        :raises ParseError: If ``raw`` is malformed; the editor keeps its path.
        """
        self._path = Path.load(raw, offset)
        self.history.reset(self._snapshot())
        logger.info("Editing path with %d instructions", len(self._path))

    def set_transform(self, transform: Transform) -> None:
        """Update the placement after the host moved or transformed the shape."""
        self.transform = transform

    def _snapshot(self) -> HistoryRecord:
        return HistoryRecord(str(self._path), self.transform.offset)

    def _restore(self, record: HistoryRecord) -> None:
        self._path = Path.load(record.path)
        t = self.transform
        self.transform = Transform(t.a, t.b, t.c, t.d, record.offset.x, record.offset.y)

    def undo(self) -> bool:
        """Restore the previous committed state; ``False`` at the baseline."""
        if self._in_gesture:
            raise InvalidOperation("Cannot undo during a gesture")
        record = self.history.undo()
        if record is None:
            return False
        self._restore(record)
        logger.info("Undo")
        return True

    def redo(self) -> bool:
        """Re-apply an undone state; ``False`` if there is nothing to redo."""
        if self._in_gesture:
            raise InvalidOperation("Cannot redo during a gesture")
        record = self.history.redo()
        if record is None:
            return False
        self._restore(record)
        logger.info("Redo")
        return True

    @contextmanager
    def gesture(self) -> Iterator[None]:
        """
        Group the requests of one pointer gesture (e.g. a drag) into a single
        history record.
        """
        if self._in_gesture:
            raise InvalidOperation("A gesture is already in progress")
        self._in_gesture, self._gesture_changed = True, False
        try:
            yield
        finally:
            self._in_gesture = False
            if self._gesture_changed:
                self.history.push(self._snapshot())

    def _commit(self, op: Callable[[Path], ops.EditResult]) -> ops.EditResult:
        working = self._path.clone()
        result = op(working)
        if not result.changed:
            return result
        self._path = working
        if self._in_gesture:
            self._gesture_changed = True
        else:
            self.history.push(self._snapshot())
        logger.debug("Committed %s", result)
        return result

    def _local(self, pos: Point) -> Point:
        return self.transform.to_relative(pos)

    # ---- requests ----------------------------------------------------------------

    def anchor_dragged(self, id: int, pos: Point) -> ops.EditResult:
        local = self._local(pos)
        return self._commit(lambda path: ops.move_anchor(path, id, local))

    def anchors_dragged(self, moves: Mapping[int, Point]) -> ops.EditResult:
        local = {id: self._local(pos) for id, pos in moves.items()}
        return self._commit(lambda path: ops.move_anchors(path, local))

    def handle_dragged(
        self, ref: HandleRef, pos: Point, modifiers: Modifiers = Modifiers()
    ) -> ops.EditResult:
        local = self._local(pos)
        return self._commit(
            lambda path: ops.move_handle(path, ref, local, mirror=modifiers.mirror)
        )

    def request_elevate(self, id: int) -> ops.EditResult:
        n = self.options.precision
        return self._commit(lambda path: ops.elevate_to_curve(path, id, n=n))

    def request_degrade(self, ref: HandleRef, side: Side | None = None) -> ops.EditResult:
        """Turn the segment on ``side`` (default: the handle's side) into a line."""

        def degrade(path: Path) -> ops.EditResult:
            owner = handle_anchor(path, ref)
            return ops.degrade_to_line(path, owner, side or ref.side)

        return self._commit(degrade)

    def request_elevate_quadratic(self, segment_id: int) -> ops.EditResult:
        return self._commit(lambda path: ops.elevate_quadratic(path, segment_id))

    def request_remove(
        self, ids: Iterable[int], modifiers: Modifiers = Modifiers()
    ) -> ops.EditResult:
        ids = list(ids)
        return self._commit(
            lambda path: ops.remove_anchors(path, ids, weld=modifiers.weld)
        )

    def request_merge(self, a: int, b: int) -> ops.EditResult:
        return self._commit(lambda path: ops.merge_subpaths(path, a, b))

    def request_insert(self, segment_id: int, pos: Point) -> ops.EditResult:
        local, n = self._local(pos), self.options.precision
        return self._commit(lambda path: ops.insert_anchor(path, segment_id, local, n=n))

    def request_split_segment(self, segment_id: int, pos: Point) -> ops.EditResult:
        local, n = self._local(pos), self.options.precision
        return self._commit(lambda path: ops.split_segment(path, segment_id, local, n=n))

    def request_append(
        self, id: int, pos: Point, handle: Point | None = None
    ) -> ops.EditResult:
        local = self._local(pos)
        local_handle = self._local(handle) if handle is not None else None
        return self._commit(
            lambda path: ops.append_anchor(path, id, local, local_handle)
        )

    def request_new_subpath(self, pos: Point) -> ops.EditResult:
        local = self._local(pos)
        return self._commit(lambda path: ops.start_subpath(path, local))

    def request_split(self, id: int) -> ops.EditResult:
        return self._commit(lambda path: ops.split_at_anchor(path, id))

    def request_invert(self, id: int) -> ops.EditResult:
        return self._commit(lambda path: ops.reverse_subpath(path, id))

    # ---- output ------------------------------------------------------------------

    def to_string(self) -> str:
        return self._path.as_string(self.options.decimals, self.options.minify)

    def state(self) -> EditorState:
        """Render state of the committed path."""
        path, to_absolute = self._path, self.transform.to_absolute
        mirrored = {a.id: is_mirrored(path, a.id) for a in anchors(path)}
        return EditorState(
            path=self.to_string(),
            anchors=[
                AnchorState(
                    a.id,
                    to_absolute(a.position),
                    a.subpath,
                    a.closed,
                    a.endpoint,
                    mirrored[a.id],
                )
                for a in anchors(path)
            ],
            handles=[
                HandleState(
                    h.ref,
                    h.anchor_id,
                    to_absolute(h.position),
                    to_absolute(h.anchor_position),
                    h.visible,
                    mirrored[h.anchor_id],
                )
                for h in handles(path)
            ],
            can_undo=self.history.can_undo,
            can_redo=self.history.can_redo,
        )
