# This file is part of vizpath.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""
Mirror relation between the two handles of an anchor.

The relation is never stored: it is read off the current coordinates, so it
holds exactly as long as the handles are point reflections of each other
through their anchor.
"""

from __future__ import annotations

from decimal import localcontext

from .geometry import Point
from .math import exact_precision
from .path import Path
from .views import HandleRef, Side, handle_anchor, handle_refs, handles_at


def is_mirrored(path: Path, anchor_id: int) -> bool:
    r"""
    Whether the handles at ``anchor_id`` are mirrored.

    True iff both handles exist, are visible, belong to different segments and
    satisfy :math:`h_{pre} + h_{next} = 2a` exactly.
    """
    pre, nxt = handles_at(path, anchor_id)
    if pre is None or nxt is None:
        return False
    if not (pre.visible and nxt.visible):
        return False
    if pre.ref.instruction_id == nxt.ref.instruction_id:
        return False
    anchor = pre.anchor_position
    with localcontext() as ctx:
        ctx.prec = exact_precision(*pre.position, *nxt.position, *anchor)
        return pre.position + nxt.position == anchor * 2


def mirror_partner(path: Path, ref: HandleRef) -> HandleRef | None:
    """The handle mirrored with ``ref``, or ``None`` if there is none."""
    owner = handle_anchor(path, ref)
    if not is_mirrored(path, owner):
        return None
    pre, nxt = handle_refs(path, owner)
    return nxt if ref.side == Side.PRE else pre


def mirrored_position(anchor: Point, position: Point) -> Point:
    """Position of the partner handle: :math:`2a - p`."""
    return position.reflected(anchor)
