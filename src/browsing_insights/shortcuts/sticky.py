"""Sticky-position reordering of ranked shortcuts.

Shortcuts the user clicked keep the slot they were clicked in.  Positions
are absolute UI slots, which include sponsored tiles pinned at the front,
so they are shifted down by the number of sponsored tiles before placing.

Placement is best effort: the first guid to claim a slot gets it and the
rest fill the remaining slots in their original order.  If the number of
sponsored tiles changed since the clicks were recorded the positions are
off by that difference.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence


def _as_index(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def place_guids_by_positions(
    guids: Sequence[str],
    pos_map: Mapping[str, int | None],
) -> list[str]:
    """Reorder ``guids`` so each lands on its requested 0-based slot.

    Requests past the end go to the last slot.  Guids without a valid
    request, or that lose a collision, fill the empty slots left to right
    in input order.  The result is a permutation of ``guids``.
    """
    size = len(guids)
    out: list[str | None] = [None] * size
    placed: set[int] = set()

    for i, guid in enumerate(guids):
        idx = _as_index(pos_map.get(guid))
        if idx is None or idx < 0:
            continue
        idx = min(idx, size - 1)
        if out[idx] is None:
            out[idx] = guid
            placed.add(i)

    cursor = 0
    for i, guid in enumerate(guids):
        if i in placed:
            continue
        while cursor < size and out[cursor] is not None:
            cursor += 1
        if cursor < size:
            out[cursor] = guid
            cursor += 1

    return [guid for guid in out if guid is not None]


def apply_sticky_clicks(
    positions: Sequence[int | None],
    guids: Sequence[str],
    num_sponsored: int,
) -> list[str]:
    """Place guids at their last-click positions, shifted past sponsored tiles.

    ``positions`` is aligned with ``guids``; ``None`` (or a missing entry)
    means the guid has no sticky position.  Shifted positions below 0 are
    clamped to 0.
    """
    pos_map: dict[str, int | None] = {}
    for i, guid in enumerate(guids):
        pos = positions[i] if i < len(positions) else None
        if pos is None:
            pos_map[guid] = None
        else:
            pos_map[guid] = max(0, pos - num_sponsored)
    return place_guids_by_positions(guids, pos_map)
