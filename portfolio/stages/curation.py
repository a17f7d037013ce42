"""Edits to one owner's record list that keep ``display_order`` dense.

Every helper returns a new list of copies numbered ``0..n-1`` in list
order; the input list and its records are left untouched.
"""

from __future__ import annotations

import typing as t

from portfolio.utils import get_logger

logger = get_logger(__name__)

T = t.TypeVar("T")


def renumber(records: t.Sequence[t.Any]) -> t.List[t.Any]:
    return [r.model_copy(update={"display_order": i}) for i, r in enumerate(records)]


def append(records: t.Sequence[t.Any], record: t.Any) -> t.List[t.Any]:
    return renumber([*records, record])


def remove(records: t.Sequence[t.Any], index: int) -> t.List[t.Any]:
    if not 0 <= index < len(records):
        logger.debug("curation.remove: index=%d out of range n=%d", index, len(records))
        return renumber(records)
    return renumber([r for i, r in enumerate(records) if i != index])


def move(records: t.Sequence[t.Any], old_index: int, new_index: int) -> t.List[t.Any]:
    """Move one record to ``new_index``, shifting the ones in between."""
    n = len(records)
    if not (0 <= old_index < n and 0 <= new_index < n):
        logger.debug("curation.move: %d->%d out of range n=%d", old_index, new_index, n)
        return renumber(records)
    items = list(records)
    items.insert(new_index, items.pop(old_index))
    return renumber(items)


def toggle_highlight(records: t.Sequence[t.Any], index: int) -> t.List[t.Any]:
    out = list(records)
    if 0 <= index < len(out) and hasattr(out[index], "is_highlight"):
        out[index] = out[index].model_copy(update={"is_highlight": not out[index].is_highlight})
    return out


def chunk(items: t.Sequence[T], size: int) -> t.List[t.List[T]]:
    size = max(1, int(size))
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
