from __future__ import annotations

from typing import Callable, Dict, Hashable, List, Optional, Sequence

from portfolio.models import (
    AwardRecord,
    ChoreographyRecord,
    DirectingRecord,
    MediaRecord,
    MemberContribution,
    PerformanceRecord,
    TeamAggregate,
    WorkshopRecord,
)
from portfolio.utils import get_logger

logger = get_logger(__name__)


# ---------- Identity keys ----------

def choreography_key(item: ChoreographyRecord) -> Optional[Hashable]:
    return (item.song.song_id if item.song else None) or None


def media_key(item: MediaRecord) -> Optional[Hashable]:
    return item.media_id or item.youtube_link or None


def performance_key(item: PerformanceRecord) -> Optional[Hashable]:
    return (item.performance.performance_id if item.performance else None) or None


def directing_key(item: DirectingRecord) -> Optional[Hashable]:
    return (item.directing.directing_id if item.directing else None) or None


def workshop_key(item: WorkshopRecord) -> Hashable:
    # no stable id upstream; name + date identifies a class
    return (item.class_name, str(item.class_date) if item.class_date is not None else None)


def award_key(item: AwardRecord) -> Hashable:
    return (item.issuing_org, item.award_title)


# section -> identity key; None means "not mergeable, drop"
IDENTITY_KEYS: Dict[str, Callable[[object], Optional[Hashable]]] = {
    "choreography": choreography_key,
    "media": media_key,
    "performances": performance_key,
    "directing": directing_key,
    "workshops": workshop_key,
    "awards": award_key,
}


# ---------- First-seen dedup ----------

def dedup_first_seen(
    groups: Sequence[Sequence[object]],
    key_fn: Callable[[object], Optional[Hashable]],
    *,
    section: str = "",
) -> List[object]:
    """Flatten ``groups`` keeping the first record seen for each identity key.

    Records whose key is ``None`` are dropped. Output keeps insertion order.
    """
    seen: Dict[Hashable, object] = {}
    total = 0
    unkeyed = 0
    for group in groups:
        for item in group:
            total += 1
            key = key_fn(item)
            if key is None:
                unkeyed += 1
                continue
            if key not in seen:
                seen[key] = item
    if unkeyed:
        logger.debug("merge.%s: dropped %d records without identity", section, unkeyed)
    logger.info("merge.%s: kept=%d from=%d", section, len(seen), total)
    return list(seen.values())


def merge(members: Sequence[MemberContribution]) -> TeamAggregate:
    """Combine member portfolios into one deduplicated team record set.

    Members are visited in input order and the first record seen for a key
    wins; later copies are dropped, never merged field by field.
    """
    merged: Dict[str, List[object]] = {}
    for section, key_fn in IDENTITY_KEYS.items():
        groups = [getattr(m.portfolio, section) for m in members if m.portfolio is not None]
        merged[section] = dedup_first_seen(groups, key_fn, section=section)
    return TeamAggregate(**merged)
