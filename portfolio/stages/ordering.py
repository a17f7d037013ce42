from __future__ import annotations

import math
import typing as t
from dataclasses import dataclass, field, replace

from portfolio.models import ChoreographyRecord, HighlightItem, MediaRecord, SortMode
from portfolio.utils import get_logger, timestamp_or_zero

logger = get_logger(__name__)

# UI aliases kept for payloads written by the older section headers
_MODE_ALIASES = {
    "curated": SortMode.CURATED,
    "display_order": SortMode.CURATED,
    "chronological": SortMode.CHRONOLOGICAL,
    "date": SortMode.CHRONOLOGICAL,
}

SECTIONS: t.Tuple[str, ...] = (
    "highlights",
    "choreography",
    "media",
    "directing",
    "performances",
    "workshops",
)


def _song_date(it):
    return it.song.date if it.song else None


def _performance_date(it):
    return it.performance.date if it.performance else None


def _directing_date(it):
    return it.directing.date if it.directing else None


DATE_ACCESSORS: t.Dict[str, t.Callable[[t.Any], t.Any]] = {
    "choreography": _song_date,
    "media": lambda it: it.video_date,
    "performance": _performance_date,
    "directing": _directing_date,
    "workshop": lambda it: it.class_date,
    "award": lambda it: it.received_date,
    "highlight": lambda it: it.video_date,
}

# section names as used by containers and the UI
SECTION_KINDS: t.Dict[str, str] = {
    "performances": "performance",
    "workshops": "workshop",
    "awards": "award",
    "highlights": "highlight",
}


def resolve_mode(mode: t.Union[str, SortMode, None]) -> SortMode:
    if isinstance(mode, SortMode):
        return mode
    return _MODE_ALIASES.get(str(mode or "").lower(), SortMode.CURATED)


def _curated_key(it) -> float:
    pos = getattr(it, "display_order", None)
    return math.inf if pos is None else pos


def order(records: t.Sequence[t.Any], kind: str, mode: t.Union[str, SortMode] = SortMode.CURATED) -> t.List[t.Any]:
    """Return ``records`` in curated or chronological order.

    Both sorts are stable and leave ``display_order`` untouched. Chronological
    order is most recent first; missing or unparseable dates count as epoch
    zero and fall to the end.
    """
    resolved = resolve_mode(mode)
    if resolved is SortMode.CHRONOLOGICAL:
        get_date = DATE_ACCESSORS.get(SECTION_KINDS.get(kind, kind))
        if get_date is None:
            return list(records)
        return sorted(records, key=lambda it: -timestamp_or_zero(get_date(it)))
    return sorted(records, key=_curated_key)


# ---------- Highlights ----------

def _choreography_highlight(item: ChoreographyRecord) -> HighlightItem:
    song = item.song
    if song is not None:
        title = f"{song.singer or ''} - {song.title or ''}"
    else:
        title = "Untitled"
    return HighlightItem(
        source="choreography",
        youtube_link=(song.youtube_link if song else None) or "",
        role=list(item.role),
        title=title,
        video_date=song.date if song else None,
        display_order=item.display_order,
    )


def _media_highlight(item: MediaRecord) -> HighlightItem:
    return HighlightItem(
        source="media",
        youtube_link=item.youtube_link or "",
        role=list(item.role),
        title=item.title or "",
        video_date=item.video_date,
        display_order=item.display_order,
    )


def highlights(
    choreography: t.Sequence[ChoreographyRecord],
    media: t.Sequence[MediaRecord],
) -> t.List[HighlightItem]:
    """Project highlighted choreography and media into one list.

    Choreography comes first, then media, each in input order. Recomputed on
    every call; nothing is cached.
    """
    out = [_choreography_highlight(c) for c in choreography if c.is_highlight]
    out.extend(_media_highlight(m) for m in media if m.is_highlight)
    return out


def ordered_highlights(
    choreography: t.Sequence[ChoreographyRecord],
    media: t.Sequence[MediaRecord],
    mode: t.Union[str, SortMode] = SortMode.CURATED,
) -> t.List[HighlightItem]:
    items = order(highlights(choreography, media), "highlight", mode)
    logger.info("order.highlights: items=%d mode=%s", len(items), resolve_mode(mode).value)
    return items


# ---------- Per-section sort state ----------

@dataclass(frozen=True)
class SortState:
    modes: t.Dict[str, SortMode] = field(default_factory=lambda: {s: SortMode.CURATED for s in SECTIONS})

    def mode_for(self, section: str) -> SortMode:
        return self.modes.get(section, SortMode.CURATED)

    def toggle(self, section: str) -> "SortState":
        current = self.mode_for(section)
        flipped = SortMode.CHRONOLOGICAL if current is SortMode.CURATED else SortMode.CURATED
        return replace(self, modes={**self.modes, section: flipped})

    @classmethod
    def from_config(cls, sorting_cfg: t.Optional[dict]) -> "SortState":
        sorting_cfg = sorting_cfg or {}
        default = resolve_mode(sorting_cfg.get("default"))
        modes = {s: default for s in SECTIONS}
        for section, mode in (sorting_cfg.get("sections") or {}).items():
            modes[section] = resolve_mode(mode)
        return cls(modes=modes)
