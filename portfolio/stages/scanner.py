from __future__ import annotations

import re
import typing as t
from collections import Counter

from portfolio.models import MissingFieldEntry
from portfolio.utils import get_logger

logger = get_logger(__name__)

PLACEHOLDER_DATE = "9999-01-01"

# (artist key, team key, label)
SECTIONS: t.Tuple[t.Tuple[str, str, str], ...] = (
    ("choreography", "team_choreography", "Choreography"),
    ("media", "team_media", "Media"),
    ("performance", "team_performance", "Performance"),
    ("directing", "team_directing", "Directing"),
    ("workshop", "team_workshop", "Workshop"),
    ("awards", "team_awards", "Award"),
)

_YEAR_ONLY = re.compile(r"^\d{4}$")
_YEAR_MONTH = re.compile(r"^\d{4}-\d{2}$")


def humanize(key: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in key.replace("_", " ").split(" "))


def reason_for(value: t.Any) -> t.Optional[str]:
    """Classify why a flagged value is incomplete; ``None`` means no suffix."""
    if value is None or value == "":
        return "empty"
    if not isinstance(value, str):
        return None
    if value == PLACEHOLDER_DATE:
        return "placeholder date"
    if _YEAR_ONLY.match(value):
        return "missing month and day"
    if _YEAR_MONTH.match(value):
        return "missing day"
    return "incomplete"


def infer_portfolio_type(data: t.Any) -> str:
    if isinstance(data, dict):
        if "team_profile" in data or any(str(k).startswith("team_") for k in data):
            return "team"
    return "artist"


def _scan_section(items: t.Any, array_key: str, label: str) -> t.List[MissingFieldEntry]:
    out: t.List[MissingFieldEntry] = []
    if not isinstance(items, list):
        return out
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        tags = item.get("_validation")
        if not isinstance(tags, dict):
            continue
        for key, status in tags.items():
            if status != "invalid":
                continue
            key = str(key)
            reason = reason_for(item.get(key))
            name = humanize(key)
            out.append(
                MissingFieldEntry(
                    section=f"{label} #{idx + 1}",
                    field=f"{name} ({reason})" if reason else name,
                    path=f"{array_key}[{idx}].{key}",
                )
            )
    return out


def scan(data: t.Any, portfolio_type: t.Optional[str] = None) -> t.List[MissingFieldEntry]:
    """Collect every field the extractor tagged ``"invalid"``.

    Items without a ``_validation`` map are trusted as-is. Entries come back
    in section, item, field order.
    """
    if not isinstance(data, dict):
        logger.info("scan: payload is not an object, nothing to report")
        return []
    ptype = portfolio_type or infer_portfolio_type(data)
    entries: t.List[MissingFieldEntry] = []
    for artist_key, team_key, label in SECTIONS:
        key = team_key if ptype == "team" else artist_key
        entries.extend(_scan_section(data.get(key), key, label))
    logger.info("scan: type=%s flagged=%d", ptype, len(entries))
    return entries


def summarize(entries: t.Sequence[MissingFieldEntry]) -> t.Dict[str, int]:
    counts: Counter = Counter(e.section.split(" #")[0] for e in entries)
    return dict(counts)


def render_report_md(entries: t.Sequence[MissingFieldEntry], title: str = "Fields to review") -> str:
    lines = [f"# {title}", ""]
    if not entries:
        lines.append("Nothing flagged.")
        return "\n".join(lines) + "\n"
    current = None
    for e in entries:
        if e.section != current:
            if current is not None:
                lines.append("")
            lines.append(f"## {e.section}")
            current = e.section
        lines.append(f"- {e.field} (`{e.path}`)")
    return "\n".join(lines) + "\n"
