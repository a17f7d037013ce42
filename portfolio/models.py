"""
models.py -- Pydantic models for portfolio records.

Defines the six record kinds (each tagged with a ``kind`` discriminant),
the per-member and team-level containers, the derived highlight shape and
the missing-field report entry. Source rows are loose, so sub-objects and
sections degrade to "absent" and wrong-typed scalars fall back to their
defaults instead of failing validation.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, ValidationInfo, field_validator

DateValue = Union[dt.datetime, dt.date, str, None]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class SortMode(str, Enum):
    CURATED = "curated"
    CHRONOLOGICAL = "chronological"


# ---------------------------------------------------------------------------
# Lenient coercions
# ---------------------------------------------------------------------------

def _mapping_or_none(value: Any) -> Any:
    if value is None or isinstance(value, (dict, BaseModel)):
        return value
    return None


def _role_list(value: Any) -> Any:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(x) for x in value if x is not None]
    return []


def _flag(value: Any) -> Any:
    return False if value is None else value


def _section_list(value: Any) -> Any:
    if not isinstance(value, list):
        return []
    return [x for x in value if isinstance(x, (dict, BaseModel))]


# ---------------------------------------------------------------------------
# Nested sub-objects
# ---------------------------------------------------------------------------

class _Loose(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def degrade_to_default(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            return field.get_default(call_default_factory=True)


class Song(_Loose):
    song_id: Optional[str] = None
    title: Optional[str] = None
    singer: Optional[str] = None
    youtube_link: Optional[str] = None
    date: DateValue = None


class Performance(_Loose):
    performance_id: Optional[str] = None
    performance_title: Optional[str] = None
    date: DateValue = None
    category: Optional[str] = None


class Directing(_Loose):
    directing_id: Optional[str] = None
    title: Optional[str] = None
    date: DateValue = None


# ---------------------------------------------------------------------------
# Record kinds
# ---------------------------------------------------------------------------

class ChoreographyRecord(_Loose):
    kind: Literal["choreography"] = "choreography"
    song: Optional[Song] = None
    role: list[str] = Field(default_factory=list)
    is_highlight: bool = False
    display_order: Optional[int] = None

    @field_validator("song", mode="before")
    @classmethod
    def coerce_song(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, value: Any) -> Any:
        return _role_list(value)

    @field_validator("is_highlight", mode="before")
    @classmethod
    def coerce_highlight(cls, value: Any) -> Any:
        return _flag(value)


class MediaRecord(_Loose):
    kind: Literal["media"] = "media"
    media_id: Optional[str] = None
    youtube_link: Optional[str] = None
    title: Optional[str] = None
    role: list[str] = Field(default_factory=list)
    is_highlight: bool = False
    display_order: Optional[int] = None
    video_date: DateValue = None

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, value: Any) -> Any:
        # older media rows store a single role string
        return _role_list(value)

    @field_validator("is_highlight", mode="before")
    @classmethod
    def coerce_highlight(cls, value: Any) -> Any:
        return _flag(value)


class PerformanceRecord(_Loose):
    kind: Literal["performance"] = "performance"
    performance: Optional[Performance] = None
    display_order: Optional[int] = None

    @field_validator("performance", mode="before")
    @classmethod
    def coerce_performance(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class DirectingRecord(_Loose):
    kind: Literal["directing"] = "directing"
    directing: Optional[Directing] = None
    display_order: Optional[int] = None

    @field_validator("directing", mode="before")
    @classmethod
    def coerce_directing(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class WorkshopRecord(_Loose):
    kind: Literal["workshop"] = "workshop"
    class_name: Optional[str] = None
    class_role: list[str] = Field(default_factory=list)
    country: Optional[str] = None
    class_date: DateValue = None
    display_order: Optional[int] = None

    @field_validator("class_role", mode="before")
    @classmethod
    def coerce_role(cls, value: Any) -> Any:
        return _role_list(value)


class AwardRecord(_Loose):
    kind: Literal["award"] = "award"
    award_title: Optional[str] = None
    issuing_org: Optional[str] = None
    received_date: DateValue = None
    display_order: Optional[int] = None


Record = Annotated[
    Union[
        ChoreographyRecord,
        MediaRecord,
        PerformanceRecord,
        DirectingRecord,
        WorkshopRecord,
        AwardRecord,
    ],
    Field(discriminator="kind"),
]

_RECORDS_ADAPTER = TypeAdapter(list[Record])


def parse_records(raw: list[dict]) -> list:
    """Parse a heterogeneous list of tagged record dicts in one pass."""
    return _RECORDS_ADAPTER.validate_python(raw)


# ---------------------------------------------------------------------------
# Derived view
# ---------------------------------------------------------------------------

class HighlightItem(BaseModel):
    """Unified shape for highlighted choreography and media."""

    kind: Literal["highlight"] = "highlight"
    source: Literal["choreography", "media"]
    youtube_link: str = ""
    role: list[str] = Field(default_factory=list)
    title: str = ""
    video_date: DateValue = None
    display_order: Optional[int] = None


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

class MemberPortfolio(BaseModel):
    """One owner's records, one list per section."""

    choreography: list[ChoreographyRecord] = Field(default_factory=list)
    media: list[MediaRecord] = Field(default_factory=list)
    performances: list[PerformanceRecord] = Field(default_factory=list)
    directing: list[DirectingRecord] = Field(default_factory=list)
    workshops: list[WorkshopRecord] = Field(default_factory=list)
    awards: list[AwardRecord] = Field(default_factory=list)

    @field_validator(
        "choreography", "media", "performances", "directing", "workshops", "awards",
        mode="before",
    )
    @classmethod
    def coerce_section(cls, value: Any) -> Any:
        return _section_list(value)


class MemberContribution(_Loose):
    artist_id: Optional[str] = None
    is_leader: bool = False
    portfolio: MemberPortfolio = Field(default_factory=MemberPortfolio)

    @field_validator("is_leader", mode="before")
    @classmethod
    def coerce_leader(cls, value: Any) -> Any:
        return _flag(value)

    @field_validator("portfolio", mode="before")
    @classmethod
    def coerce_portfolio(cls, value: Any) -> Any:
        if isinstance(value, (dict, BaseModel)):
            return value
        return {}


class TeamAggregate(MemberPortfolio):
    """Deduplicated team-level record set."""


# ---------------------------------------------------------------------------
# Validation report
# ---------------------------------------------------------------------------

class MissingFieldEntry(BaseModel):
    section: str
    field: str
    path: str
