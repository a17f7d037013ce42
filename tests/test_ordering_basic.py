import datetime as dt

from portfolio.models import ChoreographyRecord, MediaRecord, PerformanceRecord, SortMode, WorkshopRecord
from portfolio.stages.ordering import SortState, highlights, order, ordered_highlights


def _media(title, video_date=None, display_order=None, **kw):
    return MediaRecord(title=title, video_date=video_date, display_order=display_order, **kw)


def test_curated_orders_by_display_order_with_missing_last():
    items = [_media("p", display_order=2), _media("q"), _media("r", display_order=0), _media("s", display_order=1), _media("u")]
    out = order(items, "media", "curated")
    assert [m.title for m in out] == ["r", "s", "p", "q", "u"]
    # stored order untouched
    assert [m.display_order for m in items] == [2, None, 0, 1, None]


def test_curated_ties_keep_input_order():
    items = [_media("a", display_order=1), _media("b", display_order=0), _media("c", display_order=1)]
    assert [m.title for m in order(items, "media", SortMode.CURATED)] == ["b", "a", "c"]


def test_chronological_most_recent_first_missing_dates_last():
    items = [
        _media("a", "2021-01-01"),
        _media("b", None),
        _media("c", "2023-06-01"),
        _media("d", "not a date"),
        _media("e", "2021-01-01"),
    ]
    out = order(items, "media", "chronological")
    assert [m.title for m in out] == ["c", "a", "e", "b", "d"]


def test_chronological_handles_partial_and_datetime_values():
    items = [
        _media("year", "2020"),
        _media("month", "2020-05"),
        _media("dt", dt.datetime(2020, 3, 1, 12, 0)),
        _media("iso", "2019-12-31T23:00:00Z"),
    ]
    out = order(items, "media", "chronological")
    assert [m.title for m in out] == ["month", "dt", "year", "iso"]


def test_chronological_never_raises_on_out_of_range_dates():
    items = [
        _media("late", "9999-12-31T23:00:00-05:00"),
        _media("a", "2021-01-01"),
        _media("early", "0001-01-01T00:00:00+01:00"),
        _media("b", "2023-06-01"),
    ]
    out = order(items, "media", "chronological")
    assert [m.title for m in out] == ["b", "a", "late", "early"]


def test_chronological_dispatches_on_kind():
    perf = [
        PerformanceRecord.model_validate({"performance": {"performance_id": "p1", "date": "2019-01-01"}}),
        PerformanceRecord.model_validate({"performance": None}),
        PerformanceRecord.model_validate({"performance": {"performance_id": "p2", "date": "2022-01-01"}}),
    ]
    out = order(perf, "performance", "chronological")
    assert [p.performance.performance_id if p.performance else None for p in out] == ["p2", "p1", None]

    workshops = [WorkshopRecord(class_name="old", class_date="2018-02-02"), WorkshopRecord(class_name="new", class_date="2024-02-02")]
    assert [w.class_name for w in order(workshops, "workshops", "date")] == ["new", "old"]


def test_unknown_mode_falls_back_to_curated():
    items = [_media("b", "2024-01-01", 1), _media("a", "2020-01-01", 0)]
    assert [m.title for m in order(items, "media", "sideways")] == ["a", "b"]


def _sample():
    choreography = [
        ChoreographyRecord.model_validate({
            "song": {"song_id": "s1", "singer": "IU", "title": "Blueming", "youtube_link": "yt1", "date": "2020-01-01"},
            "role": ["main"],
            "is_highlight": True,
            "display_order": 1,
        }),
        ChoreographyRecord.model_validate({"song": {"song_id": "s2"}, "is_highlight": False, "display_order": 2}),
        ChoreographyRecord.model_validate({"is_highlight": True, "display_order": 0}),
    ]
    media = [
        MediaRecord.model_validate({"media_id": "m1", "youtube_link": "yt2", "title": "Live", "role": "lead",
                                    "is_highlight": True, "display_order": 0, "video_date": "2022-08-15"}),
        MediaRecord.model_validate({"media_id": "m2", "is_highlight": None}),
    ]
    return choreography, media


def test_highlights_projection():
    choreography, media = _sample()
    hl = highlights(choreography, media)
    assert [h.source for h in hl] == ["choreography", "choreography", "media"]
    assert hl[0].title == "IU - Blueming"
    assert hl[0].youtube_link == "yt1"
    assert hl[0].video_date == "2020-01-01"
    assert hl[1].title == "Untitled" and hl[1].youtube_link == ""
    assert hl[2].role == ["lead"]


def test_highlights_are_recomputed_identically():
    choreography, media = _sample()
    assert highlights(choreography, media) == highlights(choreography, media)
    assert [h.model_dump_json() for h in highlights(choreography, media)] == [
        h.model_dump_json() for h in highlights(choreography, media)
    ]


def test_ordered_highlights_both_modes():
    choreography, media = _sample()
    curated = ordered_highlights(choreography, media, "curated")
    assert [h.title for h in curated] == ["Untitled", "Live", "IU - Blueming"]
    chrono = ordered_highlights(choreography, media, "chronological")
    assert [h.title for h in chrono] == ["Live", "IU - Blueming", "Untitled"]


def test_sort_state_toggles_one_section():
    state = SortState()
    assert state.mode_for("media") is SortMode.CURATED
    toggled = state.toggle("media")
    assert toggled.mode_for("media") is SortMode.CHRONOLOGICAL
    assert toggled.mode_for("choreography") is SortMode.CURATED
    # original untouched
    assert state.mode_for("media") is SortMode.CURATED
    assert toggled.toggle("media").mode_for("media") is SortMode.CURATED


def test_sort_state_from_config():
    state = SortState.from_config({"default": "chronological", "sections": {"media": "display_order"}})
    assert state.mode_for("media") is SortMode.CURATED
    assert state.mode_for("highlights") is SortMode.CHRONOLOGICAL


def test_parse_records_dispatches_on_kind():
    from portfolio.models import AwardRecord, parse_records

    records = parse_records([
        {"kind": "award", "award_title": "Best", "received_date": "2020-01-01"},
        {"kind": "media", "media_id": "m1", "role": "lead"},
        {"kind": "award", "award_title": "Newer", "received_date": "2022-01-01"},
    ])
    assert isinstance(records[0], AwardRecord) and isinstance(records[1], MediaRecord)
    assert records[1].role == ["lead"]
    awards = [r for r in records if r.kind == "award"]
    assert [a.award_title for a in order(awards, "award", "chronological")] == ["Newer", "Best"]
