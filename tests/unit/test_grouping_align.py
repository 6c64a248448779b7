from report_reconcile.pipeline.align import align_series
from report_reconcile.pipeline.grouping import build_date_axis, group_by_subject, latest_snapshot, unplaced


def _vis(domain, report_date, visibility, record_id=None):
    return {"id": record_id, "domain": domain, "report_date": report_date, "visibility": visibility}


def test_build_date_axis_is_sorted_and_distinct():
    records = [
        _vis("a.de", "2024-01-15", 1),
        _vis("b.de", "2024-01-01", 1),
        _vis("a.de", "2024-01-08", 1),
        _vis("b.de", "2024-01-15", 1),
        {"domain": "c.de", "visibility": 1},
    ]
    assert build_date_axis(records) == ("2024-01-01", "2024-01-08", "2024-01-15")


def test_build_date_axis_empty_input():
    assert build_date_axis([]) == ()


def test_group_by_subject_keeps_last_record_for_same_subject_and_date():
    first = _vis("a.de", "2024-01-01", 1, "1")
    last = _vis("a.de", "2024-01-01", 2, "2")

    grouped = group_by_subject([first, last], "domain")

    assert grouped["a.de"]["2024-01-01"] is last


def test_group_by_subject_skips_total_and_incomplete_rows():
    records = [
        {"dimension_value": "TOTAL", "report_date": "2024-01-01", "sessions": 900},
        {"dimension_value": "/pricing", "report_date": "2024-01-01", "sessions": 40},
        {"dimension_value": None, "report_date": "2024-01-01", "sessions": 5},
        {"dimension_value": "/blog", "sessions": 5},
    ]
    grouped = group_by_subject(records, "dimension_value")
    assert list(grouped) == ["/pricing"]


def test_group_by_subject_preserves_first_seen_subject_order():
    records = [
        _vis("z.de", "2024-01-01", 1),
        _vis("a.de", "2024-01-01", 1),
        _vis("z.de", "2024-01-08", 1),
    ]
    assert list(group_by_subject(records, "domain")) == ["z.de", "a.de"]


def test_latest_snapshot_returns_records_on_last_axis_date():
    records = [
        _vis("a.de", "2024-01-01", 1, "1"),
        _vis("a.de", "2024-01-08", 2, "2"),
        _vis("b.de", "2024-01-01", 3, "3"),
    ]
    grouped = group_by_subject(records, "domain")
    axis = build_date_axis(records)

    assert [r["id"] for r in latest_snapshot(grouped, axis)] == ["2"]
    assert latest_snapshot(grouped, ()) == []


def test_align_series_fills_gaps_and_matches_axis_length():
    records = [
        _vis("a.de", "2024-01-01", 10),
        _vis("a.de", "2024-01-15", 12.3456),
        _vis("b.de", "2024-01-08", "n/a"),
    ]
    grouped = group_by_subject(records, "domain")
    axis = build_date_axis(records)

    series = align_series(grouped, axis, ["b.de", "a.de", "missing.de"], "visibility", decimals=2)

    assert [s.name for s in series] == ["b.de", "a.de", "missing.de"]
    assert all(len(s.values) == len(axis) for s in series)
    assert series[0].values == (0.0, 0.0, 0.0)
    assert series[1].values == (10.0, 0.0, 12.35)
    assert series[2].values == (0.0, 0.0, 0.0)


def test_align_series_without_rounding_keeps_raw_values():
    records = [_vis("a.de", "2024-01-01", 1.23456)]
    grouped = group_by_subject(records, "domain")
    series = align_series(grouped, ("2024-01-01",), ["a.de"], "visibility")
    assert series[0].values == (1.23456,)


def test_unplaced_returns_rows_without_subject_or_date_in_input_order():
    dated = {"keyword": "seo", "report_date": "2024-01-08"}
    undated = {"keyword": "sea", "report_date": ""}
    nameless = {"keyword": None, "report_date": "2024-01-08"}
    total = {"keyword": "TOTAL", "report_date": "2024-01-08"}

    assert unplaced([dated, undated, nameless, total], "keyword") == [undated, nameless]


def test_align_series_tags_each_series_with_its_metric():
    grouped = group_by_subject([_vis("a.de", "2024-01-01", 2)], "domain")

    (series,) = align_series(grouped, ("2024-01-01",), ["a.de"], "visibility")

    assert series.metric == "visibility"
