from pathlib import Path

from report_reconcile.common.fs import read_json, write_json
from report_reconcile.pipeline.reports import write_run_summary


def _bundle(status: str, rows_in: int, unknown: int = 0, duplicates: int = 0) -> dict:
    return {
        "status": status,
        "message": None if status == "ok" else "no data received",
        "report_date": "2024-01-08" if status == "ok" else None,
        "stats": {"rows_in": rows_in, "unknown": unknown, "duplicates_removed": duplicates, "by_kind": {}},
    }


def test_run_summary_totals_and_partial_status(tmp_path: Path):
    write_json(tmp_path / "out" / "sistrix_bundle.json", _bundle("ok", 10, unknown=1, duplicates=2))
    write_json(tmp_path / "out" / "geo_ai_bundle.json", _bundle("empty", 0))

    path = write_run_summary(tmp_path, run_id="run-1", run_date="2024-01-08", sources=["sistrix", "geo_ai"])

    summary = read_json(path)
    assert summary["status"] == "partial"
    assert summary["totals"] == {"rows_in": 10, "unknown_records": 1, "duplicates_removed": 2}
    assert summary["source_reports"]["geo_ai"]["message"] == "no data received"


def test_run_summary_flags_missing_bundle_as_error(tmp_path: Path):
    write_json(tmp_path / "out" / "sistrix_bundle.json", _bundle("ok", 3))

    path = write_run_summary(tmp_path, run_id="run-1", run_date="2024-01-08", sources=["sistrix", "report"])

    summary = read_json(path)
    assert summary["status"] == "error"
    assert summary["source_reports"]["report"] == {"status": "missing_bundle"}
