"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from report_reconcile.common.fs import read_json, write_json


def write_run_summary(data_dir: Path, run_id: str, run_date: str, sources: list[str]) -> Path:
    source_reports = {}
    totals = {
        "rows_in": 0,
        "unknown_records": 0,
        "duplicates_removed": 0,
    }
    empty_count = 0
    error_count = 0

    for source_name in sources:
        bundle_file = data_dir / "out" / f"{source_name}_bundle.json"
        if not bundle_file.exists():
            source_reports[source_name] = {"status": "missing_bundle"}
            error_count += 1
            continue

        bundle = read_json(bundle_file)
        stats = bundle.get("stats", {})
        source_reports[source_name] = {
            "status": bundle.get("status"),
            "message": bundle.get("message"),
            "report_date": bundle.get("report_date"),
            "stats": stats,
        }

        totals["rows_in"] += int(stats.get("rows_in", 0))
        totals["unknown_records"] += int(stats.get("unknown", 0))
        totals["duplicates_removed"] += int(stats.get("duplicates_removed", 0))

        if bundle.get("status") == "empty":
            empty_count += 1

    status = "success"
    if error_count > 0:
        status = "error"
    elif empty_count > 0:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "run_date": run_date,
        "status": status,
        "sources": sources,
        "totals": totals,
        "empty_count": empty_count,
        "error_count": error_count,
        "source_reports": source_reports,
    }
    write_json(summary_path, payload)
    return summary_path
