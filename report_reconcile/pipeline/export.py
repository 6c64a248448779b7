"""CSV exports of the keyword table and competitor list."""

from __future__ import annotations

from pathlib import Path

from report_reconcile.common.fs import write_csv
from report_reconcile.common.models import ReconcileResult

KEYWORD_HEADERS = [
    "keyword",
    "report_date",
    "current_position",
    "last_position",
    "diff",
    "percent_change",
    "status",
    "search_volume_current",
    "search_volume_last",
]

COMPETITOR_HEADERS = [
    "domain",
    "current_visibility",
    "previous_visibility",
    "change",
]


def _serialize_row(row: dict, headers: list[str]) -> dict:
    out = {}
    for key in headers:
        value = row.get(key)
        if value is None:
            out[key] = ""
        elif isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = value
    return out


def write_panel_exports(source_name: str, result: ReconcileResult, data_dir: Path) -> list[Path]:
    written: list[Path] = []
    if result.is_empty:
        return written
    out_dir = data_dir / "out"

    if result.keywords is not None:
        path = out_dir / f"{source_name}_keywords.csv"
        rows = [_serialize_row(dict(row), KEYWORD_HEADERS) for row in result.keywords.table]
        write_csv(path, KEYWORD_HEADERS, rows)
        written.append(path)

    if result.visibility is not None:
        path = out_dir / f"{source_name}_competitors.csv"
        rows = [
            _serialize_row(
                {
                    "domain": entry.domain,
                    "current_visibility": entry.current_visibility,
                    "previous_visibility": entry.previous_visibility,
                    "change": entry.change,
                },
                COMPETITOR_HEADERS,
            )
            for entry in result.visibility.competitors
        ]
        write_csv(path, COMPETITOR_HEADERS, rows)
        written.append(path)

    return written
