"""UTC-focused helpers for run metadata and report dates."""

from __future__ import annotations

from datetime import date, datetime, timezone


def utc_today_iso() -> str:
    return datetime.now(tz=timezone.utc).date().isoformat()


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def generate_run_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")


def parse_run_date(value: str | None) -> str:
    if not value:
        return utc_today_iso()
    parsed = date.fromisoformat(value)
    return parsed.isoformat()


def format_report_date(value: str, fmt: str) -> str:
    """Render an ISO report date for axis labels; unparseable values pass through."""
    try:
        parsed = date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return value
    return parsed.strftime(fmt)
