"""Order-preserving deduplication of raw records."""

from __future__ import annotations

from typing import Any, Iterable

from report_reconcile.common.models import RawRecord


def _identity(record: RawRecord) -> tuple[str, Any] | None:
    """Typed identity key: ``1`` and ``"1"`` are different ids, ``1`` and ``1.0`` are not."""
    value = record.get("id")
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("str", value)
    return (type(value).__name__, repr(value))


def dedupe_by_identity(records: Iterable[RawRecord]) -> list[RawRecord]:
    """Keep the first record per ``id``; records without an id always pass."""
    seen: set[tuple[str, Any]] = set()
    out: list[RawRecord] = []
    for record in records:
        key = _identity(record)
        if key is None:
            out.append(record)
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(record)
    return out


def dedupe_by_subject_date(
    records: Iterable[RawRecord],
    subject_field: str,
    date_field: str = "report_date",
) -> list[RawRecord]:
    """Keep the first record per subject+date pair.

    Upstream sometimes re-sends the same domain/date row under a new id, so
    identity dedup alone is not enough for those kinds.
    """
    seen: set[tuple[str, str]] = set()
    out: list[RawRecord] = []
    for record in records:
        subject = record.get(subject_field)
        report_date = record.get(date_field)
        if subject is None or report_date is None:
            out.append(record)
            continue
        key = (str(subject), str(report_date))
        if key in seen:
            continue
        seen.add(key)
        out.append(record)
    return out
