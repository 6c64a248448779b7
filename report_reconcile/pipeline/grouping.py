"""Subject grouping and the shared report-date axis."""

from __future__ import annotations

from typing import Iterable

from report_reconcile.common.constants import TOTAL_SENTINEL
from report_reconcile.common.models import RawRecord

DATE_FIELD = "report_date"

GroupedRecords = dict[str, dict[str, RawRecord]]


def _report_date(record: RawRecord) -> str | None:
    value = record.get(DATE_FIELD)
    if value is None or value == "":
        return None
    return str(value)


def build_date_axis(records: Iterable[RawRecord]) -> tuple[str, ...]:
    dates = {d for d in (_report_date(record) for record in records) if d is not None}
    return tuple(sorted(dates))


def group_by_subject(records: Iterable[RawRecord], subject_field: str) -> GroupedRecords:
    """Map subject -> report date -> record.

    Subjects keep first-seen order. A repeated subject+date is resolved by
    keeping the last record seen. The ``TOTAL`` roll-up row is not a subject.
    """
    grouped: GroupedRecords = {}
    for record in records:
        subject = record.get(subject_field)
        report_date = _report_date(record)
        if subject is None or report_date is None:
            continue
        subject = str(subject)
        if subject == TOTAL_SENTINEL:
            continue
        grouped.setdefault(subject, {})[report_date] = record
    return grouped


def latest_snapshot(grouped: GroupedRecords, axis: tuple[str, ...]) -> list[RawRecord]:
    if not axis:
        return []
    latest = axis[-1]
    return [by_date[latest] for by_date in grouped.values() if latest in by_date]


def unplaced(records: Iterable[RawRecord], subject_field: str) -> list[RawRecord]:
    """Records ``group_by_subject`` has no slot for: no subject or no report date."""
    return [r for r in records if r.get(subject_field) is None or _report_date(r) is None]
