"""Alignment of per-subject values onto the date axis."""

from __future__ import annotations

from typing import Iterable

from report_reconcile.common.models import AlignedSeries
from report_reconcile.common.numbers import as_number, round_half_up
from report_reconcile.pipeline.grouping import GroupedRecords


def value_at(by_date: dict, report_date: str, value_field: str) -> float | None:
    record = by_date.get(report_date)
    if record is None:
        return None
    return as_number(record.get(value_field))


def align_series(
    grouped: GroupedRecords,
    axis: tuple[str, ...],
    subjects: Iterable[str],
    value_field: str,
    *,
    default: float = 0.0,
    decimals: int | None = None,
) -> list[AlignedSeries]:
    """One series per subject, in the caller's order, one value per axis date.

    Gaps are filled with ``default`` so charts stay continuous. Each series
    carries ``value_field`` as its metric, so one bundle can hold several
    metrics for the same subjects.
    """
    out: list[AlignedSeries] = []
    for subject in subjects:
        by_date = grouped.get(subject, {})
        values = []
        for report_date in axis:
            value = value_at(by_date, report_date, value_field)
            if value is None:
                value = default
            elif decimals is not None:
                value = round_half_up(value, decimals)
            values.append(value)
        out.append(AlignedSeries(name=subject, values=tuple(values), metric=value_field))
    return out
