"""Final chart/KPI bundle assembly."""

from __future__ import annotations

from typing import Iterable, Mapping

from report_reconcile.common.errors import ContractError
from report_reconcile.common.models import AlignedSeries, SeriesBundle
from report_reconcile.common.time_utils import format_report_date


def assemble_bundle(
    axis: tuple[str, ...],
    series: Iterable[AlignedSeries],
    kpis: Mapping[str, float | int | str | None],
    *,
    label_format: str = "%d.%m.",
) -> SeriesBundle:
    series = tuple(series)
    for item in series:
        if len(item.values) != len(axis):
            raise ContractError(f"Series {item.name!r} has {len(item.values)} values for {len(axis)} dates")

    return SeriesBundle(
        date_axis=tuple(axis),
        date_labels=tuple(format_report_date(d, label_format) for d in axis),
        series=series,
        kpis=dict(kpis),
    )
