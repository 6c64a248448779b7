"""Winner/loser extraction and competitor/brand rankings."""

from __future__ import annotations

from typing import Iterable

from report_reconcile.common.constants import BRAND_VISIBILITY_CHANGE_SCALE, DOMAIN_VISIBILITY_CHANGE_SCALE
from report_reconcile.common.deterministic import bounded, stable_sorted
from report_reconcile.common.models import BrandSummary, CompetitorEntry, RawRecord
from report_reconcile.common.numbers import as_number
from report_reconcile.pipeline.align import value_at
from report_reconcile.pipeline.deltas import compute_delta
from report_reconcile.pipeline.grouping import GroupedRecords

TOP_N = 5


def _with_diff(records: Iterable[RawRecord], status: str) -> list[tuple[float, RawRecord]]:
    out = []
    for record in records:
        if record.get("status") != status:
            continue
        diff = as_number(record.get("diff"))
        if diff is None:
            continue
        out.append((diff, record))
    return out


def top_winners(records: Iterable[RawRecord], limit: int = TOP_N) -> list[RawRecord]:
    candidates = [(diff, r) for diff, r in _with_diff(records, "improved") if diff > 0]
    ranked = stable_sorted(candidates, key=lambda item: item[0], descending=True)
    return [dict(record) for _diff, record in bounded(ranked, limit)]


def top_losers(records: Iterable[RawRecord], limit: int = TOP_N) -> list[RawRecord]:
    candidates = [(diff, r) for diff, r in _with_diff(records, "dropped") if diff < 0]
    ranked = stable_sorted(candidates, key=lambda item: item[0])
    return [dict(record) for _diff, record in bounded(ranked, limit)]


def rank_competitors(
    grouped: GroupedRecords,
    axis: tuple[str, ...],
    own_domain: str,
    value_field: str = "visibility",
) -> list[CompetitorEntry]:
    entries = []
    for domain, by_date in grouped.items():
        if domain == own_domain:
            continue
        delta = compute_delta(domain, by_date, axis, value_field, scale=DOMAIN_VISIBILITY_CHANGE_SCALE)
        entries.append(
            CompetitorEntry(
                domain=domain,
                current_visibility=delta.latest_value,
                previous_visibility=delta.previous_value,
                change=delta.change_percent,
            )
        )
    return stable_sorted(entries, key=lambda entry: entry.current_visibility, descending=True)


def rank_brands(
    grouped: GroupedRecords,
    axis: tuple[str, ...],
    value_field: str = "visibility_percent",
) -> list[BrandSummary]:
    latest = axis[-1] if axis else None
    summaries = []
    for brand, by_date in grouped.items():
        delta = compute_delta(brand, by_date, axis, value_field, scale=BRAND_VISIBILITY_CHANGE_SCALE)
        summaries.append(
            BrandSummary(
                brand_name=brand,
                latest_visibility=delta.latest_value,
                previous_visibility=delta.previous_value,
                change=delta.change_percent,
                latest_position=value_at(by_date, latest, "position_avg") if latest else None,
                latest_sentiment=value_at(by_date, latest, "sentiment_avg") if latest else None,
            )
        )
    return stable_sorted(summaries, key=lambda summary: summary.latest_visibility, descending=True)
