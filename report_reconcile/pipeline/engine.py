"""Batch reconciliation: raw webhook payload in, display-ready panels out.

Everything here is a pure function of its arguments. The stage runners in
``reconcile.py`` do the reading, writing and logging around it.
"""

from __future__ import annotations

from typing import Any

from report_reconcile.common.constants import EMPTY_BATCH_MESSAGE, KEYWORD_STATUSES
from report_reconcile.common.deterministic import bounded, stable_sorted
from report_reconcile.common.models import (
    SUBJECT_FIELD_BY_KIND,
    BatchStats,
    BrandPanel,
    KeywordPanel,
    RawRecord,
    ReconcileOptions,
    ReconcileResult,
    RecordKind,
    TrafficPanel,
    VisibilityPanel,
)
from report_reconcile.common.numbers import as_number
from report_reconcile.pipeline.align import align_series
from report_reconcile.pipeline.assemble import assemble_bundle
from report_reconcile.pipeline.classify import classify_batch, unwrap_batch
from report_reconcile.pipeline.deltas import compute_delta
from report_reconcile.pipeline.dedupe import dedupe_by_identity, dedupe_by_subject_date
from report_reconcile.pipeline.grouping import build_date_axis, group_by_subject, latest_snapshot, unplaced
from report_reconcile.pipeline.ranking import rank_brands, rank_competitors, top_losers, top_winners


def _by_number_desc(records: list[RawRecord], value_field: str) -> list[RawRecord]:
    return stable_sorted(records, key=lambda r: as_number(r.get(value_field)) or 0.0, descending=True)


def _latest_record(records: list[RawRecord]) -> RawRecord | None:
    if not records:
        return None
    return stable_sorted(records, key=lambda r: str(r.get("report_date") or ""))[-1]


def _traffic_panel(
    summaries: list[RawRecord],
    pages: list[RawRecord],
    sources: list[RawRecord],
    options: ReconcileOptions,
) -> TrafficPanel:
    axis = build_date_axis([*summaries, *pages, *sources])
    page_groups = group_by_subject(pages, SUBJECT_FIELD_BY_KIND[RecordKind.PAGE_METRIC])
    source_groups = group_by_subject(sources, SUBJECT_FIELD_BY_KIND[RecordKind.SOURCE_METRIC])

    ranked_pages = _by_number_desc(latest_snapshot(page_groups, axis), "sessions")
    ranked_sources = _by_number_desc(latest_snapshot(source_groups, axis), "sessions")
    top_pages = [str(p["dimension_value"]) for p in bounded(ranked_pages, options.top_pages)]

    summary = _latest_record(summaries)
    kpis = {
        "total_sessions": as_number(summary.get("total_sessions")) if summary else None,
        "total_leads": as_number(summary.get("total_leads")) if summary else None,
        "conversion_rate": as_number(summary.get("conversion_rate")) if summary else None,
        "page_count": len(ranked_pages),
        "source_count": len(ranked_sources),
    }
    series = [
        *align_series(page_groups, axis, top_pages, "sessions", decimals=options.decimals),
        *align_series(page_groups, axis, top_pages, "leads", decimals=options.decimals),
    ]
    return TrafficPanel(
        bundle=assemble_bundle(axis, series, kpis, label_format=options.label_format),
        summary=dict(summary) if summary else None,
        pages=tuple(dict(p) for p in ranked_pages),
        sources=tuple(dict(s) for s in ranked_sources),
    )


def _keyword_panel(keywords: list[RawRecord], options: ReconcileOptions) -> KeywordPanel:
    axis = build_date_axis(keywords)
    subject_field = SUBJECT_FIELD_BY_KIND[RecordKind.KEYWORD_METRIC]
    grouped = group_by_subject(keywords, subject_field)
    # Undated or unnamed keywords cannot be pinned to a date; they always count.
    snapshot = [*latest_snapshot(grouped, axis), *unplaced(keywords, subject_field)]

    positioned = [(as_number(k.get("current_position")), k) for k in snapshot]
    positioned = [(pos, k) for pos, k in positioned if pos is not None]

    kpis: dict[str, float | int | str | None] = {
        "total_keywords": len(positioned),
        "top10_keywords": sum(1 for pos, _k in positioned if pos <= options.top_position_cutoff),
    }
    for status in KEYWORD_STATUSES:
        kpis[f"{status}_keywords"] = sum(1 for k in snapshot if k.get("status") == status)

    table = [dict(k) for _pos, k in stable_sorted(positioned, key=lambda item: item[0])]
    return KeywordPanel(
        bundle=assemble_bundle(axis, (), kpis, label_format=options.label_format),
        winners=tuple(top_winners(snapshot, options.top_n)),
        losers=tuple(top_losers(snapshot, options.top_n)),
        table=tuple(table),
    )


def _visibility_panel(domains: list[RawRecord], options: ReconcileOptions) -> VisibilityPanel:
    axis = build_date_axis(domains)
    grouped = group_by_subject(domains, SUBJECT_FIELD_BY_KIND[RecordKind.DOMAIN_VISIBILITY])
    own = compute_delta(options.own_domain, grouped.get(options.own_domain, {}), axis, "visibility")
    competitors = rank_competitors(grouped, axis, options.own_domain)

    ordered = [c.domain for c in competitors]
    if options.own_domain in grouped:
        ordered.insert(0, options.own_domain)

    kpis = {
        "own_visibility": own.latest_value,
        "own_previous_visibility": own.previous_value,
        "own_visibility_change": own.change_percent,
        "competitor_count": len(competitors),
    }
    series = align_series(grouped, axis, ordered, "visibility", decimals=options.decimals)
    return VisibilityPanel(
        bundle=assemble_bundle(axis, series, kpis, label_format=options.label_format),
        own_domain=options.own_domain,
        competitors=tuple(competitors),
    )


def _brand_panel(brands: list[RawRecord], options: ReconcileOptions) -> BrandPanel:
    axis = build_date_axis(brands)
    grouped = group_by_subject(brands, SUBJECT_FIELD_BY_KIND[RecordKind.BRAND_VISIBILITY])
    summaries = rank_brands(grouped, axis)

    series = align_series(
        grouped,
        axis,
        [s.brand_name for s in summaries],
        "visibility_percent",
        decimals=options.decimals,
    )
    kpis = {"total_brands": len(grouped)}
    return BrandPanel(
        bundle=assemble_bundle(axis, series, kpis, label_format=options.label_format),
        brands=tuple(summaries),
    )


def reconcile_batch(raw: Any, options: ReconcileOptions | None = None) -> ReconcileResult:
    options = options or ReconcileOptions()
    batch = classify_batch(unwrap_batch(raw, options.wrapper_field), options.dimensions)

    if batch.classified == 0:
        return ReconcileResult(
            status="empty",
            message=EMPTY_BATCH_MESSAGE,
            stats=BatchStats(rows_in=batch.rows_in, unknown=batch.unknown, duplicates_removed=0),
        )

    # Id spaces belong to the upstream table, so identity is scoped per kind.
    deduped: dict[RecordKind, list[RawRecord]] = {}
    for kind in batch.records:
        unique = dedupe_by_identity(batch.of_kind(kind))
        if kind is RecordKind.DOMAIN_VISIBILITY:
            unique = dedupe_by_subject_date(unique, SUBJECT_FIELD_BY_KIND[kind])
        deduped[kind] = unique

    stats = BatchStats(
        rows_in=batch.rows_in,
        unknown=batch.unknown,
        duplicates_removed=batch.classified - sum(len(rows) for rows in deduped.values()),
        by_kind={kind.value: len(rows) for kind, rows in sorted(deduped.items(), key=lambda kv: kv[0].value)},
    )

    def rows(kind: RecordKind) -> list[RawRecord]:
        return deduped.get(kind, [])

    traffic = None
    if rows(RecordKind.SUMMARY) or rows(RecordKind.PAGE_METRIC) or rows(RecordKind.SOURCE_METRIC):
        traffic = _traffic_panel(
            rows(RecordKind.SUMMARY),
            rows(RecordKind.PAGE_METRIC),
            rows(RecordKind.SOURCE_METRIC),
            options,
        )
    keywords = _keyword_panel(rows(RecordKind.KEYWORD_METRIC), options) if rows(RecordKind.KEYWORD_METRIC) else None
    visibility = (
        _visibility_panel(rows(RecordKind.DOMAIN_VISIBILITY), options) if rows(RecordKind.DOMAIN_VISIBILITY) else None
    )
    brands = _brand_panel(rows(RecordKind.BRAND_VISIBILITY), options) if rows(RecordKind.BRAND_VISIBILITY) else None

    panel_dates = [
        panel.bundle.date_axis[-1]
        for panel in (traffic, keywords, visibility, brands)
        if panel is not None and panel.bundle.date_axis
    ]
    return ReconcileResult(
        status="ok",
        message=None,
        stats=stats,
        report_date=max(panel_dates) if panel_dates else None,
        traffic=traffic,
        keywords=keywords,
        visibility=visibility,
        brands=brands,
    )
