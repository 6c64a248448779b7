"""Record classification by field presence.

A record is tagged by which keys it carries, checked in a fixed order so a
record that looks like several shapes always lands in the same bucket. A key
counts as present even when its value is null.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Mapping

from report_reconcile.common.constants import DEFAULT_WRAPPER_FIELD
from report_reconcile.common.models import ClassifiedBatch, RawRecord, RecordKind


def unwrap_batch(raw: Any, wrapper_field: str = DEFAULT_WRAPPER_FIELD) -> list[Any]:
    if isinstance(raw, list):
        return list(raw)
    if isinstance(raw, Mapping):
        wrapped = raw.get(wrapper_field)
        if isinstance(wrapped, list):
            return list(wrapped)
    return []


def classify_record(record: Any, dimensions: Iterable[str] = ("page",)) -> RecordKind:
    if not isinstance(record, Mapping):
        return RecordKind.UNKNOWN
    if "total_sessions" in record:
        return RecordKind.SUMMARY
    if "dimension_type" in record and record["dimension_type"] in tuple(dimensions):
        return RecordKind.PAGE_METRIC
    if "source" in record:
        return RecordKind.SOURCE_METRIC
    if "domain" in record and "visibility" in record:
        return RecordKind.DOMAIN_VISIBILITY
    if "keyword" in record:
        return RecordKind.KEYWORD_METRIC
    if "brand_name" in record and "visibility_percent" in record:
        return RecordKind.BRAND_VISIBILITY
    return RecordKind.UNKNOWN


def classify_batch(records: Iterable[Any], dimensions: Iterable[str] = ("page",)) -> ClassifiedBatch:
    dimensions = tuple(dimensions)
    grouped: dict[RecordKind, list[RawRecord]] = defaultdict(list)
    rows_in = 0
    unknown = 0
    for record in records:
        rows_in += 1
        kind = classify_record(record, dimensions)
        if kind is RecordKind.UNKNOWN:
            unknown += 1
            continue
        grouped[kind].append(record)

    return ClassifiedBatch(
        rows_in=rows_in,
        records={kind: tuple(rows) for kind, rows in grouped.items()},
        unknown=unknown,
    )
