"""Data models used across the reconcile pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping

from report_reconcile.common.constants import DEFAULT_WRAPPER_FIELD

RawRecord = Mapping[str, Any]


class RecordKind(str, Enum):
    SUMMARY = "summary"
    PAGE_METRIC = "page_metric"
    SOURCE_METRIC = "source_metric"
    DOMAIN_VISIBILITY = "domain_visibility"
    KEYWORD_METRIC = "keyword_metric"
    BRAND_VISIBILITY = "brand_visibility"
    UNKNOWN = "unknown"


SUBJECT_FIELD_BY_KIND = {
    RecordKind.PAGE_METRIC: "dimension_value",
    RecordKind.SOURCE_METRIC: "source",
    RecordKind.DOMAIN_VISIBILITY: "domain",
    RecordKind.KEYWORD_METRIC: "keyword",
    RecordKind.BRAND_VISIBILITY: "brand_name",
}


def to_plain(value: Any) -> Any:
    """Turn tuples, enums and nested mappings into JSON-compatible values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class ReconcileOptions:
    own_domain: str = "eom.de"
    dimensions: tuple[str, ...] = ("page",)
    top_n: int = 5
    top_pages: int = 10
    top_position_cutoff: int = 10
    decimals: int = 2
    label_format: str = "%d.%m."
    wrapper_field: str = DEFAULT_WRAPPER_FIELD

    @classmethod
    def from_config(cls, reconcile_cfg: dict, *, wrapper_field: str = DEFAULT_WRAPPER_FIELD) -> "ReconcileOptions":
        ranking = reconcile_cfg["ranking"]
        series = reconcile_cfg["series"]
        return cls(
            own_domain=str(reconcile_cfg["own_domain"]),
            dimensions=tuple(str(d) for d in reconcile_cfg["dimensions"]),
            top_n=int(ranking["top_n"]),
            top_pages=int(ranking["top_pages"]),
            top_position_cutoff=int(ranking["top_position_cutoff"]),
            decimals=int(series["decimals"]),
            label_format=str(series["label_format"]),
            wrapper_field=wrapper_field,
        )


@dataclass(frozen=True)
class ClassifiedBatch:
    rows_in: int
    records: Mapping[RecordKind, tuple[RawRecord, ...]]
    unknown: int

    def of_kind(self, kind: RecordKind) -> tuple[RawRecord, ...]:
        return self.records.get(kind, ())

    @property
    def classified(self) -> int:
        return sum(len(rows) for rows in self.records.values())


@dataclass(frozen=True)
class AlignedSeries:
    name: str
    values: tuple[float, ...]
    metric: str | None = None


@dataclass(frozen=True)
class DeltaResult:
    subject: str
    latest_value: float
    previous_value: float | None
    change_percent: float


@dataclass(frozen=True)
class CompetitorEntry:
    domain: str
    current_visibility: float
    previous_visibility: float | None
    change: float


@dataclass(frozen=True)
class BrandSummary:
    brand_name: str
    latest_visibility: float
    previous_visibility: float | None
    change: float
    latest_position: float | None
    latest_sentiment: float | None


@dataclass(frozen=True)
class SeriesBundle:
    date_axis: tuple[str, ...]
    date_labels: tuple[str, ...]
    series: tuple[AlignedSeries, ...]
    kpis: Mapping[str, float | int | str | None]


@dataclass(frozen=True)
class TrafficPanel:
    bundle: SeriesBundle
    summary: RawRecord | None
    pages: tuple[RawRecord, ...]
    sources: tuple[RawRecord, ...]


@dataclass(frozen=True)
class KeywordPanel:
    bundle: SeriesBundle
    winners: tuple[RawRecord, ...]
    losers: tuple[RawRecord, ...]
    table: tuple[RawRecord, ...]


@dataclass(frozen=True)
class VisibilityPanel:
    bundle: SeriesBundle
    own_domain: str
    competitors: tuple[CompetitorEntry, ...]


@dataclass(frozen=True)
class BrandPanel:
    bundle: SeriesBundle
    brands: tuple[BrandSummary, ...]


@dataclass(frozen=True)
class BatchStats:
    rows_in: int
    unknown: int
    duplicates_removed: int
    by_kind: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ReconcileResult:
    status: str
    message: str | None
    stats: BatchStats
    report_date: str | None = None
    traffic: TrafficPanel | None = None
    keywords: KeywordPanel | None = None
    visibility: VisibilityPanel | None = None
    brands: BrandPanel | None = None

    @property
    def is_empty(self) -> bool:
        return self.status == "empty"

    def to_dict(self) -> dict[str, Any]:
        return to_plain(asdict(self))
