"""Latest-vs-previous change with a fixed degenerate-denominator policy."""

from __future__ import annotations

from report_reconcile.common.constants import CHANGE_DIVISOR, DOMAIN_VISIBILITY_CHANGE_SCALE
from report_reconcile.common.models import DeltaResult
from report_reconcile.common.numbers import round_half_up
from report_reconcile.pipeline.align import value_at


def change_percent(latest: float, previous: float | None, scale: int = DOMAIN_VISIBILITY_CHANGE_SCALE) -> float:
    """Percentage change, or 0 when there is no usable previous value.

    Zero therefore also means "not comparable"; check the previous value
    before reading it as "no change".
    """
    if previous is None or previous <= 0:
        return 0.0
    return round_half_up(((latest - previous) / previous) * scale) / CHANGE_DIVISOR


def compute_delta(
    subject: str,
    by_date: dict,
    axis: tuple[str, ...],
    value_field: str,
    *,
    scale: int = DOMAIN_VISIBILITY_CHANGE_SCALE,
) -> DeltaResult:
    latest_value = 0.0
    previous_value = None
    if axis:
        latest = value_at(by_date, axis[-1], value_field)
        latest_value = latest if latest is not None else 0.0
    if len(axis) >= 2:
        previous_value = value_at(by_date, axis[-2], value_field)

    return DeltaResult(
        subject=subject,
        latest_value=latest_value,
        previous_value=previous_value,
        change_percent=change_percent(latest_value, previous_value, scale),
    )
