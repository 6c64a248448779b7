"""Numeric coercion and rounding helpers shared by the reconcile stages."""

from __future__ import annotations

import math


def as_number(value: object) -> float | None:
    """Coerce a raw field value to float; anything non-numeric becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value: float, decimals: int = 0) -> float:
    # Halves round towards +inf, matching the figures the dashboards have always shown.
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor
