"""Helpers for deterministic ordering."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def stable_sorted(items: Iterable[T], key: Callable[[T], object], *, descending: bool = False) -> list[T]:
    # sorted() stays stable with reverse=True, so ties keep input order either way.
    return sorted(items, key=key, reverse=descending)


def bounded(items: Iterable[T], limit: int | None) -> list[T]:
    out = list(items)
    if limit is None:
        return out
    return out[: max(limit, 0)]
