"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from report_reconcile.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive integer")


def validate_sources_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"version", "wrapper_field", "sources"}
    _assert_required_keys(cfg, top_required, "sources config")
    _assert_no_unknown_keys(cfg, top_required, "sources config", allow_unknown)

    sources = cfg["sources"]
    if not isinstance(sources, dict) or not sources:
        raise ConfigError("sources must be a non-empty mapping")

    source_known = {"url", "timeout_seconds"}
    for name, source in sources.items():
        ctx = f"sources.{name}"
        _assert_required_keys(source, {"url"}, ctx)
        _assert_no_unknown_keys(source, source_known, ctx, allow_unknown)
        if not str(source["url"]).startswith(("http://", "https://")):
            raise ConfigError(f"{ctx}.url must be an http(s) URL")
        if "timeout_seconds" in source:
            _assert_positive_int(source["timeout_seconds"], f"{ctx}.timeout_seconds")

    return cfg


def validate_reconcile_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"own_domain", "dimensions", "ranking", "series"}
    _assert_required_keys(cfg, top_required, "reconcile config")
    _assert_no_unknown_keys(cfg, top_required, "reconcile config", allow_unknown)

    if not isinstance(cfg["dimensions"], list) or not cfg["dimensions"]:
        raise ConfigError("dimensions must be a non-empty list")

    ranking_keys = {"top_n", "top_pages", "top_position_cutoff"}
    _assert_required_keys(cfg["ranking"], ranking_keys, "ranking")
    _assert_no_unknown_keys(cfg["ranking"], ranking_keys, "ranking", allow_unknown)
    for key in sorted(ranking_keys):
        _assert_positive_int(cfg["ranking"][key], f"ranking.{key}")

    series_keys = {"decimals", "label_format"}
    _assert_required_keys(cfg["series"], series_keys, "series")
    _assert_no_unknown_keys(cfg["series"], series_keys, "series", allow_unknown)
    decimals = cfg["series"]["decimals"]
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ConfigError("series.decimals must be a non-negative integer")

    return cfg
