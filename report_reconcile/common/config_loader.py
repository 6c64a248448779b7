"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from report_reconcile.common.constants import SUPPORTED_SOURCES
from report_reconcile.common.errors import ConfigError
from report_reconcile.common.fs import read_yaml
from report_reconcile.common.schema import validate_reconcile_config, validate_sources_config


@dataclass(frozen=True)
class ConfigBundle:
    sources: dict[str, dict]
    wrapper_field: str
    reconcile: dict


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_dir: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_dir is None:
        return base
    overlay_path = overlay_dir / path.name
    if not overlay_path.exists():
        return base
    return _deep_merge(base, read_yaml(overlay_path))


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    sources_cfg = validate_sources_config(
        _load_yaml_with_overlay(config_dir / "sources.yml", overlay_config_dir),
        allow_unknown=allow_unknown,
    )
    reconcile_cfg = validate_reconcile_config(
        _load_yaml_with_overlay(config_dir / "reconcile.yml", overlay_config_dir),
        allow_unknown=allow_unknown,
    )
    return ConfigBundle(
        sources=sources_cfg["sources"],
        wrapper_field=str(sources_cfg["wrapper_field"]),
        reconcile=reconcile_cfg,
    )


def resolve_sources(target: str, bundle: ConfigBundle) -> list[str]:
    if target == "all":
        return [name for name in SUPPORTED_SOURCES if name in bundle.sources]
    if target not in bundle.sources:
        raise ConfigError(f"Source not configured: {target}")
    return [target]
