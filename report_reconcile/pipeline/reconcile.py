"""Reconcile stage: raw payload on disk -> bundle JSON under out/."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from report_reconcile.common.errors import StageError
from report_reconcile.common.fs import read_json, write_json
from report_reconcile.common.models import ReconcileOptions
from report_reconcile.pipeline.engine import reconcile_batch
from report_reconcile.pipeline.export import write_panel_exports
from report_reconcile.pipeline.fetch import raw_payload_path


def bundle_path(data_dir: Path, source_name: str) -> Path:
    return data_dir / "out" / f"{source_name}_bundle.json"


def _unwrap_envelope(envelope: Any, source_name: str) -> Any:
    # Files written by the fetch stage carry metadata around the payload;
    # hand-placed webhook dumps are used as they are.
    if isinstance(envelope, dict) and envelope.get("source") == source_name and "payload" in envelope:
        return envelope["payload"]
    return envelope


def run_reconcile(
    source_name: str,
    options: ReconcileOptions,
    data_dir: Path,
    run_id: str,
    run_date: str,
) -> dict:
    raw_path = raw_payload_path(data_dir, source_name)
    if not raw_path.exists():
        raise StageError(f"Missing raw payload: {raw_path}")

    result = reconcile_batch(_unwrap_envelope(read_json(raw_path), source_name), options)

    payload = {
        "source": source_name,
        "run_id": run_id,
        "run_date": run_date,
        **result.to_dict(),
    }
    write_json(bundle_path(data_dir, source_name), payload)
    payload["exports"] = [str(path) for path in write_panel_exports(source_name, result, data_dir)]
    return payload
