from pathlib import Path

import pytest

from report_reconcile.cli import parse_args, run_command
from report_reconcile.common.fs import read_json, write_json

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config"


def _run_once(data_dir: Path, run_id: str) -> None:
    write_json(data_dir / "raw" / "report.json", {"source": "report", "payload": {"data": []}})
    args = parse_args(
        [
            "reconcile",
            "--source",
            "report",
            "--config-dir",
            str(REPO_CONFIG),
            "--data-dir",
            str(data_dir),
            "--run-date",
            "2024-01-08",
            "--run-id",
            run_id,
        ]
    )
    assert run_command(args) == 0


@pytest.mark.regression
def test_empty_batches_produce_stable_empty_bundles(tmp_path: Path):
    first = tmp_path / "first"
    second = tmp_path / "second"

    _run_once(first, "run-a")
    _run_once(second, "run-b")

    first_bundle = read_json(first / "out" / "report_bundle.json")
    second_bundle = read_json(second / "out" / "report_bundle.json")
    assert first_bundle.pop("run_id") == "run-a"
    assert second_bundle.pop("run_id") == "run-b"
    assert first_bundle == second_bundle
    assert first_bundle["status"] == "empty"
    assert first_bundle["traffic"] is None

    summary = read_json(first / "out" / "reports" / "run_summary.json")
    assert summary["status"] == "partial"
    assert not list((first / "out").glob("*.csv"))
