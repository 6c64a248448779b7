"""CLI entrypoint for the reporting reconcile pipeline."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from report_reconcile.common.config_loader import ConfigBundle, load_all_configs, resolve_sources
from report_reconcile.common.constants import (
    EXIT_HARD_FAIL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    STAGES,
    SUPPORTED_SOURCES,
)
from report_reconcile.common.errors import PipelineError
from report_reconcile.common.logging import build_logger, close_logger, log_event
from report_reconcile.common.models import ReconcileOptions
from report_reconcile.common.time_utils import generate_run_id, parse_run_date
from report_reconcile.pipeline.fetch import FetchScope, run_fetch
from report_reconcile.pipeline.reconcile import run_reconcile
from report_reconcile.pipeline.reports import write_run_summary


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--source", default="all", choices=[*SUPPORTED_SOURCES, "all"])
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def execute_stage(
    stage: str,
    source_name: str,
    bundle: ConfigBundle,
    options: ReconcileOptions,
    scope: FetchScope,
    data_dir: Path,
    run_id: str,
    run_date: str,
) -> dict:
    if stage == "fetch":
        return run_fetch(
            source_name,
            bundle.sources[source_name],
            data_dir,
            run_id,
            run_date,
            scope=scope,
            wrapper_field=bundle.wrapper_field,
        )
    if stage == "reconcile":
        return run_reconcile(source_name, options, data_dir, run_id, run_date)
    raise ValueError(f"Unknown stage: {stage}")


def _rows_out(stage: str, result: dict) -> int | None:
    if stage == "fetch":
        return result.get("rows")
    stats = result.get("stats") or {}
    return sum(stats.get("by_kind", {}).values())


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    run_date = parse_run_date(args.run_date)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
        options = ReconcileOptions.from_config(bundle.reconcile, wrapper_field=bundle.wrapper_field)
        sources = resolve_sources(args.source, bundle)
        stages = STAGES if args.command == "all" else (args.command,)
        scope = FetchScope()

        had_partial_failure = False

        for stage in stages:
            log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
            for source_name in sources:
                started = time.monotonic()
                try:
                    result = execute_stage(stage, source_name, bundle, options, scope, data_dir, run_id, run_date)
                except PipelineError as exc:
                    had_partial_failure = True
                    log_event(
                        logger,
                        f"stage failed for source {source_name}: {exc}",
                        run_id=run_id,
                        stage=stage,
                        source=source_name,
                        event="STAGE_FAIL",
                        status="error",
                        error_code=exc.error_code,
                    )
                    if exc.error_code == "CONTRACT_ERROR" or args.strict:
                        return EXIT_HARD_FAIL
                    continue
                except Exception as exc:
                    had_partial_failure = True
                    log_event(
                        logger,
                        f"unexpected failure for source {source_name}: {exc!r}",
                        run_id=run_id,
                        stage=stage,
                        source=source_name,
                        event="STAGE_FAIL",
                        status="error",
                        error_code="UNEXPECTED_ERROR",
                    )
                    if args.strict:
                        return EXIT_HARD_FAIL
                    continue

                stats = result.get("stats") or {}
                log_event(
                    logger,
                    result.get("message") or f"{stage} done for source {source_name}",
                    run_id=run_id,
                    stage=stage,
                    source=source_name,
                    event="SOURCE_DONE",
                    status=result.get("status", "ok"),
                    duration_ms=int((time.monotonic() - started) * 1000),
                    rows_in=stats.get("rows_in"),
                    rows_out=_rows_out(stage, result),
                )
            log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

        if "reconcile" in stages:
            write_run_summary(data_dir, run_id=run_id, run_date=run_date, sources=sources)
        if had_partial_failure:
            return EXIT_PARTIAL
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
