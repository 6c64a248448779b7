"""Fetch stage: pull each webhook payload and store it untouched under raw/."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from report_reconcile.common.constants import DEFAULT_WRAPPER_FIELD
from report_reconcile.common.fs import write_json
from report_reconcile.common.http import HttpClient, TimeoutConfig
from report_reconcile.common.time_utils import utc_timestamp_iso
from report_reconcile.pipeline.classify import unwrap_batch


class FetchScope:
    """At most one live client per source.

    Opening a fetch for a source cancels the client of any earlier fetch for
    that source still in flight. The client is closed when its block exits,
    however it exits.
    """

    def __init__(self, client_factory: Callable[..., HttpClient] = HttpClient) -> None:
        self._client_factory = client_factory
        self._active: dict[str, HttpClient] = {}
        self._lock = threading.Lock()

    def active(self, source_name: str) -> HttpClient | None:
        with self._lock:
            return self._active.get(source_name)

    @contextmanager
    def open(self, source_name: str, **client_kwargs) -> Iterator[HttpClient]:
        client = self._client_factory(**client_kwargs)
        with self._lock:
            previous = self._active.get(source_name)
            self._active[source_name] = client
        if previous is not None:
            previous.cancel()
        try:
            yield client
        finally:
            with self._lock:
                if self._active.get(source_name) is client:
                    del self._active[source_name]
            client.close()


def raw_payload_path(data_dir: Path, source_name: str) -> Path:
    return data_dir / "raw" / f"{source_name}.json"


def run_fetch(
    source_name: str,
    source_config: dict,
    data_dir: Path,
    run_id: str,
    run_date: str,
    *,
    scope: FetchScope | None = None,
    wrapper_field: str = DEFAULT_WRAPPER_FIELD,
) -> dict:
    scope = scope or FetchScope()
    timeout = TimeoutConfig(read=float(source_config.get("timeout_seconds", 60)))

    with scope.open(source_name, timeout=timeout) as client:
        payload = client.get_json(source_config["url"])

    envelope = {
        "source": source_name,
        "run_id": run_id,
        "run_date": run_date,
        "fetched_at": utc_timestamp_iso(),
        "payload": payload,
    }
    write_json(raw_payload_path(data_dir, source_name), envelope)

    return {
        "source": source_name,
        "run_id": run_id,
        "rows": len(unwrap_batch(payload, wrapper_field)),
    }
