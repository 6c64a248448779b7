from pathlib import Path

from report_reconcile.common.fs import read_json
from report_reconcile.pipeline.fetch import FetchScope, raw_payload_path, run_fetch


class FakeClient:
    payload = {"data": [{"id": "1"}, {"id": "2"}]}

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.cancelled = False
        self.closed = False
        self.urls = []

    def cancel(self):
        self.cancelled = True

    def close(self):
        self.closed = True

    def get_json(self, url):
        self.urls.append(url)
        return self.payload


def test_newer_fetch_supersedes_older_one_for_same_source():
    scope = FetchScope(client_factory=FakeClient)

    with scope.open("sistrix") as older:
        with scope.open("sistrix") as newer:
            assert older.cancelled is True
            assert newer.cancelled is False
            assert scope.active("sistrix") is newer
        assert newer.closed is True
        assert scope.active("sistrix") is None

    assert older.closed is True
    assert scope.active("sistrix") is None


def test_fetches_for_different_sources_do_not_interfere():
    scope = FetchScope(client_factory=FakeClient)
    with scope.open("sistrix") as sistrix:
        with scope.open("geo_ai") as geo_ai:
            assert sistrix.cancelled is False
            assert scope.active("geo_ai") is geo_ai


def test_client_released_when_fetch_raises():
    scope = FetchScope(client_factory=FakeClient)
    opened = []
    try:
        with scope.open("report") as client:
            opened.append(client)
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert opened[0].closed is True
    assert scope.active("report") is None


def test_run_fetch_writes_raw_envelope(tmp_path: Path):
    scope = FetchScope(client_factory=FakeClient)

    result = run_fetch(
        "geo_ai",
        {"url": "https://example.test/webhook/geo-ai", "timeout_seconds": 5},
        tmp_path,
        "run-1",
        "2024-01-08",
        scope=scope,
    )

    assert result == {"source": "geo_ai", "run_id": "run-1", "rows": 2}
    envelope = read_json(raw_payload_path(tmp_path, "geo_ai"))
    assert envelope["source"] == "geo_ai"
    assert envelope["run_date"] == "2024-01-08"
    assert envelope["payload"] == FakeClient.payload
