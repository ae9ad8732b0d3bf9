from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from typing import Dict, Optional, Set, Tuple

import pytest

from src.stamp_rally.stamp_rally.core.exceptions import ConflictError, StorageError
from src.stamp_rally.stamp_rally.storage.object_store import ReadResult


class InMemoryObjectStore:
    """ObjectStore fake with ETags, conditional puts and injectable failures."""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, str, str]] = {}
        self.failing_reads: Set[str] = set()
        self.failing_writes: Set[str] = set()
        self.puts = 0
        self._etag = 0

    def seed_json(self, key: str, payload) -> str:
        return self.seed(key, json.dumps(payload).encode("utf-8"), content_type="application/json")

    def seed(self, key: str, body: bytes, *, content_type: str = "application/octet-stream") -> str:
        self._etag += 1
        etag = f'"{self._etag}"'
        self.objects[key] = (body, etag, content_type)
        return etag

    def json(self, key: str):
        return json.loads(self.objects[key][0].decode("utf-8"))

    def get(self, key: str) -> ReadResult:
        if key in self.failing_reads:
            return ReadResult.failed(RuntimeError(f"simulated outage for {key}"))
        if key not in self.objects:
            return ReadResult.not_found()
        body, etag, content_type = self.objects[key]
        return ReadResult.found(body, etag=etag, content_type=content_type)

    def put(self, key: str, body: bytes, *, content_type: str, if_match: Optional[str] = None, if_none_match: bool = False):
        if key in self.failing_writes:
            raise StorageError(f"simulated write failure for {key}")
        current = self.objects.get(key)
        if if_match is not None and (current is None or current[1] != if_match):
            raise ConflictError(key)
        if if_none_match and current is not None:
            raise ConflictError(key)
        self.puts += 1
        return self.seed(key, body, content_type=content_type)

    def list_keys(self, prefix: str):
        return sorted(k for k in self.objects if k.startswith(prefix))


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 10, 9, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def app(monkeypatch, store):
    monkeypatch.setenv("APP_ENV", "testing")

    from src.stamp_rally.stamp_rally.container import build_container
    from src.stamp_rally.stamp_rally.main import create_app

    app = create_app(container=build_container(store=store))
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    token = base64.b64encode(b"admin:test-pass").decode("ascii")
    return {"Authorization": f"Basic {token}"}
