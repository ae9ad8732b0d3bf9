from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.stamp_rally.stamp_rally.core.exceptions import ConflictError, StorageError, ValidationError
from src.stamp_rally.stamp_rally.records.s3_record_repository import S3UserStampRecordRepository
from src.stamp_rally.stamp_rally.records.service import StampRecordService


def _service(store, clock, **kwargs):
    repo = S3UserStampRecordRepository(store, clock=clock)
    return StampRecordService(repo, clock=clock, **kwargs)


def test_acquire_is_idempotent(store, clock, fixed_now):
    svc = _service(store, clock)

    _, first_new = svc.acquire("u1", "a", "Gate")
    clock.now = datetime(2024, 3, 12, tzinfo=timezone.utc)
    record, second_new = svc.acquire("u1", "a", "Gate")

    assert first_new is True
    assert second_new is False
    assert record.stamp_ids == ["a"]
    assert record.stamps[0].acquired_at == fixed_now
    assert store.puts == 1
    assert store.json("user-stamps/u1.json")["stamps"][0]["acquiredAt"] == "2024-03-10T09:15:00.000Z"


def test_acquire_appends_and_preserves_created_at(store, clock):
    store.seed_json(
        "user-stamps/u1.json",
        {
            "userId": "u1",
            "stamps": [{"stampId": "a", "stampName": "Gate", "acquiredAt": "2024-03-01T00:00:00.000Z", "location": None}],
            "createdAt": "2024-03-01T00:00:00.000Z",
            "updatedAt": "2024-03-01T00:00:00.000Z",
        },
    )
    svc = _service(store, clock)

    record, is_new = svc.acquire("u1", "b", "Tower")

    stored = store.json("user-stamps/u1.json")
    assert is_new is True
    assert record.stamp_ids == ["a", "b"]
    assert [s["stampId"] for s in stored["stamps"]] == ["a", "b"]
    assert stored["stamps"][1]["stampName"] == "Tower"
    assert stored["createdAt"] == "2024-03-01T00:00:00.000Z"
    assert stored["updatedAt"] == "2024-03-10T09:15:00.000Z"


def test_acquire_on_legacy_record_persists_migrated_shape(store, clock):
    store.seed_json("user-stamps/u1.json", ["a"])
    svc = _service(store, clock)

    svc.acquire("u1", "b", "Tower")

    stored = store.json("user-stamps/u1.json")
    assert [s["stampId"] for s in stored["stamps"]] == ["a", "b"]
    assert stored["stamps"][0]["stampName"] is None


class _RacingRepo:
    """Wraps a repository and lets another writer sneak in before the first save."""

    def __init__(self, inner, store, races: int):
        self._inner = inner
        self._store = store
        self._races = races

    def load(self, user_id):
        return self._inner.load(user_id)

    def save(self, user_id, record):
        if self._races > 0:
            self._races -= 1
            self._store.seed_json(
                f"user-stamps/{user_id}.json",
                {"userId": user_id, "stamps": [{"stampId": f"other{self._races}", "acquiredAt": None}]},
            )
        return self._inner.save(user_id, record)


def test_acquire_retries_after_concurrent_update(store, clock):
    repo = _RacingRepo(S3UserStampRecordRepository(store, clock=clock), store, races=1)
    svc = StampRecordService(repo, clock=clock)

    record, is_new = svc.acquire("u1", "a", "Gate")

    assert is_new is True
    assert record.stamp_ids == ["other0", "a"]


def test_acquire_gives_up_after_max_attempts(store, clock):
    repo = _RacingRepo(S3UserStampRecordRepository(store, clock=clock), store, races=5)
    svc = StampRecordService(repo, clock=clock, max_attempts=2)

    with pytest.raises(ConflictError):
        svc.acquire("u1", "a", "Gate")


def test_acquire_surfaces_write_failures(store, clock):
    store.failing_writes.add("user-stamps/u1.json")
    svc = _service(store, clock)

    with pytest.raises(StorageError):
        svc.acquire("u1", "a", "Gate")


def test_acquire_requires_ids(store, clock):
    svc = _service(store, clock)
    with pytest.raises(ValidationError):
        svc.acquire("u1", " ", "Gate")
