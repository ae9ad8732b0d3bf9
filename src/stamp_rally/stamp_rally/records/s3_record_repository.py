from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import JSON_CONTENT_TYPE, USER_RECORD_PREFIX
from ..core.enums import ReadStatus, RecordShape
from ..core.exceptions import StorageError
from ..storage.object_store import ObjectStore, dump_json
from .model import UserStampRecord, decode_record
from .repository import UserStampRecordRepository

logger = logging.getLogger(__name__)


def record_key(user_id: str) -> str:
    return f"{USER_RECORD_PREFIX}{user_id}.json"


def user_id_from_key(key: str) -> str:
    name = key[len(USER_RECORD_PREFIX):] if key.startswith(USER_RECORD_PREFIX) else key
    return name[: -len(".json")] if name.endswith(".json") else name


class S3UserStampRecordRepository(UserStampRecordRepository):
    def __init__(self, store: ObjectStore, *, clock: Callable[[], datetime] = now_utc):
        self._store = store
        self._clock = clock

    def load(self, user_id: str) -> UserStampRecord:
        key = record_key(user_id)
        now = self._clock()
        result = self._store.get(key)

        if result.status == ReadStatus.NOT_FOUND:
            logger.debug(f"No record for {user_id}, starting fresh")
            return UserStampRecord.fresh(user_id, now=now)
        if result.status == ReadStatus.ERROR:
            logger.warning(f"Failed to load {key}, starting fresh: {result.error}")
            return UserStampRecord.fresh(user_id, now=now)

        try:
            record = decode_record(result.json(), user_id=user_id, legacy_acquired_at=now, now=now, version=result.etag)
        except ValueError as e:
            logger.warning(f"Malformed record {key}, starting fresh: {e}")
            return replace(UserStampRecord.fresh(user_id, now=now), version=result.etag, shape=RecordShape.CURRENT)

        if record.shape == RecordShape.LEGACY:
            logger.info(f"Migrated legacy record {key} in memory ({len(record.stamps)} stamps)")
        return record

    def save(self, user_id: str, record: UserStampRecord) -> UserStampRecord:
        key = record_key(user_id)
        to_write = replace(record, user_id=user_id, updated_at=self._clock())
        etag = self._store.put(
            key,
            dump_json(to_write.to_payload()),
            content_type=JSON_CONTENT_TYPE,
            if_match=record.version,
            if_none_match=record.version is None,
        )
        return replace(to_write, version=etag, shape=RecordShape.CURRENT)

    def list_record_keys(self) -> Sequence[str]:
        return [k for k in self._store.list_keys(USER_RECORD_PREFIX) if k.endswith(".json")]

    def read_record(self, key: str) -> UserStampRecord:
        result = self._store.get(key)
        if not result.ok:
            raise StorageError(f"Failed to read {key} ({result.status.value})") from result.error
        return decode_record(
            result.json(),
            user_id=user_id_from_key(key),
            legacy_acquired_at=None,
            now=self._clock(),
            version=result.etag,
        )
