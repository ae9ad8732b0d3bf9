from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Tuple

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.constants import ACQUIRE_MAX_ATTEMPTS
from ..core.exceptions import ConflictError
from .model import Acquisition, UserStampRecord
from .repository import UserStampRecordRepository

logger = logging.getLogger(__name__)


class StampRecordService:
    """Use case: record stamp acquisitions and read a visitor's progress."""

    def __init__(
        self,
        records: UserStampRecordRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        max_attempts: int = ACQUIRE_MAX_ATTEMPTS,
    ):
        self._records = records
        self._clock = clock
        self._max_attempts = max(1, int(max_attempts))

    def load(self, user_id: str) -> UserStampRecord:
        return self._records.load(user_id)

    def save(self, user_id: str, record: UserStampRecord) -> UserStampRecord:
        return self._records.save(user_id, record)

    def acquired_ids(self, user_id: str) -> List[str]:
        return self._records.load(user_id).stamp_ids

    def acquire(self, user_id: str, stamp_id: str, stamp_name: str | None) -> Tuple[UserStampRecord, bool]:
        """Add `stamp_id` to the user's record unless already held.

        Returns the resulting record and whether a new acquisition was written.
        A stale write (someone else updated the record meanwhile) is re-read and
        re-applied up to `max_attempts` times.
        """

        user_id = require_non_empty(user_id, "User id")
        stamp_id = require_non_empty(stamp_id, "Stamp id")

        attempt = 0
        while True:
            attempt += 1
            record = self._records.load(user_id)
            if record.has_stamp(stamp_id):
                return record, False

            acquisition = Acquisition(stamp_id=stamp_id, stamp_name=stamp_name, acquired_at=self._clock(), location=None)
            try:
                saved = self._records.save(user_id, record.with_acquisition(acquisition))
            except ConflictError:
                if attempt >= self._max_attempts:
                    raise
                logger.info(f"Concurrent update on record {user_id}, retrying ({attempt}/{self._max_attempts})")
                continue

            logger.info(f"User {user_id} acquired stamp {stamp_id}")
            return saved, True
