from __future__ import annotations

from typing import Protocol, Sequence

from .model import UserStampRecord


class UserStampRecordRepository(Protocol):
    def load(self, user_id: str) -> UserStampRecord:
        """Never raises: missing or unreadable records come back fresh (logged)."""

        raise NotImplementedError

    def save(self, user_id: str, record: UserStampRecord) -> UserStampRecord:
        """Stamp updatedAt, write the full record and return it with its new version."""

        raise NotImplementedError

    def list_record_keys(self) -> Sequence[str]:
        raise NotImplementedError

    def read_record(self, key: str) -> UserStampRecord:
        """Strict read used by statistics; legacy entries keep a null acquiredAt.

        Raises StorageError when the object cannot be fetched and ValueError
        when its payload is malformed.
        """

        raise NotImplementedError
