from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..core.enums import RecordShape


def _optional_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    return parse_iso_datetime(value)


def _optional_iso(value: Optional[datetime]) -> Optional[str]:
    return to_iso(value) if value is not None else None


@dataclass(frozen=True)
class Acquisition:
    """Domain entity: one collected stamp. Immutable once created."""

    stamp_id: str
    stamp_name: Optional[str]
    acquired_at: Optional[datetime]
    location: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Acquisition":
        if not isinstance(payload, dict) or "stampId" not in payload:
            raise ValueError(f"invalid acquisition entry: {payload!r}")
        name = payload.get("stampName")
        return cls(
            stamp_id=str(payload["stampId"]),
            stamp_name=str(name) if name is not None else None,
            acquired_at=_optional_timestamp(payload.get("acquiredAt")),
            location=payload.get("location"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "stampId": self.stamp_id,
            "stampName": self.stamp_name,
            "acquiredAt": _optional_iso(self.acquired_at),
            "location": self.location,
        }


@dataclass(frozen=True)
class UserStampRecord:
    """Canonical user stamp record.

    `version` is the ETag the record was read at (None if nothing was stored)
    and `shape` tells which stored form it was decoded from. Neither is
    persisted.
    """

    user_id: str
    stamps: Tuple[Acquisition, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[str] = field(default=None, compare=False)
    shape: RecordShape = field(default=RecordShape.CURRENT, compare=False)

    @classmethod
    def fresh(cls, user_id: str, *, now: datetime) -> "UserStampRecord":
        return cls(user_id=user_id, stamps=(), created_at=now, updated_at=now, shape=RecordShape.NEW)

    @property
    def stamp_ids(self) -> list[str]:
        return [a.stamp_id for a in self.stamps]

    def has_stamp(self, stamp_id: str) -> bool:
        return any(a.stamp_id == stamp_id for a in self.stamps)

    def with_acquisition(self, acquisition: Acquisition) -> "UserStampRecord":
        return replace(
            self,
            stamps=self.stamps + (acquisition,),
            created_at=self.created_at or acquisition.acquired_at,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "stamps": [a.to_payload() for a in self.stamps],
            "createdAt": _optional_iso(self.created_at),
            "updatedAt": _optional_iso(self.updated_at),
        }


def decode_record(
    payload: Any,
    *,
    user_id: str,
    legacy_acquired_at: Optional[datetime],
    now: datetime,
    version: Optional[str] = None,
) -> UserStampRecord:
    """Normalize a stored payload (current object or legacy id list) into a UserStampRecord.

    Legacy entries get `legacy_acquired_at` as their timestamp (None keeps them
    undated) plus null name and location. Raises ValueError for any other shape.
    """

    if isinstance(payload, list):
        stamps = []
        for stamp_id in payload:
            if not isinstance(stamp_id, (str, int)):
                raise ValueError(f"invalid legacy stamp id: {stamp_id!r}")
            stamps.append(Acquisition(stamp_id=str(stamp_id), stamp_name=None, acquired_at=legacy_acquired_at, location=None))
        return UserStampRecord(
            user_id=user_id,
            stamps=tuple(stamps),
            created_at=now,
            updated_at=now,
            version=version,
            shape=RecordShape.LEGACY,
        )

    if isinstance(payload, dict):
        raw_stamps = payload.get("stamps") or []
        if not isinstance(raw_stamps, list):
            raise ValueError("stamps must be a list")
        return UserStampRecord(
            user_id=str(payload.get("userId") or user_id),
            stamps=tuple(Acquisition.from_payload(s) for s in raw_stamps),
            created_at=_optional_timestamp(payload.get("createdAt")),
            updated_at=_optional_timestamp(payload.get("updatedAt")),
            version=version,
            shape=RecordShape.CURRENT,
        )

    raise ValueError(f"unsupported record payload type: {type(payload).__name__}")
