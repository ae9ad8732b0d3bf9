from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from ..core.enums import ReadStatus


@dataclass(frozen=True)
class StampEntry:
    """Domain entity: one stamp of the catalog.

    `hash` is the secret token embedded in the stamp's QR URL; `logo` is a
    filename under logos/ or None.
    """

    stamp_id: str
    name: str
    hash: str
    logo: Optional[str] = None

    @classmethod
    def from_payload(cls, stamp_id: str, payload: Mapping[str, Any]) -> "StampEntry":
        logo = payload.get("logo")
        return cls(
            stamp_id=str(stamp_id),
            name=str(payload.get("name") or ""),
            hash=str(payload.get("hash") or ""),
            logo=str(logo) if logo else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "hash": self.hash, "logo": self.logo}

    def with_logo(self, logo: Optional[str]) -> "StampEntry":
        return replace(self, logo=logo)


@dataclass(frozen=True)
class VersionedCatalog:
    """Catalog snapshot plus the version token (ETag) it was read at.

    version=None means the document did not exist (or could not be read).
    """

    entries: Dict[str, StampEntry] = field(default_factory=dict)
    version: Optional[str] = None
    status: ReadStatus = ReadStatus.NOT_FOUND


@dataclass(frozen=True)
class StampProgress:
    """Read-model for the visitor pages: one catalog stamp and whether it's collected."""

    stamp_id: str
    name: str
    logo_url: Optional[str]
    acquired: bool


@dataclass(frozen=True)
class QrCodeItem:
    stamp_id: str
    name: str
    hash: str
    url: str
    qr: Optional[str] = None


@dataclass(frozen=True)
class StoredImage:
    body: bytes
    content_type: str
