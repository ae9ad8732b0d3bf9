from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import ReadStatus


@dataclass(frozen=True)
class ReadResult:
    """Result of a single get: distinguishes "not found" from a transient error."""

    status: ReadStatus
    body: Optional[bytes] = None
    etag: Optional[str] = None
    content_type: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def found(cls, body: bytes, *, etag: Optional[str] = None, content_type: Optional[str] = None) -> "ReadResult":
        return cls(ReadStatus.FOUND, body=body, etag=etag, content_type=content_type)

    @classmethod
    def not_found(cls) -> "ReadResult":
        return cls(ReadStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: BaseException) -> "ReadResult":
        return cls(ReadStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.status == ReadStatus.FOUND

    def json(self) -> Any:
        """Decode the body as UTF-8 JSON. Raises ValueError on bad payloads."""
        if self.body is None:
            raise ValueError(f"no body to decode (status={self.status.value})")
        return json.loads(self.body.decode("utf-8"))


class ObjectStore(Protocol):
    def get(self, key: str) -> ReadResult:
        raise NotImplementedError

    def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        if_match: Optional[str] = None,
        if_none_match: bool = False,
    ) -> Optional[str]:
        """Write the object and return its new ETag.

        `if_match` rejects the write unless the stored ETag still equals it;
        `if_none_match` rejects it if the key already exists. Both raise
        ConflictError on a failed precondition.
        """

        raise NotImplementedError

    def list_keys(self, prefix: str) -> Sequence[str]:
        raise NotImplementedError


def dump_json(payload: Any) -> bytes:
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
