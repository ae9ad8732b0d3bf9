from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol

from .model import StampEntry, StoredImage, VersionedCatalog


class StampCatalogRepository(Protocol):
    def load(self) -> Dict[str, StampEntry]:
        """Whole catalog; empty on any read failure (logged)."""

        raise NotImplementedError

    def load_versioned(self) -> VersionedCatalog:
        raise NotImplementedError

    def save(
        self,
        entries: Mapping[str, StampEntry],
        *,
        expected_version: Optional[str] = None,
        expect_absent: bool = False,
    ) -> Optional[str]:
        """Overwrite the whole catalog and return the new version.

        With `expected_version` the write is rejected (ConflictError) if the
        stored catalog changed since it was read; with `expect_absent` it is
        rejected if a catalog already exists.
        """

        raise NotImplementedError


class StampAssetRepository(Protocol):
    def put_logo(self, filename: str, body: bytes, *, content_type: str) -> None:
        raise NotImplementedError

    def get_logo(self, filename: str) -> Optional[StoredImage]:
        raise NotImplementedError

    def get_map(self) -> Optional[StoredImage]:
        raise NotImplementedError
