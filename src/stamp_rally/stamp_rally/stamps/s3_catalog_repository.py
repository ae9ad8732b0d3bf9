from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from ..core.constants import CATALOG_KEY, DEFAULT_IMAGE_CONTENT_TYPE, JSON_CONTENT_TYPE, LOGO_PREFIX, MAP_KEY
from ..core.enums import ReadStatus
from ..core.exceptions import StorageError
from ..storage.object_store import ObjectStore, dump_json
from .model import StampEntry, StoredImage, VersionedCatalog
from .repository import StampAssetRepository, StampCatalogRepository

logger = logging.getLogger(__name__)


class S3StampCatalogRepository(StampCatalogRepository):
    def __init__(self, store: ObjectStore, *, key: str = CATALOG_KEY):
        self._store = store
        self._key = key

    def load(self) -> Dict[str, StampEntry]:
        return self.load_versioned().entries

    def load_versioned(self) -> VersionedCatalog:
        result = self._store.get(self._key)
        if result.status == ReadStatus.NOT_FOUND:
            logger.info(f"Catalog {self._key} not found, using empty catalog")
            return VersionedCatalog(status=ReadStatus.NOT_FOUND)
        if result.status == ReadStatus.ERROR:
            logger.warning(f"Failed to load {self._key}, using empty catalog: {result.error}")
            return VersionedCatalog(status=ReadStatus.ERROR)

        try:
            payload = result.json()
        except ValueError as e:
            logger.warning(f"Catalog {self._key} is not valid JSON, using empty catalog: {e}")
            return VersionedCatalog(version=result.etag, status=ReadStatus.ERROR)

        if not isinstance(payload, dict):
            logger.warning(f"Catalog {self._key} is not an object, using empty catalog")
            return VersionedCatalog(version=result.etag, status=ReadStatus.ERROR)

        entries: Dict[str, StampEntry] = {}
        for stamp_id, raw in payload.items():
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed catalog entry {stamp_id!r}")
                continue
            entries[str(stamp_id)] = StampEntry.from_payload(stamp_id, raw)

        return VersionedCatalog(entries=entries, version=result.etag, status=ReadStatus.FOUND)

    def save(
        self,
        entries: Mapping[str, StampEntry],
        *,
        expected_version: Optional[str] = None,
        expect_absent: bool = False,
    ) -> Optional[str]:
        payload = {stamp_id: entry.to_payload() for stamp_id, entry in entries.items()}
        return self._store.put(
            self._key,
            dump_json(payload),
            content_type=JSON_CONTENT_TYPE,
            if_match=expected_version,
            if_none_match=expect_absent,
        )


class S3StampAssetRepository(StampAssetRepository):
    def __init__(self, store: ObjectStore):
        self._store = store

    def put_logo(self, filename: str, body: bytes, *, content_type: str) -> None:
        self._store.put(f"{LOGO_PREFIX}{filename}", body, content_type=content_type)

    def get_logo(self, filename: str) -> Optional[StoredImage]:
        key = f"{LOGO_PREFIX}{filename}"
        result = self._store.get(key)
        if result.status == ReadStatus.NOT_FOUND:
            return None
        if result.status == ReadStatus.ERROR:
            raise StorageError(f"Failed to fetch {key}") from result.error
        return StoredImage(body=result.body or b"", content_type=result.content_type or DEFAULT_IMAGE_CONTENT_TYPE)

    def get_map(self) -> Optional[StoredImage]:
        result = self._store.get(MAP_KEY)
        if result.status == ReadStatus.ERROR:
            logger.warning(f"Failed to fetch {MAP_KEY}: {result.error}")
            return None
        if not result.ok:
            return None
        return StoredImage(body=result.body or b"", content_type=result.content_type or DEFAULT_IMAGE_CONTENT_TYPE)
