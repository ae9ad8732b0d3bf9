from __future__ import annotations

import hmac
import logging
import secrets
import uuid
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from ..common.validators import require_non_empty
from ..core.constants import STAMP_HASH_BYTES
from ..core.enums import ReadStatus
from ..core.exceptions import NotFoundError, StorageError
from .model import QrCodeItem, StampEntry, StampProgress, StoredImage
from .repository import StampAssetRepository, StampCatalogRepository

logger = logging.getLogger(__name__)

CatalogMutator = Callable[[Dict[str, StampEntry]], Dict[str, StampEntry]]


def _new_stamp_hash() -> str:
    return secrets.token_hex(STAMP_HASH_BYTES)


def _new_stamp_id() -> str:
    return str(uuid.uuid4())


class StampCatalogService:
    """Use cases around the stamp catalog (visitor lookups and admin edits)."""

    def __init__(
        self,
        catalog: StampCatalogRepository,
        assets: StampAssetRepository,
        *,
        id_factory: Callable[[], str] = _new_stamp_id,
        hash_factory: Callable[[], str] = _new_stamp_hash,
    ):
        self._catalog = catalog
        self._assets = assets
        self._id_factory = id_factory
        self._hash_factory = hash_factory

    def list_catalog(self) -> Dict[str, StampEntry]:
        return self._catalog.load()

    def find_by_secret(self, secret: str) -> Optional[StampEntry]:
        """Resolve a scanned QR secret to its stamp; None when nothing matches."""
        if not secret:
            return None
        for entry in self._catalog.load().values():
            if entry.hash and hmac.compare_digest(entry.hash.encode("utf-8"), secret.encode("utf-8")):
                return entry
        return None

    def progress(self, acquired_ids: Iterable[str], *, catalog: Optional[Mapping[str, StampEntry]] = None) -> List[StampProgress]:
        acquired = set(acquired_ids)
        entries = catalog if catalog is not None else self._catalog.load()
        return [
            StampProgress(
                stamp_id=stamp_id,
                name=entry.name,
                logo_url=f"/logos/{stamp_id}" if stamp_id in acquired else None,
                acquired=stamp_id in acquired,
            )
            for stamp_id, entry in entries.items()
        ]

    def qr_codes(self, base_url: str) -> List[QrCodeItem]:
        base = base_url.rstrip("/")
        return [
            QrCodeItem(stamp_id=stamp_id, name=entry.name, hash=entry.hash, url=f"{base}/stamp/{entry.hash}")
            for stamp_id, entry in self._catalog.load().items()
        ]

    # ---- admin edits (versioned read-modify-write) ----

    def _update(self, mutate: CatalogMutator) -> Dict[str, StampEntry]:
        current = self._catalog.load_versioned()
        if current.status == ReadStatus.ERROR:
            # An unreadable catalog must never be replaced by a partial one.
            raise StorageError("Stamp catalog is currently unavailable")

        updated = mutate(dict(current.entries))
        self._catalog.save(
            updated,
            expected_version=current.version,
            expect_absent=current.status == ReadStatus.NOT_FOUND,
        )
        return updated

    def add_stamp(self, name: Optional[str]) -> StampEntry:
        clean_name = require_non_empty(name, "Stamp name")
        entry = StampEntry(stamp_id=self._id_factory(), name=clean_name, hash=self._hash_factory(), logo=None)

        def mutate(entries: Dict[str, StampEntry]) -> Dict[str, StampEntry]:
            entries[entry.stamp_id] = entry
            return entries

        self._update(mutate)
        logger.info(f"Added stamp {entry.stamp_id} ({entry.name})")
        return entry

    def update_names_and_hashes(self, form: Mapping[str, str]) -> Dict[str, StampEntry]:
        """Apply `name_<id>` / `hash_<id>` form fields; entries keep their logo."""

        names: Dict[str, str] = {}
        hashes: Dict[str, str] = {}
        for key, value in form.items():
            if key.startswith("name_"):
                names[key[len("name_"):]] = value
            elif key.startswith("hash_"):
                hashes[key[len("hash_"):]] = value

        def mutate(entries: Dict[str, StampEntry]) -> Dict[str, StampEntry]:
            for stamp_id in {*names, *hashes}:
                existing = entries.get(stamp_id)
                entries[stamp_id] = StampEntry(
                    stamp_id=stamp_id,
                    name=names.get(stamp_id, existing.name if existing else ""),
                    hash=hashes.get(stamp_id, existing.hash if existing else ""),
                    logo=existing.logo if existing else None,
                )
            return entries

        return self._update(mutate)

    def set_logo(self, stamp_id: str, *, extension: str, body: bytes, content_type: str) -> str:
        filename = f"{stamp_id}{extension}"

        def mutate(entries: Dict[str, StampEntry]) -> Dict[str, StampEntry]:
            entry = entries.get(stamp_id)
            if entry is None:
                raise NotFoundError("Stamp not found")
            # Logo key is stable per stamp and extension.
            self._assets.put_logo(filename, body, content_type=content_type)
            entries[stamp_id] = entry.with_logo(filename)
            return entries

        self._update(mutate)
        return filename

    def clear_logo(self, stamp_id: str) -> None:
        def mutate(entries: Dict[str, StampEntry]) -> Dict[str, StampEntry]:
            entry = entries.get(stamp_id)
            if entry is None:
                raise NotFoundError("Stamp not found")
            entries[stamp_id] = entry.with_logo(None)
            return entries

        self._update(mutate)

    # ---- assets ----

    def get_logo(self, stamp_id: str) -> StoredImage:
        entry = self._catalog.load().get(stamp_id)
        if entry is None or not entry.logo:
            raise NotFoundError("Logo not found")
        image = self._assets.get_logo(entry.logo)
        if image is None:
            raise NotFoundError("Logo not found")
        return image

    def get_map(self) -> StoredImage:
        image = self._assets.get_map()
        if image is None:
            raise NotFoundError("Map not found")
        return image
