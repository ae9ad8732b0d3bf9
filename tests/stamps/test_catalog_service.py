from __future__ import annotations

import pytest

from src.stamp_rally.stamp_rally.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from src.stamp_rally.stamp_rally.stamps.s3_catalog_repository import S3StampAssetRepository, S3StampCatalogRepository
from src.stamp_rally.stamp_rally.stamps.service import StampCatalogService

CATALOG = {
    "s1": {"name": "Gate", "hash": "h1", "logo": "s1.png"},
    "s2": {"name": "Tower", "hash": "h2", "logo": None},
}


def _service(store, **kwargs):
    ids = iter(["new-1", "new-2"])
    kwargs.setdefault("id_factory", lambda: next(ids))
    kwargs.setdefault("hash_factory", lambda: "secret-hash")
    return StampCatalogService(S3StampCatalogRepository(store), S3StampAssetRepository(store), **kwargs)


def test_list_catalog_missing_is_empty(store):
    assert _service(store).list_catalog() == {}


def test_list_catalog_unreadable_is_empty(store):
    store.seed_json("stamp-names.json", CATALOG)
    store.failing_reads.add("stamp-names.json")
    assert _service(store).list_catalog() == {}


def test_find_by_secret(store):
    store.seed_json("stamp-names.json", CATALOG)
    svc = _service(store)

    assert svc.find_by_secret("h2").stamp_id == "s2"
    assert svc.find_by_secret("nope") is None
    assert svc.find_by_secret("") is None


def test_find_by_secret_non_ascii(store):
    store.seed_json("stamp-names.json", {**CATALOG, "s3": {"name": "Café", "hash": "hé", "logo": None}})
    svc = _service(store)

    assert svc.find_by_secret("h\u00e9").stamp_id == "s3"
    assert svc.find_by_secret("\u00fcber") is None


def test_progress_shows_logo_only_for_acquired(store):
    store.seed_json("stamp-names.json", CATALOG)

    items = {p.stamp_id: p for p in _service(store).progress(["s2"])}

    assert items["s1"].acquired is False
    assert items["s1"].logo_url is None
    assert items["s2"].acquired is True
    assert items["s2"].logo_url == "/logos/s2"


def test_qr_codes_build_stamp_urls(store):
    store.seed_json("stamp-names.json", CATALOG)

    items = _service(store).qr_codes("https://rally.example/")

    assert [i.url for i in items] == ["https://rally.example/stamp/h1", "https://rally.example/stamp/h2"]


def test_add_stamp_creates_catalog(store):
    entry = _service(store).add_stamp("  Gate ")

    assert entry.stamp_id == "new-1"
    assert store.json("stamp-names.json") == {"new-1": {"name": "Gate", "hash": "secret-hash", "logo": None}}


def test_add_stamp_requires_name(store):
    with pytest.raises(ValidationError):
        _service(store).add_stamp("")


def test_add_stamp_default_hash_is_32_hex_chars(store):
    svc = StampCatalogService(S3StampCatalogRepository(store), S3StampAssetRepository(store))

    entry = svc.add_stamp("Gate")

    assert len(entry.hash) == 32
    int(entry.hash, 16)


def test_add_stamp_refuses_when_catalog_unreadable(store):
    store.seed_json("stamp-names.json", CATALOG)
    store.failing_reads.add("stamp-names.json")

    with pytest.raises(StorageError):
        _service(store).add_stamp("Gate")

    store.failing_reads.clear()
    assert store.json("stamp-names.json") == CATALOG


def test_update_names_and_hashes_keeps_logo_and_other_stamps(store):
    store.seed_json("stamp-names.json", CATALOG)

    _service(store).update_names_and_hashes({"name_s1": "Main gate", "hash_s1": "h1-new"})

    stored = store.json("stamp-names.json")
    assert stored["s1"] == {"name": "Main gate", "hash": "h1-new", "logo": "s1.png"}
    assert stored["s2"] == CATALOG["s2"]


class _StaleCatalogRepo(S3StampCatalogRepository):
    """Simulates another admin saving between our read and our write."""

    def __init__(self, store):
        super().__init__(store)
        self._store_ref = store

    def load_versioned(self):
        current = super().load_versioned()
        self._store_ref.seed_json("stamp-names.json", {"other": {"name": "X", "hash": "x", "logo": None}})
        return current


def test_concurrent_catalog_edit_is_rejected(store):
    store.seed_json("stamp-names.json", CATALOG)
    svc = StampCatalogService(_StaleCatalogRepo(store), S3StampAssetRepository(store))

    with pytest.raises(ConflictError):
        svc.add_stamp("Gate")

    assert "other" in store.json("stamp-names.json")


def test_set_logo_uploads_and_updates_catalog(store):
    store.seed_json("stamp-names.json", CATALOG)

    filename = _service(store).set_logo("s2", extension=".gif", body=b"GIF89a", content_type="image/gif")

    assert filename == "s2.gif"
    assert store.objects["logos/s2.gif"][0] == b"GIF89a"
    assert store.json("stamp-names.json")["s2"]["logo"] == "s2.gif"


def test_set_logo_unknown_stamp(store):
    store.seed_json("stamp-names.json", CATALOG)
    with pytest.raises(NotFoundError):
        _service(store).set_logo("zzz", extension=".png", body=b"x", content_type="image/png")
    assert "logos/zzz.png" not in store.objects


def test_set_logo_refuses_when_catalog_unreadable(store):
    store.seed_json("stamp-names.json", CATALOG)
    store.failing_reads.add("stamp-names.json")

    with pytest.raises(StorageError):
        _service(store).set_logo("s2", extension=".png", body=b"x", content_type="image/png")
    assert "logos/s2.png" not in store.objects


def test_set_logo_conflict_keeps_catalog_of_other_admin(store):
    store.seed_json("stamp-names.json", CATALOG)
    svc = StampCatalogService(_StaleCatalogRepo(store), S3StampAssetRepository(store))

    with pytest.raises(ConflictError):
        svc.set_logo("s2", extension=".png", body=b"x", content_type="image/png")
    assert "other" in store.json("stamp-names.json")


def test_clear_logo(store):
    store.seed_json("stamp-names.json", CATALOG)

    _service(store).clear_logo("s1")

    assert store.json("stamp-names.json")["s1"]["logo"] is None
    with pytest.raises(NotFoundError):
        _service(store).clear_logo("zzz")


def test_get_logo(store):
    store.seed_json("stamp-names.json", CATALOG)
    store.seed("logos/s1.png", b"PNG", content_type="image/png")
    svc = _service(store)

    image = svc.get_logo("s1")
    assert image.body == b"PNG"
    assert image.content_type == "image/png"

    with pytest.raises(NotFoundError):
        svc.get_logo("s2")

    store.failing_reads.add("logos/s1.png")
    with pytest.raises(StorageError):
        svc.get_logo("s1")


def test_get_map(store):
    svc = _service(store)
    with pytest.raises(NotFoundError):
        svc.get_map()

    store.seed("map.png", b"MAP", content_type="image/png")
    assert svc.get_map().body == b"MAP"
