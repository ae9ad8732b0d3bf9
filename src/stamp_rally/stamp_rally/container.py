from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.enums import DenominatorPolicy
from .records.s3_record_repository import S3UserStampRecordRepository
from .records.service import StampRecordService
from .stamps.s3_catalog_repository import S3StampAssetRepository, S3StampCatalogRepository
from .stamps.service import StampCatalogService
from .statistics.service import StatisticsService
from .storage.connection import ObjectStoreConnection, StorageConfig
from .storage.object_store import ObjectStore
from .storage.s3_object_store import S3ObjectStore


@dataclass(frozen=True)
class Container:
    store: ObjectStore

    catalog_repo: S3StampCatalogRepository
    assets_repo: S3StampAssetRepository
    records_repo: S3UserStampRecordRepository

    catalog_service: StampCatalogService
    record_service: StampRecordService
    statistics_service: StatisticsService


def build_container(
    *,
    storage_config: Optional[dict] = None,
    store: Optional[ObjectStore] = None,
    stats_denominator: str = DenominatorPolicy.FILES.value,
) -> Container:
    """Wire repositories and services.

    Pass `store` to run against another ObjectStore (tests use an in-memory one);
    otherwise an S3 store is built from `storage_config`.
    """

    if store is None:
        if not storage_config or not storage_config.get("bucket"):
            raise ValueError("storage_config with a bucket is required")
        config = StorageConfig(
            bucket=str(storage_config["bucket"]),
            region=str(storage_config.get("region") or "ap-northeast-1"),
            endpoint_url=storage_config.get("endpoint_url") or None,
            conditional_writes=bool(storage_config.get("conditional_writes", True)),
        )
        store = S3ObjectStore(ObjectStoreConnection.get_instance(config))

    catalog_repo = S3StampCatalogRepository(store)
    assets_repo = S3StampAssetRepository(store)
    records_repo = S3UserStampRecordRepository(store)

    catalog_service = StampCatalogService(catalog_repo, assets_repo)
    record_service = StampRecordService(records_repo)
    statistics_service = StatisticsService(
        catalog_repo,
        records_repo,
        denominator=DenominatorPolicy(stats_denominator),
    )

    return Container(
        store=store,
        catalog_repo=catalog_repo,
        assets_repo=assets_repo,
        records_repo=records_repo,
        catalog_service=catalog_service,
        record_service=record_service,
        statistics_service=statistics_service,
    )
