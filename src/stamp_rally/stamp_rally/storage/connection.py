from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import boto3


@dataclass
class StorageConfig:
    bucket: str
    region: str = "ap-northeast-1"
    endpoint_url: Optional[str] = None
    conditional_writes: bool = True


class ObjectStoreConnection:
    """Singleton-like S3 client factory.

    Note: boto3 clients are thread-safe, so one client is shared per process.
    """

    _instance: Optional["ObjectStoreConnection"] = None

    def __init__(self, config: StorageConfig):
        self._config = config
        self._client: Any = None

    @classmethod
    def get_instance(cls, config: StorageConfig) -> "ObjectStoreConnection":
        if cls._instance is None:
            cls._instance = ObjectStoreConnection(config)
        return cls._instance

    @property
    def config(self) -> StorageConfig:
        return self._config

    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self._config.region,
                endpoint_url=self._config.endpoint_url or None,
            )
        return self._client
