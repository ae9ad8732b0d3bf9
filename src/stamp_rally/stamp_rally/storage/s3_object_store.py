from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import ConflictError, StorageError
from .connection import ObjectStoreConnection
from .object_store import ObjectStore, ReadResult

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
_PRECONDITION_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict", "409"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3ObjectStore(ObjectStore):
    def __init__(self, conn_factory: ObjectStoreConnection):
        self._conn_factory = conn_factory

    @property
    def _bucket(self) -> str:
        return self._conn_factory.config.bucket

    def get(self, key: str) -> ReadResult:
        try:
            resp = self._conn_factory.client().get_object(Bucket=self._bucket, Key=key)
            body = resp["Body"].read()
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return ReadResult.not_found()
            logger.warning(f"S3 get failed for {key}: {e}")
            return ReadResult.failed(e)
        except BotoCoreError as e:
            logger.warning(f"S3 get failed for {key}: {e}")
            return ReadResult.failed(e)

        return ReadResult.found(body, etag=resp.get("ETag"), content_type=resp.get("ContentType"))

    def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        if_match: Optional[str] = None,
        if_none_match: bool = False,
    ) -> Optional[str]:
        kwargs = {"Bucket": self._bucket, "Key": key, "Body": body, "ContentType": content_type}
        if self._conn_factory.config.conditional_writes:
            if if_match:
                kwargs["IfMatch"] = if_match
            elif if_none_match:
                kwargs["IfNoneMatch"] = "*"

        try:
            resp = self._conn_factory.client().put_object(**kwargs)
        except ClientError as e:
            if _error_code(e) in _PRECONDITION_CODES:
                raise ConflictError(f"{key} was modified concurrently") from e
            logger.error(f"S3 put failed for {key}: {e}")
            raise StorageError(f"Failed to write {key}") from e
        except BotoCoreError as e:
            logger.error(f"S3 put failed for {key}: {e}")
            raise StorageError(f"Failed to write {key}") from e

        return resp.get("ETag")

    def list_keys(self, prefix: str) -> Sequence[str]:
        keys: List[str] = []
        try:
            paginator = self._conn_factory.client().get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []) or []:
                    keys.append(obj["Key"])
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 list failed for prefix {prefix}: {e}")
            raise StorageError(f"Failed to list {prefix}") from e
        return keys
