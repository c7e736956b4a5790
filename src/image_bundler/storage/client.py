"""
Object Store Client
===================

Async object-storage abstraction used by the retriever and publisher.

This module provides the ObjectStore protocol and two backends:
    - S3ObjectStore: boto3 S3 client (production)
    - LocalObjectStore: directory tree, one subdirectory per bucket
      (development and tests)

Design Rules:
    - "Object does not exist" is ALWAYS signalled by ObjectNotFound
    - Every other failure propagates unchanged for the caller to classify
    - Blocking SDK calls run in a worker thread (asyncio.to_thread)
    - Retry/backoff and credentials belong to the SDK, not to this module
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import boto3
from botocore.exceptions import ClientError


logger = logging.getLogger(__name__)

# S3 and S3-compatible stores disagree on the not-found code
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectNotFound(Exception):
    """Raised when the requested object does not exist."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(f"{bucket}/{key}")
        self.bucket = bucket
        self.key = key


class ObjectStore(Protocol):
    """
    Protocol for object-storage backends.

    Implemented by:
        - S3ObjectStore
        - LocalObjectStore
    """

    async def get_object(self, bucket: str, key: str) -> bytes:
        """
        Fetch an object's full body.

        Raises:
            ObjectNotFound: If the key does not exist
        """
        ...

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        """Store an object, replacing any existing value at the key."""
        ...


class S3ObjectStore:
    """
    Object store backed by a boto3 S3 client.

    Attributes:
        client: boto3 S3 client (injectable for testing)
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ) -> None:
        """
        Initialize the S3 store.

        Args:
            region: AWS region (None = SDK default resolution)
            endpoint_url: Custom endpoint for S3-compatible stores
            client: Pre-built boto3 client, mainly for tests
        """
        if client is None:
            client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
        self.client = client

    async def get_object(self, bucket: str, key: str) -> bytes:
        return await asyncio.to_thread(self._get_object_sync, bucket, key)

    def _get_object_sync(self, bucket: str, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code")
            if error_code in _NOT_FOUND_CODES:
                raise ObjectNotFound(bucket, key) from exc
            raise
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        await asyncio.to_thread(self._put_object_sync, bucket, key, data, content_type)

    def _put_object_sync(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str],
    ) -> None:
        kwargs = {"Bucket": bucket, "Key": key, "Body": data}
        if content_type:
            kwargs["ContentType"] = content_type
        self.client.put_object(**kwargs)


class LocalObjectStore:
    """
    Object store backed by a local directory.

    Layout: ``{root}/{bucket}/{key}``. Writes go to a temporary file in
    the bucket directory and are moved into place with ``os.replace``,
    so readers never observe a partially written object.
    """

    def __init__(self, root: str) -> None:
        self.root = Path(root)
        logger.info(f"LocalObjectStore initialized: root={self.root}")

    def _path(self, bucket: str, key: str) -> Path:
        return self.root / bucket / key

    async def get_object(self, bucket: str, key: str) -> bytes:
        path = self._path(bucket, key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise ObjectNotFound(bucket, key) from exc

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        await asyncio.to_thread(self._put_object_sync, bucket, key, data)

    def _put_object_sync(self, bucket: str, key: str, data: bytes) -> None:
        path = self._path(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
