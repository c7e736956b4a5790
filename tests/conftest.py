"""
Test Configuration
==================

Pytest fixtures and test doubles for the image bundler.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from image_bundler.archive.builder import ArchiveBuilder
from image_bundler.errors import BundleError
from image_bundler.pipeline.graph import BundlePipeline
from image_bundler.storage.client import ObjectNotFound
from image_bundler.storage.publisher import BundlePublisher
from image_bundler.storage.retriever import PhotoRetriever


PHOTO_BUCKET = "photos"
OUTPUT_BUCKET = "bundles"


class InMemoryObjectStore:
    """Object store double keeping objects in a dict."""

    def __init__(self) -> None:
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.get_calls: List[Tuple[str, str]] = []
        self.put_calls: List[Tuple[str, str, Optional[str]]] = []

    def add(self, bucket: str, key: str, data: bytes) -> None:
        self.objects[(bucket, key)] = data

    def fail(self, bucket: str, key: str, exc: Exception) -> None:
        self.failures[(bucket, key)] = exc

    async def get_object(self, bucket: str, key: str) -> bytes:
        self.get_calls.append((bucket, key))
        if (bucket, key) in self.failures:
            raise self.failures[(bucket, key)]
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise ObjectNotFound(bucket, key) from None

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        self.put_calls.append((bucket, key, content_type))
        if (bucket, key) in self.failures:
            raise self.failures[(bucket, key)]
        self.objects[(bucket, key)] = data


class RecordingRenderer:
    """Size renderer double that records every spec it receives."""

    def __init__(self, image: bytes = b"SIZE-IMAGE", error: Optional[BundleError] = None) -> None:
        self.image = image
        self.error = error
        self.calls = []
        self.closed = False

    async def render(self, spec) -> bytes:
        self.calls.append(spec)
        if self.error is not None:
            raise self.error
        return self.image

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def store():
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def renderer():
    """Recording renderer that always succeeds."""
    return RecordingRenderer()


@pytest.fixture
def make_pipeline():
    """Factory for pipelines wired to test doubles."""

    def factory(
        store,
        renderer=None,
        staging: str = "memory",
        scratch_dir: Optional[str] = None,
        numbering: str = "dense",
        max_concurrency: int = 1,
        builder: Optional[ArchiveBuilder] = None,
    ) -> BundlePipeline:
        return BundlePipeline(
            retriever=PhotoRetriever(store, PHOTO_BUCKET, max_concurrency=max_concurrency),
            renderer=renderer if renderer is not None else RecordingRenderer(),
            builder=builder or ArchiveBuilder(numbering=numbering),
            publisher=BundlePublisher(
                store,
                OUTPUT_BUCKET,
                staging_mode=staging,
                scratch_dir=scratch_dir,
            ),
        )

    return factory


@pytest.fixture
def sample_payload():
    """Invocation payload with a size table."""
    return {
        "item_code": "A1",
        "image_count": "2",
        "body": {
            "size_table": {
                "head": ["ignored", "header"],
                "body": [["S", "M"], ["90", "95"]],
            },
            "size_description": "fits small",
            "size_zh": "尺码，胸围",
        },
    }
