"""
Invocation Handling
===================

Decodes the inbound payload and wires a pipeline from settings.

Functions:
    - parse_invocation: raw payload -> BundleRequest
    - create_pipeline: Settings -> BundlePipeline (fresh per invocation)
    - invoke: payload -> BundleOutcome, never raises BundleError
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from image_bundler.config import Settings
from image_bundler.errors import BundleError, FieldParseError, MissingFieldError
from image_bundler.archive.builder import ArchiveBuilder
from image_bundler.models.outcome import BundleOutcome
from image_bundler.models.request import BundleRequest, ItemSize
from image_bundler.rendering.engine import SizeRenderer
from image_bundler.rendering.local import LocalSizeRenderer
from image_bundler.rendering.remote import RemoteSizeRenderer
from image_bundler.rendering.size_spec import build_size_spec
from image_bundler.storage.client import LocalObjectStore, ObjectStore, S3ObjectStore
from image_bundler.storage.publisher import BundlePublisher
from image_bundler.storage.retriever import PhotoRetriever
from image_bundler.pipeline.graph import BundlePipeline


logger = logging.getLogger(__name__)


# =============================================================================
# Payload Decoding
# =============================================================================

def _parse_item_code(value: Any) -> str:
    if isinstance(value, bool):
        raise FieldParseError("item_code must be a string")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise FieldParseError("item_code must be a string")


def _parse_image_count(value: Any) -> int:
    if isinstance(value, bool):
        raise FieldParseError("failed to parse image count")
    if isinstance(value, int):
        count = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        count = int(value.strip())
    else:
        raise FieldParseError("failed to parse image count")

    if count < 0:
        raise FieldParseError("failed to parse image count")
    return count


def parse_invocation(payload: Any) -> BundleRequest:
    """
    Decode an inbound payload into a BundleRequest.

    Args:
        payload: Decoded JSON object

    Returns:
        Validated BundleRequest

    Raises:
        MissingFieldError: item_code or image_count absent (or null)
        FieldParseError: A field has the wrong shape
    """
    if not isinstance(payload, Mapping):
        raise FieldParseError("invocation payload must be a JSON object")

    if payload.get("item_code") is None:
        raise MissingFieldError("item_code not found in body")
    if payload.get("image_count") is None:
        raise MissingFieldError("image_count not found in body")

    identifier = _parse_item_code(payload["item_code"])
    image_count = _parse_image_count(payload["image_count"])

    size_spec = None
    body = payload.get("body")
    if body is not None:
        try:
            item_size = ItemSize.model_validate(body)
        except ValidationError as e:
            raise FieldParseError(f"failed to parse item size: {e.error_count()} error(s)") from e
        size_spec = build_size_spec(item_size)

    try:
        return BundleRequest(
            identifier=identifier,
            image_count=image_count,
            size_spec=size_spec,
        )
    except ValidationError as e:
        raise FieldParseError(f"invalid item_code {identifier!r}") from e


# =============================================================================
# Pipeline Factory
# =============================================================================

def create_object_store(settings: Settings) -> ObjectStore:
    """Create the object store backend based on config."""
    backend = settings.storage.backend

    if backend == "s3":
        logger.info("Using S3ObjectStore")
        return S3ObjectStore(
            region=settings.storage.region,
            endpoint_url=settings.storage.endpoint_url,
        )
    elif backend == "local":
        logger.info(f"Using LocalObjectStore: root={settings.storage.local_root}")
        return LocalObjectStore(settings.storage.local_root)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")


def create_renderer(settings: Settings, store: ObjectStore) -> SizeRenderer:
    """Create the size renderer based on config."""
    render = settings.render

    if render.strategy == "remote":
        return RemoteSizeRenderer(
            url=render.url,
            auth_token=render.auth_token,
            timeout=render.timeout_seconds,
            table_title=render.table_title,
            one_line_title=render.one_line_title,
        )
    elif render.strategy == "local":
        return LocalSizeRenderer(
            store=store,
            font_bucket=render.font_bucket or settings.storage.photo_bucket,
            font_key=render.font_key,
            font_size=render.font_size,
            table_title=render.table_title,
            one_line_title=render.one_line_title,
        )
    else:
        raise ValueError(f"Unknown render strategy: {render.strategy}")


def create_pipeline(settings: Settings, store: Optional[ObjectStore] = None) -> BundlePipeline:
    """
    Wire a pipeline from configuration.

    Args:
        settings: Loaded settings
        store: Object store override (defaults to the configured backend)

    Returns:
        BundlePipeline ready for one invocation
    """
    if store is None:
        store = create_object_store(settings)

    return BundlePipeline(
        retriever=PhotoRetriever(
            store,
            bucket=settings.storage.photo_bucket,
            max_concurrency=settings.retrieval.max_concurrency,
        ),
        renderer=create_renderer(settings, store),
        builder=ArchiveBuilder(numbering=settings.archive.numbering),
        publisher=BundlePublisher(
            store,
            bucket=settings.storage.output_bucket,
            staging_mode=settings.archive.staging,
            scratch_dir=settings.archive.scratch_dir,
        ),
    )


async def invoke(payload: Any, pipeline: BundlePipeline) -> BundleOutcome:
    """
    Decode a payload and run the pipeline.

    Returns:
        BundleOutcome; request errors become Failure outcomes too
    """
    try:
        request = parse_invocation(payload)
    except BundleError as e:
        logger.error(f"Rejected invocation payload: {e}")
        return BundleOutcome.from_error(e)

    outcome = await pipeline.run(request)
    if outcome.ok:
        logger.info(f"Bundle published: {outcome.bundle_key} ({len(outcome.entry_names)} entries)")
    return outcome
