"""
Bundle Publisher
================

Stores the finished archive and owns the scratch resource lifetime.

Publishing:
    - Output key is ``{identifier}.zip`` in the output bucket
    - A republish replaces the previous bundle (idempotent per item)
    - A single PUT is relied on for atomicity; there is no partial state

Scratch lifetime:
    ``staging()`` acquires the configured scratch backend and releases it
    on every exit path. A release failure is logged and never changes the
    outcome: after a failed body the original failure propagates, after a
    successful body the bundle is already published.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from image_bundler.errors import PublishError, ScratchIOError
from image_bundler.archive.scratch import ScratchStaging, create_scratch
from image_bundler.models.request import bundle_key
from image_bundler.storage.client import ObjectStore


logger = logging.getLogger(__name__)

BUNDLE_CONTENT_TYPE = "application/zip"

# Temp file names carry at most this much of the identifier
SCRATCH_PREFIX_CHARS = 32


class BundlePublisher:
    """
    Publishes bundles to the output bucket.

    Attributes:
        store: Object store to write to
        bucket: Output bucket name
        staging_mode: 'memory' or 'file' scratch staging
        scratch_dir: Directory for 'file' staging
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        staging_mode: str = "memory",
        scratch_dir: Optional[str] = None,
    ) -> None:
        self.store = store
        self.bucket = bucket
        self.staging_mode = staging_mode
        self.scratch_dir = scratch_dir

    @contextmanager
    def staging(self, identifier: str) -> Iterator[ScratchStaging]:
        """
        Acquire a scratch resource for one invocation.

        Raises:
            ScratchIOError: If the scratch cannot be acquired
        """
        scratch = create_scratch(
            self.staging_mode,
            directory=self.scratch_dir,
            prefix=f"{identifier[:SCRATCH_PREFIX_CHARS]}-",
        )
        try:
            scratch.acquire()
        except ScratchIOError:
            self._release_after_failure(scratch)
            raise

        try:
            yield scratch
        except BaseException:
            self._release_after_failure(scratch)
            raise
        else:
            try:
                scratch.release()
            except ScratchIOError as e:
                logger.warning(f"Scratch release failed for {identifier} after publish: {e}")

    def _release_after_failure(self, scratch: ScratchStaging) -> None:
        try:
            scratch.release()
        except ScratchIOError as e:
            logger.error(f"Scratch release failed while handling an earlier error: {e}")

    async def publish(self, identifier: str, scratch: ScratchStaging) -> str:
        """
        Store the archive held in ``scratch``.

        Args:
            identifier: Item code
            scratch: Scratch resource holding the finished archive

        Returns:
            Key the bundle was stored under

        Raises:
            ScratchIOError: If the archive cannot be read back from scratch
            PublishError: If the store rejects the write
        """
        payload = scratch.finalize()
        key = bundle_key(identifier)

        try:
            await self.store.put_object(
                self.bucket,
                key,
                payload,
                content_type=BUNDLE_CONTENT_TYPE,
            )
        except Exception as e:
            logger.error(f"Publish failed for {self.bucket}/{key}: {e}")
            raise PublishError(f"failed to store {self.bucket}/{key}: {e}") from e

        logger.info(f"Published {self.bucket}/{key}, len: {len(payload)}")
        return key
