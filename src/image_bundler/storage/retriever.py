"""
Photo Retriever
===============

Fetches an item's photo slots from object storage.

Each slot resolves to exactly one SlotResult:
    RETRIEVED -> payload kept
    ABSENT    -> slot skipped, no archive entry, not an error
    FAILED    -> fatal, the whole invocation aborts

Concurrency:
    max_concurrency == 1 fetches slots strictly in order and stops at the
    first fatal slot. Larger values overlap fetches under a semaphore;
    results are reassembled in slot order before anything is emitted.
"""

import asyncio
import logging
from typing import List

from image_bundler.errors import ObjectRetrievalError
from image_bundler.models.bundle import PhotoPayload, SlotResult, SlotStatus
from image_bundler.models.request import photo_key
from image_bundler.storage.client import ObjectNotFound, ObjectStore


logger = logging.getLogger(__name__)


class PhotoRetriever:
    """
    Retrieves photo payloads for one item.

    Attributes:
        store: Object store to read from
        bucket: Bucket holding ``{identifier}_{n}.jpeg`` objects
        max_concurrency: Maximum overlapping fetches
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        self.store = store
        self.bucket = bucket
        self.max_concurrency = max_concurrency

    async def fetch_slot(self, identifier: str, slot: int) -> SlotResult:
        """
        Fetch one photo slot.

        Args:
            identifier: Item code
            slot: 1-based slot number

        Returns:
            SlotResult with status RETRIEVED, ABSENT or FAILED
        """
        key = photo_key(identifier, slot)
        try:
            data = await self.store.get_object(self.bucket, key)
        except ObjectNotFound:
            logger.info(f"No such key: {self.bucket}/{key}")
            return SlotResult.absent(slot)
        except Exception as e:
            logger.error(f"Failed to fetch {self.bucket}/{key}: {e}")
            error = ObjectRetrievalError(f"failed to fetch {key}: {e}")
            error.__cause__ = e
            return SlotResult.failed(slot, error)

        logger.info(f"Got image: {key}, len: {len(data)}")
        return SlotResult.retrieved(slot, data)

    async def retrieve_all(self, identifier: str, image_count: int) -> List[PhotoPayload]:
        """
        Fetch slots 1..image_count.

        Args:
            identifier: Item code
            image_count: Number of candidate slots

        Returns:
            Payloads of retrieved slots, in slot order

        Raises:
            ObjectRetrievalError: On the lowest-numbered fatal slot
        """
        if self.max_concurrency == 1 or image_count <= 1:
            results = await self._fetch_sequential(identifier, image_count)
        else:
            results = await self._fetch_concurrent(identifier, image_count)

        payloads: List[PhotoPayload] = []
        for result in sorted(results, key=lambda r: r.slot):
            if result.status is SlotStatus.FAILED:
                raise result.error
            if result.status is SlotStatus.RETRIEVED:
                payloads.append(result.payload)

        logger.info(
            f"Retrieved {len(payloads)}/{image_count} photos for {identifier}"
        )
        return payloads

    async def _fetch_sequential(self, identifier: str, image_count: int) -> List[SlotResult]:
        results: List[SlotResult] = []
        for slot in range(1, image_count + 1):
            result = await self.fetch_slot(identifier, slot)
            results.append(result)
            if result.status is SlotStatus.FAILED:
                break
        return results

    async def _fetch_concurrent(self, identifier: str, image_count: int) -> List[SlotResult]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(slot: int) -> SlotResult:
            async with semaphore:
                return await self.fetch_slot(identifier, slot)

        # fetch_slot never raises, so gather preserves every slot result
        return list(await asyncio.gather(
            *(bounded(slot) for slot in range(1, image_count + 1))
        ))
