"""
Data Models
===========

Models for the image bundler.

This module re-exports all data models for convenient access.

Models:
    Request:
        - ItemSize, SizeTable: Schema of the invocation ``body``
        - TableSizeSpec, SingleLineSizeSpec: Normalized size information
        - BundleRequest: Validated request for one item

    Bundle:
        - PhotoPayload: One retrieved photo
        - SlotStatus, SlotResult: Per-slot retrieval result
        - ArchiveEntry, BundleArchive: Planned archive contents

    Outcome:
        - ErrorKind: Failure classification
        - BundleOutcome: Tagged success/failure
        - InvocationResponse: Outbound {result, message}
"""

from image_bundler.errors import ErrorKind
from image_bundler.models.request import (
    BundleRequest,
    ItemSize,
    SingleLineSizeSpec,
    SizeSpec,
    SizeTable,
    TableSizeSpec,
)
from image_bundler.models.bundle import (
    ArchiveEntry,
    BundleArchive,
    PhotoPayload,
    SlotResult,
    SlotStatus,
)
from image_bundler.models.outcome import BundleOutcome, InvocationResponse

__all__ = [
    # Request
    "ItemSize",
    "SizeTable",
    "SizeSpec",
    "TableSizeSpec",
    "SingleLineSizeSpec",
    "BundleRequest",
    # Bundle
    "PhotoPayload",
    "SlotStatus",
    "SlotResult",
    "ArchiveEntry",
    "BundleArchive",
    # Outcome
    "ErrorKind",
    "BundleOutcome",
    "InvocationResponse",
]
