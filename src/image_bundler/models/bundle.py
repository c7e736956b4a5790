"""
Bundle Data Models
==================

Internal representations passed between pipeline stages.

Design Rules:
    - Payload bytes are carried as-is (no decoding, no recompression)
    - All models are immutable once constructed
    - Ordering of archive entries is the insertion order of ``entries``
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from image_bundler.errors import BundleError


@dataclass(frozen=True, slots=True)
class PhotoPayload:
    """
    One successfully retrieved photo.

    Attributes:
        slot: Original 1-based slot number
        data: Raw image bytes exactly as stored
    """

    slot: int
    data: bytes

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return f"PhotoPayload(slot={self.slot}, size={len(self.data)})"


class SlotStatus(str, Enum):
    """
    Outcome of fetching one photo slot.

    Attributes:
        RETRIEVED: Object fetched, payload available
        ABSENT: Object does not exist (tolerated, skipped)
        FAILED: Any other failure (fatal for the invocation)
    """

    RETRIEVED = "RETRIEVED"
    ABSENT = "ABSENT"
    FAILED = "FAILED"


@dataclass(frozen=True)
class SlotResult:
    """Explicit per-slot stage result."""

    slot: int
    status: SlotStatus
    payload: Optional[PhotoPayload] = None
    error: Optional[BundleError] = None

    @classmethod
    def retrieved(cls, slot: int, data: bytes) -> "SlotResult":
        return cls(slot=slot, status=SlotStatus.RETRIEVED, payload=PhotoPayload(slot, data))

    @classmethod
    def absent(cls, slot: int) -> "SlotResult":
        return cls(slot=slot, status=SlotStatus.ABSENT)

    @classmethod
    def failed(cls, slot: int, error: BundleError) -> "SlotResult":
        return cls(slot=slot, status=SlotStatus.FAILED, error=error)


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """A named payload inside the bundle archive."""

    name: str
    data: bytes

    def __repr__(self) -> str:
        return f"ArchiveEntry(name={self.name!r}, size={len(self.data)})"


@dataclass(frozen=True)
class BundleArchive:
    """
    Ordered, name-unique set of archive entries for one item.

    Photo entries come first in emission order, followed by at
    most one size entry.

    Attributes:
        identifier: Item code the bundle belongs to
        entries: Entries in archive order
    """

    identifier: str
    entries: Tuple[ArchiveEntry, ...] = field(default_factory=tuple)

    @property
    def names(self) -> List[str]:
        """Entry names in archive order."""
        return [entry.name for entry in self.entries]

    def as_mapping(self) -> Dict[str, bytes]:
        """Entry name -> payload, insertion order preserved."""
        return {entry.name: entry.data for entry in self.entries}

    def __len__(self) -> int:
        return len(self.entries)
