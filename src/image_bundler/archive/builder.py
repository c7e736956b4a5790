"""
Archive Builder
===============

Plans and writes the per-item ZIP bundle.

Naming:
    photos -> {identifier}_{n}.jpg   (n = emission index, or slot number)
    size   -> {identifier}_size.jpg  (always last)

Determinism:
    - Entries are stored uncompressed (ZIP_STORED)
    - Every entry gets the same fixed timestamp and permissions, so the
      same inputs always produce byte-identical archives
"""

import logging
import zipfile
from typing import Iterable, List, Optional

from image_bundler.errors import ArchiveError, ScratchIOError
from image_bundler.models.bundle import ArchiveEntry, BundleArchive, PhotoPayload
from image_bundler.archive.scratch import ScratchStaging


logger = logging.getLogger(__name__)

# Earliest timestamp the ZIP format can represent
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
ENTRY_MODE = 0o644


class ArchiveBuilder:
    """
    Builds the bundle archive for one item.

    Attributes:
        numbering: 'dense' numbers photos 1..k in emission order (gaps
            closed); 'slot' keeps the original slot number
    """

    def __init__(self, numbering: str = "dense") -> None:
        if numbering not in ("dense", "slot"):
            raise ValueError(f"Unknown numbering: {numbering}")
        self.numbering = numbering

    def photo_entry_name(self, identifier: str, index: int) -> str:
        return f"{identifier}_{index}.jpg"

    def size_entry_name(self, identifier: str) -> str:
        return f"{identifier}_size.jpg"

    def plan(
        self,
        identifier: str,
        photos: Iterable[PhotoPayload],
        size_image: Optional[bytes] = None,
    ) -> BundleArchive:
        """
        Assign entry names and order.

        Args:
            identifier: Item code
            photos: Retrieved photos, in slot order
            size_image: Optional rendered size image

        Returns:
            BundleArchive with photo entries followed by the size entry

        Raises:
            ArchiveError: If two entries would share a name
        """
        entries: List[ArchiveEntry] = []
        for emission_index, photo in enumerate(photos, start=1):
            number = emission_index if self.numbering == "dense" else photo.slot
            entries.append(ArchiveEntry(self.photo_entry_name(identifier, number), photo.data))

        if size_image is not None:
            entries.append(ArchiveEntry(self.size_entry_name(identifier), size_image))

        seen = set()
        for entry in entries:
            if entry.name in seen:
                raise ArchiveError(f"duplicate archive entry: {entry.name}")
            seen.add(entry.name)

        return BundleArchive(identifier=identifier, entries=tuple(entries))

    def write(self, archive: BundleArchive, scratch: ScratchStaging) -> None:
        """
        Write the archive as a ZIP into the scratch resource.

        Raises:
            ScratchIOError: If the scratch stream cannot be written
            ArchiveError: If the ZIP writer reports a structural error
        """
        writer = scratch.open_writer()
        try:
            with zipfile.ZipFile(writer, mode="w", compression=zipfile.ZIP_STORED) as zf:
                for entry in archive.entries:
                    info = zipfile.ZipInfo(entry.name, date_time=ZIP_EPOCH)
                    info.compress_type = zipfile.ZIP_STORED
                    info.external_attr = ENTRY_MODE << 16
                    zf.writestr(info, entry.data)
        except OSError as e:
            raise ScratchIOError(f"failed to write archive to scratch: {e}") from e
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise ArchiveError(f"failed to build archive: {e}") from e

        logger.info(
            f"Archive built for {archive.identifier}: {len(archive)} entries "
            f"({', '.join(archive.names)})"
        )

    def build(
        self,
        identifier: str,
        photos: Iterable[PhotoPayload],
        size_image: Optional[bytes],
        scratch: ScratchStaging,
    ) -> BundleArchive:
        """Plan the archive and write it into ``scratch``."""
        archive = self.plan(identifier, photos, size_image)
        self.write(archive, scratch)
        return archive
