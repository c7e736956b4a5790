"""
Archive Module
==============

ZIP bundle construction and scratch staging.

Components:
    - ArchiveBuilder: Entry naming, ordering and ZIP writing
    - ScratchStaging: Protocol for transient archive storage
    - MemoryScratch / FileScratch: Interchangeable staging backends
"""

from image_bundler.archive.scratch import (
    FileScratch,
    MemoryScratch,
    ScratchStaging,
    create_scratch,
)
from image_bundler.archive.builder import ArchiveBuilder

__all__ = [
    "ArchiveBuilder",
    "ScratchStaging",
    "MemoryScratch",
    "FileScratch",
    "create_scratch",
]
