"""
Scratch Staging
===============

Transient storage used while an archive is being assembled.

This module provides the ScratchStaging protocol and two interchangeable
implementations selected by configuration:
    - MemoryScratch: in-memory BytesIO buffer
    - FileScratch: temporary file on local disk

Lifecycle:
    acquire() -> open_writer() -> finalize() -> release()

Design Rules:
    - release() is idempotent and safe after a failed acquire()
    - After release() no trace of the scratch resource remains
    - OS-level failures surface as ScratchIOError
"""

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from image_bundler.errors import ScratchIOError


logger = logging.getLogger(__name__)


class ScratchStaging(Protocol):
    """
    Protocol for archive staging backends.

    Implemented by:
        - MemoryScratch
        - FileScratch
    """

    def acquire(self) -> None:
        """Allocate the scratch resource."""
        ...

    def open_writer(self) -> BinaryIO:
        """Return a seekable binary stream to write the archive into."""
        ...

    def finalize(self) -> bytes:
        """Close the writer and return everything written."""
        ...

    def release(self) -> None:
        """Free the scratch resource. Safe to call more than once."""
        ...


class MemoryScratch:
    """Scratch staging backed by an in-memory buffer."""

    def __init__(self) -> None:
        self._buffer: Optional[io.BytesIO] = None

    def acquire(self) -> None:
        self._buffer = io.BytesIO()

    def open_writer(self) -> BinaryIO:
        if self._buffer is None:
            raise ScratchIOError("scratch buffer not acquired")
        return self._buffer

    def finalize(self) -> bytes:
        if self._buffer is None:
            raise ScratchIOError("scratch buffer not acquired")
        return self._buffer.getvalue()

    def release(self) -> None:
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None

    @property
    def acquired(self) -> bool:
        return self._buffer is not None


class FileScratch:
    """
    Scratch staging backed by a temporary file.

    Attributes:
        directory: Directory for the temp file (None = system default)
        prefix: Temp file name prefix, usually derived from the item code
    """

    def __init__(self, directory: Optional[str] = None, prefix: str = "bundle-") -> None:
        self.directory = directory
        self.prefix = prefix
        self._path: Optional[Path] = None
        self._file: Optional[BinaryIO] = None

    @property
    def path(self) -> Optional[Path]:
        """Location of the temp file while acquired."""
        return self._path

    @property
    def acquired(self) -> bool:
        return self._path is not None

    def acquire(self) -> None:
        try:
            fd, name = tempfile.mkstemp(
                suffix=".zip",
                prefix=self.prefix,
                dir=self.directory,
            )
        except OSError as e:
            raise ScratchIOError(f"failed to create scratch file: {e}") from e

        self._path = Path(name)
        self._file = os.fdopen(fd, "w+b")
        logger.debug(f"Scratch file created: {self._path}")

    def open_writer(self) -> BinaryIO:
        if self._file is None:
            raise ScratchIOError("scratch file not acquired")
        return self._file

    def finalize(self) -> bytes:
        if self._path is None:
            raise ScratchIOError("scratch file not acquired")
        try:
            if self._file is not None:
                self._file.close()
                self._file = None
            return self._path.read_bytes()
        except OSError as e:
            raise ScratchIOError(f"failed to read scratch file {self._path}: {e}") from e

    def release(self) -> None:
        try:
            if self._file is not None:
                self._file.close()
                self._file = None
            if self._path is not None:
                self._path.unlink(missing_ok=True)
                logger.debug(f"Scratch file removed: {self._path}")
                self._path = None
        except OSError as e:
            raise ScratchIOError(f"failed to remove scratch file {self._path}: {e}") from e


def create_scratch(staging: str, directory: Optional[str] = None, prefix: str = "bundle-") -> ScratchStaging:
    """
    Create a scratch backend from configuration.

    Args:
        staging: 'memory' or 'file'
        directory: Temp directory for 'file' staging
        prefix: Temp file prefix for 'file' staging

    Returns:
        Unacquired scratch backend
    """
    if staging == "memory":
        return MemoryScratch()
    if staging == "file":
        return FileScratch(directory=directory, prefix=prefix)
    raise ValueError(f"Unknown scratch staging: {staging}")
