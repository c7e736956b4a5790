"""
Archive Tests
=============

Tests for entry naming, ordering, ZIP output and scratch staging.
"""

import io
import zipfile

import pytest

from image_bundler.archive.builder import ArchiveBuilder
from image_bundler.archive.scratch import FileScratch, MemoryScratch, create_scratch
from image_bundler.errors import ArchiveError, ScratchIOError
from image_bundler.models.bundle import PhotoPayload


def _photos(*slots):
    return [PhotoPayload(slot, f"photo-{slot}".encode()) for slot in slots]


def _zip_entries(payload: bytes):
    with zipfile.ZipFile(io.BytesIO(payload)) as zf:
        return [(info.filename, zf.read(info), info.compress_type) for info in zf.infolist()]


class TestPlan:

    def test_dense_numbering_closes_gaps(self):
        archive = ArchiveBuilder().plan("A1", _photos(1, 3))
        assert archive.names == ["A1_1.jpg", "A1_2.jpg"]
        assert archive.as_mapping()["A1_2.jpg"] == b"photo-3"

    def test_slot_numbering_keeps_gaps(self):
        archive = ArchiveBuilder(numbering="slot").plan("A1", _photos(1, 3))
        assert archive.names == ["A1_1.jpg", "A1_3.jpg"]

    def test_size_entry_is_last(self):
        archive = ArchiveBuilder().plan("A1", _photos(1, 2), size_image=b"size")
        assert archive.names == ["A1_1.jpg", "A1_2.jpg", "A1_size.jpg"]

    def test_size_only_bundle(self):
        archive = ArchiveBuilder().plan("A1", [], size_image=b"size")
        assert archive.names == ["A1_size.jpg"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ArchiveError):
            ArchiveBuilder(numbering="slot").plan("A1", _photos(2, 2))

    def test_unknown_numbering(self):
        with pytest.raises(ValueError):
            ArchiveBuilder(numbering="sparse")


class TestWrite:

    def test_round_trip_in_memory(self):
        scratch = MemoryScratch()
        scratch.acquire()
        archive = ArchiveBuilder().build("A1", _photos(1, 2), b"size", scratch)

        entries = _zip_entries(scratch.finalize())

        assert [name for name, _, _ in entries] == archive.names
        assert [data for _, data, _ in entries] == [b"photo-1", b"photo-2", b"size"]
        assert {method for _, _, method in entries} == {zipfile.ZIP_STORED}

    def test_output_is_deterministic(self):
        payloads = []
        for _ in range(2):
            scratch = MemoryScratch()
            scratch.acquire()
            ArchiveBuilder().build("A1", _photos(1, 2), b"size", scratch)
            payloads.append(scratch.finalize())
        assert payloads[0] == payloads[1]

    def test_round_trip_via_file(self, tmp_path):
        scratch = FileScratch(directory=str(tmp_path), prefix="A1-")
        scratch.acquire()
        ArchiveBuilder().build("A1", _photos(1), None, scratch)

        entries = _zip_entries(scratch.finalize())
        assert [name for name, _, _ in entries] == ["A1_1.jpg"]

        scratch.release()
        assert list(tmp_path.iterdir()) == []

    def test_unacquired_scratch(self):
        with pytest.raises(ScratchIOError):
            ArchiveBuilder().build("A1", _photos(1), None, MemoryScratch())


class TestScratch:

    def test_file_scratch_lifecycle(self, tmp_path):
        scratch = FileScratch(directory=str(tmp_path), prefix="A1-")
        scratch.acquire()
        assert scratch.acquired
        assert scratch.path.parent == tmp_path
        assert scratch.path.name.startswith("A1-")

        scratch.open_writer().write(b"data")
        assert scratch.finalize() == b"data"

        scratch.release()
        assert not scratch.acquired
        assert list(tmp_path.iterdir()) == []

    def test_release_is_idempotent(self, tmp_path):
        scratch = FileScratch(directory=str(tmp_path))
        scratch.acquire()
        scratch.release()
        scratch.release()
        assert list(tmp_path.iterdir()) == []

    def test_release_without_acquire(self):
        MemoryScratch().release()
        FileScratch().release()

    def test_acquire_in_missing_directory(self, tmp_path):
        scratch = FileScratch(directory=str(tmp_path / "missing"))
        with pytest.raises(ScratchIOError):
            scratch.acquire()

    def test_memory_scratch(self):
        scratch = MemoryScratch()
        scratch.acquire()
        scratch.open_writer().write(b"abc")
        assert scratch.finalize() == b"abc"
        scratch.release()
        assert not scratch.acquired

    def test_create_scratch(self, tmp_path):
        assert isinstance(create_scratch("memory"), MemoryScratch)
        file_scratch = create_scratch("file", directory=str(tmp_path))
        assert isinstance(file_scratch, FileScratch)
        with pytest.raises(ValueError):
            create_scratch("s3")
