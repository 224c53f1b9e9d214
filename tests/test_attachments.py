"""Tests for the file attachment manager."""

import asyncio

import pytest

from prd_builder.contracts.attachments import UploadResult, UploadSource
from prd_builder.errors import UploadError
from prd_builder.services.attachments import (
    GENERIC_UPLOAD_ERROR,
    AttachmentManager,
    format_file_size,
)


class TestFormatFileSize:
    """Human-readable sizes."""

    @pytest.mark.parametrize(
        "size, expected",
        [(0, "0 B"), (512, "512 B"), (1024, "1.0 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5.0 MB")],
    )
    def test_sizes(self, size, expected):
        assert format_file_size(size) == expected


class TestUploadOutcomes:
    """Per-file terminal states."""

    @pytest.mark.asyncio
    async def test_successful_upload(self, fake_uploader, source_factory):
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("brief.pdf", size=2048)])

        assert len(files) == 1
        assert files[0].uploading is False
        assert files[0].uploaded is True
        assert files[0].asset_id == "asset-brief.pdf"
        assert files[0].error is None
        assert files[0].human_size == "2.0 KB"

    @pytest.mark.asyncio
    async def test_first_asset_id_used(self, fake_uploader, source_factory):
        fake_uploader.outcomes["brief.pdf"] = UploadResult(success=True, asset_ids=["first", "second"])
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("brief.pdf")])

        assert files[0].asset_id == "first"

    @pytest.mark.asyncio
    async def test_reported_failure_uses_service_message(self, fake_uploader, source_factory):
        fake_uploader.outcomes["big.zip"] = UploadResult(success=False, error="File too large")
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("big.zip")])

        assert files[0].uploaded is False
        assert files[0].uploading is False
        assert files[0].asset_id is None
        assert files[0].error == "File too large"

    @pytest.mark.asyncio
    async def test_success_without_ids_is_failure(self, fake_uploader, source_factory):
        fake_uploader.outcomes["a.txt"] = UploadResult(success=True, asset_ids=[])
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("a.txt")])

        assert files[0].error == GENERIC_UPLOAD_ERROR

    @pytest.mark.asyncio
    async def test_transport_failure_uses_generic_message(self, fake_uploader, source_factory):
        fake_uploader.outcomes["a.txt"] = UploadError("Upload failed: ConnectError")
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("a.txt")])

        assert files[0].error == GENERIC_UPLOAD_ERROR
        assert files[0].uploaded is False


class TestBatch:
    """Independent uploads within one batch."""

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_siblings(self, fake_uploader, source_factory):
        fake_uploader.outcomes["bad.pdf"] = UploadError("boom")
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("good.pdf"), source_factory("bad.pdf"), source_factory("ok.md")])

        assert [f.uploaded for f in files] == [True, False, True]
        assert [f.name for f in manager.completed()] == ["good.pdf", "ok.md"]
        assert manager.upload_progress == 100

    @pytest.mark.asyncio
    async def test_unexpected_uploader_exception_is_contained(self, fake_uploader, source_factory):
        fake_uploader.outcomes["bad.pdf"] = ConnectionError("reset")
        fake_uploader.outcomes["ok.pdf"] = UploadResult(success=True, asset_ids=["a1"])
        manager = AttachmentManager(fake_uploader)

        files = await manager.attach([source_factory("bad.pdf"), source_factory("ok.pdf")])

        assert [(f.name, f.uploading, f.uploaded) for f in files] == [
            ("bad.pdf", False, False),
            ("ok.pdf", False, True),
        ]
        assert files[0].error == GENERIC_UPLOAD_ERROR
        assert files[1].asset_id == "a1"
        assert manager.upload_progress == 100
        assert manager.is_uploading is False

    @pytest.mark.asyncio
    async def test_files_start_uploading_and_progress_advances(self, fake_uploader, source_factory):
        fake_uploader.gates = {"a.pdf": asyncio.Event(), "b.pdf": asyncio.Event()}
        manager = AttachmentManager(fake_uploader)

        task = asyncio.create_task(manager.attach([source_factory("a.pdf"), source_factory("b.pdf")]))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert all(f.uploading for f in manager.files())
        assert manager.is_uploading is True
        assert manager.upload_progress == 0

        fake_uploader.gates["a.pdf"].set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert manager.upload_progress == 50

        fake_uploader.gates["b.pdf"].set()
        await task
        assert manager.upload_progress == 100
        assert manager.is_uploading is False

    @pytest.mark.asyncio
    async def test_progress_reaches_100_with_mixed_outcomes(self, fake_uploader, source_factory):
        fake_uploader.outcomes = {
            "a": UploadError("x"),
            "b": UploadResult(success=False),
            "c": UploadResult(success=True, asset_ids=["c1"]),
        }
        manager = AttachmentManager(fake_uploader)

        await manager.attach([source_factory("a"), source_factory("b"), source_factory("c")])

        assert manager.upload_progress == 100

    def test_progress_without_batch(self, fake_uploader):
        assert AttachmentManager(fake_uploader).upload_progress == 0


class TestRemoval:
    """User removal at any time."""

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, fake_uploader, source_factory):
        manager = AttachmentManager(fake_uploader)
        files = await manager.attach([source_factory("a.pdf"), source_factory("b.pdf")])

        assert manager.remove(files[0].id) is True
        assert manager.remove(files[0].id) is False
        assert [f.name for f in manager.files()] == ["b.pdf"]

        manager.clear()
        assert manager.files() == []

    @pytest.mark.asyncio
    async def test_removed_during_upload_stays_removed(self, fake_uploader, source_factory):
        fake_uploader.gates = {"a.pdf": asyncio.Event()}
        manager = AttachmentManager(fake_uploader)

        task = asyncio.create_task(manager.attach([source_factory("a.pdf")]))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        file_id = manager.files()[0].id
        manager.remove(file_id)

        fake_uploader.gates["a.pdf"].set()
        result = await task

        assert result == []
        assert manager.files() == []
        assert manager.upload_progress == 100

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, fake_uploader, source_factory):
        manager = AttachmentManager(fake_uploader)
        files = await manager.attach([source_factory("a.pdf")])
        files[0].asset_id = "tampered"

        assert manager.completed()[0].asset_id == "asset-a.pdf"


class TestUploadSource:
    """Local file loading."""

    def test_from_path(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# Notes")

        source = UploadSource.from_path(path)

        assert source.name == "notes.md"
        assert source.data == b"# Notes"
        assert source.size == 7

    def test_unknown_extension_content_type(self, tmp_path):
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"\x00")

        assert UploadSource.from_path(path).content_type == "application/octet-stream"
