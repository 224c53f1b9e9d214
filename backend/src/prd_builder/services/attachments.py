"""File attachment lifecycle management."""

import asyncio
from dataclasses import dataclass
from typing import Protocol

from prd_builder.contracts.attachments import AttachedFile, UploadResult, UploadSource
from prd_builder.errors import UploadError
from prd_builder.logging_config import get_logger

logger = get_logger(__name__)

GENERIC_UPLOAD_ERROR = "Upload failed. Please try again."


class Uploader(Protocol):
    async def upload(self, source: UploadSource) -> UploadResult: ...


@dataclass
class UploadBatch:
    """Files selected together; progress counts terminal outcomes."""

    total: int
    done: int = 0

    @property
    def progress(self) -> int:
        if self.total <= 0:
            return 100
        return round(self.done / self.total * 100)


def format_file_size(size: int) -> str:
    """Human-readable size: bytes, then KB and MB with one decimal."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class AttachmentManager:
    """Tracks selected files from selection through upload completion.

    Each file uploads independently; a failure only marks that file. Files
    removed while their upload is in flight stay removed when it finishes.
    """

    def __init__(self, uploader: Uploader):
        self._uploader = uploader
        self._files: dict[str, AttachedFile] = {}
        self._batch: UploadBatch | None = None

    async def attach(self, sources: list[UploadSource]) -> list[AttachedFile]:
        """Select a batch of files and upload them concurrently."""
        entries = [AttachedFile(name=s.name, human_size=format_file_size(s.size)) for s in sources]
        for entry in entries:
            self._files[entry.id] = entry
        batch = UploadBatch(total=len(entries))
        self._batch = batch
        logger.info("upload_batch_start", files=len(entries))

        await asyncio.gather(
            *(self._upload_one(batch, entry.id, source) for entry, source in zip(entries, sources))
        )
        return [self._files[e.id].model_copy() for e in entries if e.id in self._files]

    async def _upload_one(self, batch: UploadBatch, file_id: str, source: UploadSource) -> None:
        try:
            result = await self._uploader.upload(source)
        except UploadError as e:
            logger.warning("upload_failed", file_name=source.name, error_code=e.code)
            self._finish(batch, file_id, error=GENERIC_UPLOAD_ERROR)
            return
        except Exception as e:
            logger.warning("upload_failed", file_name=source.name, error_type=type(e).__name__)
            self._finish(batch, file_id, error=GENERIC_UPLOAD_ERROR)
            return

        if result.success and result.asset_ids:
            self._finish(batch, file_id, asset_id=result.asset_ids[0])
        else:
            logger.warning("upload_rejected", file_name=source.name, error=result.error)
            self._finish(batch, file_id, error=result.error or GENERIC_UPLOAD_ERROR)

    def _finish(
        self,
        batch: UploadBatch,
        file_id: str,
        asset_id: str | None = None,
        error: str | None = None,
    ) -> None:
        batch.done += 1
        entry = self._files.get(file_id)
        if entry is None:
            return
        entry.uploading = False
        if asset_id:
            entry.uploaded = True
            entry.asset_id = asset_id
        else:
            entry.error = error or GENERIC_UPLOAD_ERROR

    @property
    def upload_progress(self) -> int:
        """Percentage of the latest batch that reached a terminal state."""
        if self._batch is None:
            return 0
        return self._batch.progress

    @property
    def is_uploading(self) -> bool:
        return any(f.uploading for f in self._files.values())

    def files(self) -> list[AttachedFile]:
        return [f.model_copy() for f in self._files.values()]

    def completed(self) -> list[AttachedFile]:
        """Files that finished uploading and carry an asset id."""
        return [f.model_copy() for f in self._files.values() if f.uploaded and f.asset_id]

    def remove(self, file_id: str) -> bool:
        """Remove one file. Returns True if it existed."""
        return self._files.pop(file_id, None) is not None

    def clear(self) -> None:
        self._files.clear()
