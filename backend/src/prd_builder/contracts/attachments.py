"""File attachment contracts."""

import mimetypes
import uuid
from pathlib import Path

from pydantic import BaseModel, Field


class UploadSource(BaseModel):
    """A user-selected file, ready to be uploaded."""

    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadSource":
        """Read a local file into an upload source."""
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            data=file_path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


class AttachedFile(BaseModel):
    """Lifecycle record of one selected file.

    Starts as ``uploading``; ends either ``uploaded`` with an ``asset_id``
    or with an ``error`` message.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    name: str
    human_size: str
    uploading: bool = True
    uploaded: bool = False
    asset_id: str | None = None
    error: str | None = None


class UploadResult(BaseModel):
    """Parsed response of one upload call."""

    success: bool = False
    asset_ids: list[str] = Field(default_factory=list)
    error: str | None = None
