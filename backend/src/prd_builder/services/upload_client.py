"""Upload service client over HTTP."""

from typing import Any

import httpx

from prd_builder.contracts.attachments import UploadResult, UploadSource
from prd_builder.errors import UploadError
from prd_builder.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_UPLOAD_BASE_URL = "http://localhost:8000"
DEFAULT_UPLOAD_PATH = "/api/upload"


def parse_upload_response(data: Any) -> UploadResult:
    """Read an upload reply; unknown shapes count as failure."""
    if not isinstance(data, dict):
        return UploadResult(success=False)
    raw_ids = data.get("asset_ids", data.get("assetIds"))
    asset_ids = [i for i in raw_ids if isinstance(i, str) and i] if isinstance(raw_ids, list) else []
    error = data.get("error")
    return UploadResult(
        success=data.get("success") is True,
        asset_ids=asset_ids,
        error=error if isinstance(error, str) and error else None,
    )


class UploadClient:
    """Uploads one file per call to the asset store."""

    def __init__(
        self,
        base_url: str = DEFAULT_UPLOAD_BASE_URL,
        upload_path: str = DEFAULT_UPLOAD_PATH,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url
        self.upload_path = upload_path
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _load_client(self) -> httpx.AsyncClient:
        """Create the httpx client lazily."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def upload(self, source: UploadSource) -> UploadResult:
        """
        Upload a single file.

        Raises:
            UploadError: transport failure, error status, or non-JSON body
        """
        files = {"file": (source.name, source.data, source.content_type)}
        try:
            response = await self._load_client().post(self.upload_path, files=files)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise UploadError(
                f"Upload failed: {type(e).__name__}",
                context={"file_name": source.name},
            ) from e
        except httpx.InvalidURL as e:
            raise UploadError(
                f"Upload URL is invalid: {e}",
                context={"file_name": source.name, "base_url": self.base_url},
                retry_hint=False,
            ) from e
        except ValueError as e:
            raise UploadError(
                "Upload reply was not valid JSON",
                context={"file_name": source.name},
            ) from e
        return parse_upload_response(data)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
