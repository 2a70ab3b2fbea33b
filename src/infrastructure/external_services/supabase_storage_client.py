"""HTTP client for the object storage bucket holding listing photos."""
import asyncio
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import structlog

from src.application.interfaces.image_storage import ImageStorage
from src.domain.errors import (
    BucketNotFoundError,
    ImageReadError,
    NetworkError,
    PermissionDeniedError,
    StorageError,
    UnauthenticatedError,
)
from src.infrastructure.external_services.supabase_http import SupabaseHttp, error_message

logger = structlog.get_logger(__name__)


def content_type_for(key: str) -> str:
    ext = key.rsplit(".", 1)[-1].lower() if "." in key else "jpg"
    return "image/jpeg" if ext in ("jpg", "jpeg") else f"image/{ext}"


def _local_path(locator: str) -> Path:
    """Accept plain paths and file:// URIs."""
    if locator.startswith("file://"):
        return Path(unquote(urlparse(locator).path))
    return Path(locator)


async def _read_image(locator: str) -> bytes:
    try:
        return await asyncio.to_thread(_local_path(locator).read_bytes)
    except OSError as exc:
        logger.error("image_read_failed", locator=locator, error=str(exc))
        raise ImageReadError(locator) from exc


class SupabaseStorageClient(ImageStorage):
    """Uploads to, resolves and removes objects in one storage bucket."""

    def __init__(self, http: SupabaseHttp, bucket: str) -> None:
        self._http = http
        self._bucket = bucket

    async def upload(self, key: str, locator: str, access_token: str) -> None:
        """POST /storage/v1/object/{bucket}/{key} as a multipart form."""
        body = await _read_image(locator)
        filename = key.rsplit("/", 1)[-1]

        async with self._http.client() as client:
            try:
                response = await client.post(
                    f"/storage/v1/object/{self._bucket}/{key}",
                    files={"file": (filename, body, content_type_for(key))},
                    headers=self._http.headers(access_token),
                )
            except httpx.RequestError as exc:
                logger.error("storage_connection_failed", key=key, error=str(exc))
                raise NetworkError(
                    "Network error: Please check your internet connection and ensure "
                    "the storage bucket is configured."
                ) from exc

        if response.is_error:
            message = error_message(response)
            logger.error(
                "storage_upload_failed",
                key=key,
                status_code=response.status_code,
                response=message,
            )
            if response.status_code == 401:
                raise UnauthenticatedError()
            if response.status_code == 403:
                raise PermissionDeniedError(
                    "Storage bucket permissions not configured. Please check the storage policies."
                )
            if response.status_code == 404:
                raise BucketNotFoundError(self._bucket)
            raise StorageError(f"Upload failed: {message}")

        logger.debug("storage_upload_complete", key=key)

    async def public_url(self, key: str) -> str:
        return f"{self._http.base_url}/storage/v1/object/public/{self._bucket}/{key}"

    async def remove(self, keys: list[str], access_token: str) -> None:
        """DELETE /storage/v1/object/{bucket} with the keys as prefixes."""
        if not keys:
            return
        async with self._http.client() as client:
            try:
                response = await client.request(
                    "DELETE",
                    f"/storage/v1/object/{self._bucket}",
                    json={"prefixes": keys},
                    headers=self._http.headers(access_token),
                )
            except httpx.RequestError as exc:
                raise NetworkError(f"Failed to reach storage: {exc}") from exc

        if response.is_error:
            raise StorageError(f"Remove failed: {error_message(response)}")
        logger.info("storage_objects_removed", count=len(keys))
