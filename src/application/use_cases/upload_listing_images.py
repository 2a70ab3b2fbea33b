import asyncio
import secrets
import string
import time
from dataclasses import dataclass

import structlog

from src.application.interfaces.image_storage import ImageStorage
from src.application.session_context import SessionContext

logger = structlog.get_logger(__name__)

DEFAULT_EXTENSION = "jpg"
_BASE36 = string.digits + string.ascii_lowercase


def _random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def extension_of(locator: str) -> str:
    """File extension of a local locator, ignoring any query string."""
    name = locator.split("?", 1)[0].rsplit("/", 1)[-1]
    if "." not in name:
        return DEFAULT_EXTENSION
    ext = name.rsplit(".", 1)[-1]
    return ext.lower() if ext.isalnum() else DEFAULT_EXTENSION


def build_storage_key(owner_id: str, locator: str) -> str:
    """{owner}/{epoch millis}_{random}.{ext}, so keys never collide within an owner."""
    timestamp = int(time.time() * 1000)
    return f"{owner_id}/{timestamp}_{_random_suffix()}.{extension_of(locator)}"


@dataclass
class UploadListingImagesInput:
    locators: list[str]
    owner_id: str


@dataclass
class UploadedImages:
    """Storage keys and their public URLs, both in input order."""

    keys: list[str]
    urls: list[str]


class UploadListingImages:
    """
    Use case: upload every draft photo and return the keys and public URLs in order.

    Uploads run concurrently and the result is all-or-nothing. When one upload
    fails, keys that already landed are removed (best effort) before the error
    is re-raised, unless cleanup is disabled.
    """

    def __init__(
        self,
        storage: ImageStorage,
        session: SessionContext,
        *,
        cleanup_orphans: bool = True,
    ) -> None:
        self._storage = storage
        self._session = session
        self._cleanup_orphans = cleanup_orphans

    async def execute(self, input_data: UploadListingImagesInput) -> UploadedImages:
        # Raises UnauthenticatedError before any upload starts
        access_token = await self._session.access_token()

        keys = [build_storage_key(input_data.owner_id, locator) for locator in input_data.locators]
        uploaded: list[str] = []

        async def _upload_one(key: str, locator: str) -> None:
            await self._storage.upload(key, locator, access_token)
            uploaded.append(key)

        tasks = [
            asyncio.ensure_future(_upload_one(key, locator))
            for key, locator in zip(keys, input_data.locators)
        ]
        try:
            await asyncio.gather(*tasks)
        except Exception:
            logger.exception(
                "listing_images_upload_failed",
                owner_id=input_data.owner_id,
                total=len(keys),
                uploaded=len(uploaded),
            )
            # Let the rest settle so the set of uploaded keys is final
            await asyncio.gather(*tasks, return_exceptions=True)
            if self._cleanup_orphans and uploaded:
                await self._remove_orphans(list(uploaded), access_token)
            raise

        urls = [await self._storage.public_url(key) for key in keys]
        logger.info("listing_images_uploaded", owner_id=input_data.owner_id, count=len(urls))
        return UploadedImages(keys=keys, urls=urls)

    async def discard(self, keys: list[str]) -> None:
        """
        Remove images uploaded by an earlier execute() whose listing was never
        saved. Best effort, and skipped when cleanup is disabled.
        """
        if not self._cleanup_orphans or not keys:
            return
        try:
            access_token = await self._session.access_token()
        except Exception:
            logger.exception("orphaned_images_cleanup_failed", keys=keys)
            return
        await self._remove_orphans(list(keys), access_token)

    async def _remove_orphans(self, keys: list[str], access_token: str) -> None:
        try:
            await self._storage.remove(keys, access_token)
            logger.info("orphaned_images_removed", count=len(keys))
        except Exception:
            logger.exception("orphaned_images_cleanup_failed", keys=keys)
