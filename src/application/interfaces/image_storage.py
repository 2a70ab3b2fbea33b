from abc import ABC, abstractmethod


class ImageStorage(ABC):
    """Port for the object storage bucket holding listing photos."""

    @abstractmethod
    async def upload(self, key: str, locator: str, access_token: str) -> None:
        """Upload the local file at locator under key, as the token's user."""
        ...

    @abstractmethod
    async def public_url(self, key: str) -> str:
        ...

    @abstractmethod
    async def remove(self, keys: list[str], access_token: str) -> None:
        ...
