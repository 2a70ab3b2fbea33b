"""Shared plumbing for the backend-as-a-service HTTP clients."""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx


class SupabaseHttp:
    """
    Base URL, API key and transport settings shared by the auth, storage and
    REST clients. Every request carries the project's public API key; calls
    made on behalf of a user add that user's bearer token.
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    def headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
        }

    @asynccontextmanager
    async def client(self) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            yield client


def error_message(response: httpx.Response) -> str:
    """Best human-readable message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or f"HTTP {response.status_code}"
