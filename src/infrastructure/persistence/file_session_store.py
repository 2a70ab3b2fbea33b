"""Session persistence so a signed-in user stays signed in between runs."""
import asyncio
import json
import os
from datetime import datetime
from pathlib import Path

import structlog

from src.application.interfaces.session_store import SessionStore
from src.domain.entities.auth_session import AuthSession, AuthUser

logger = structlog.get_logger(__name__)


def _serialise(session: AuthSession) -> str:
    return json.dumps(
        {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_at": session.expires_at.isoformat(),
            "user": {
                "id": session.user.id,
                "email": session.user.email,
                "metadata": session.user.metadata,
            },
        }
    )


def _deserialise(raw: str) -> AuthSession:
    data = json.loads(raw)
    user = data["user"]
    return AuthSession(
        access_token=data["access_token"],
        refresh_token=data["refresh_token"],
        expires_at=datetime.fromisoformat(data["expires_at"]),
        user=AuthUser(id=user["id"], email=user.get("email", ""), metadata=user.get("metadata", {})),
    )


class FileSessionStore(SessionStore):
    """Keeps the session as JSON in a file readable only by the current user."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)

    async def load(self) -> AuthSession | None:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            return _deserialise(raw)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("stored_session_unreadable", path=str(self._path), error=str(exc))
            return None

    async def save(self, session: AuthSession) -> None:
        await asyncio.to_thread(self._write, _serialise(session))

    async def clear(self) -> None:
        await asyncio.to_thread(self._path.unlink, missing_ok=True)


class InMemorySessionStore(SessionStore):
    """Keeps the session for the life of the process only."""

    def __init__(self, session: AuthSession | None = None) -> None:
        self.session = session

    async def load(self) -> AuthSession | None:
        return self.session

    async def save(self, session: AuthSession) -> None:
        self.session = session

    async def clear(self) -> None:
        self.session = None
