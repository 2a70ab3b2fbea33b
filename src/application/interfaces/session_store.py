from abc import ABC, abstractmethod

from src.domain.entities.auth_session import AuthSession


class SessionStore(ABC):
    """Port for persisting the signed-in session between runs."""

    @abstractmethod
    async def load(self) -> AuthSession | None:
        ...

    @abstractmethod
    async def save(self, session: AuthSession) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...
