from abc import ABC, abstractmethod

from src.domain.entities.auth_session import AuthSession, AuthUser, SignUpResult


class AuthGateway(ABC):
    """Port for the email+password auth provider."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str, metadata: dict) -> SignUpResult:  # type: ignore[type-arg]
        ...

    @abstractmethod
    async def refresh(self, refresh_token: str) -> AuthSession:
        ...

    @abstractmethod
    async def get_user(self, access_token: str) -> AuthUser:
        ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        ...
