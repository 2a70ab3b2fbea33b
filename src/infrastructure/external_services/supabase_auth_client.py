"""HTTP client for the email+password auth provider."""
import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from src.application.interfaces.auth_gateway import AuthGateway
from src.domain.entities.auth_session import AuthSession, AuthUser, SignUpResult
from src.domain.errors import AuthError, NetworkError, UnauthenticatedError
from src.infrastructure.external_services.supabase_http import SupabaseHttp, error_message
from src.infrastructure.external_services.supabase_schemas import SessionPayload, UserPayload

logger = structlog.get_logger(__name__)


class SupabaseAuthClient(AuthGateway):
    """Thin wrapper around the /auth/v1 REST API."""

    def __init__(self, http: SupabaseHttp) -> None:
        self._http = http

    async def _post(
        self,
        path: str,
        *,
        json: dict | None = None,  # type: ignore[type-arg]
        params: dict | None = None,  # type: ignore[type-arg]
        access_token: str | None = None,
    ) -> httpx.Response:
        async with self._http.client() as client:
            try:
                response = await client.post(
                    path, json=json, params=params, headers=self._http.headers(access_token)
                )
            except httpx.RequestError as exc:
                logger.error("auth_connection_failed", path=path, error=str(exc))
                raise NetworkError(
                    "Network error: Please check your internet connection."
                ) from exc

        if response.is_error:
            message = error_message(response)
            logger.warning("auth_request_rejected", path=path, status_code=response.status_code)
            if response.status_code == 401 and access_token is not None:
                raise UnauthenticatedError()
            raise AuthError(message)
        return response

    @staticmethod
    def _parse_session(response: httpx.Response) -> AuthSession:
        try:
            return SessionPayload.model_validate(response.json()).to_domain()
        except (ValueError, PydanticValidationError) as exc:
            raise AuthError("Unexpected response from the auth provider.") from exc

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """POST /auth/v1/token?grant_type=password"""
        response = await self._post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._parse_session(response)
        logger.info("auth_signed_in", user_id=session.user.id)
        return session

    async def sign_up(self, email: str, password: str, metadata: dict) -> SignUpResult:  # type: ignore[type-arg]
        """
        POST /auth/v1/signup

        With email confirmation enabled the provider answers with the bare user
        and no tokens; otherwise with a full session.
        """
        response = await self._post(
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": metadata},
        )
        body = response.json()

        if "access_token" in body:
            session = self._parse_session(response)
            return SignUpResult(user=session.user, session=session)

        user_body = body.get("user", body)
        try:
            user = UserPayload.model_validate(user_body).to_domain() if user_body.get("id") else None
        except PydanticValidationError as exc:
            raise AuthError("Unexpected response from the auth provider.") from exc
        return SignUpResult(user=user, session=None)

    async def refresh(self, refresh_token: str) -> AuthSession:
        """POST /auth/v1/token?grant_type=refresh_token"""
        response = await self._post(
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._parse_session(response)

    async def get_user(self, access_token: str) -> AuthUser:
        """GET /auth/v1/user"""
        async with self._http.client() as client:
            try:
                response = await client.get("/auth/v1/user", headers=self._http.headers(access_token))
            except httpx.RequestError as exc:
                logger.error("auth_connection_failed", path="/auth/v1/user", error=str(exc))
                raise NetworkError(
                    "Network error: Please check your internet connection."
                ) from exc

        if response.status_code in (401, 403):
            raise UnauthenticatedError()
        if response.is_error:
            raise AuthError(error_message(response))
        try:
            return UserPayload.model_validate(response.json()).to_domain()
        except (ValueError, PydanticValidationError) as exc:
            raise AuthError("Unexpected response from the auth provider.") from exc

    async def sign_out(self, access_token: str) -> None:
        """POST /auth/v1/logout"""
        await self._post("/auth/v1/logout", access_token=access_token)
