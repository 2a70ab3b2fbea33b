"""
Authentication state for one running client.

A single SessionContext is built at startup and handed to every component that
needs to know who is signed in. It is the only writer of the session: sign-in,
sign-up, sign-out and restore all go through it, serialised by an asyncio lock.
"""
import asyncio
from collections.abc import Awaitable, Callable

import structlog

from src.application.interfaces.auth_gateway import AuthGateway
from src.application.interfaces.session_store import SessionStore
from src.domain.entities.auth_session import AuthSession, AuthUser, SignUpResult
from src.domain.enums.validation_failure import ValidationFailure
from src.domain.errors import (
    AuthError,
    NetworkError,
    UnauthenticatedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

SessionListener = Callable[[AuthUser | None], Awaitable[None] | None]


class SessionContext:
    def __init__(self, auth: AuthGateway, store: SessionStore) -> None:
        self._auth = auth
        self._store = store
        self._session: AuthSession | None = None
        self._loading = True
        self._lock = asyncio.Lock()
        self._listeners: list[SessionListener] = []

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def user(self) -> AuthUser | None:
        return self._session.user if self._session is not None else None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def initial_route(self) -> str:
        """Where the console lands once restore() has finished."""
        return "dashboard" if self.is_authenticated else "login"

    async def access_token(self) -> str:
        """
        Return a usable bearer token for the signed-in user.

        An expired token is refreshed once; with no session, or when refresh is
        rejected, raises UnauthenticatedError.
        """
        async with self._lock:
            session = self._session
            if session is None:
                raise UnauthenticatedError()
            if not session.is_expired():
                return session.access_token

            try:
                refreshed = await self._auth.refresh(session.refresh_token)
            except AuthError as exc:
                logger.warning("session_refresh_rejected", error=str(exc))
                await self._set_session(None)
                raise UnauthenticatedError() from exc

            await self._set_session(refreshed)
            return refreshed.access_token

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call listener with the new user on every auth change. Returns an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def restore(self) -> AuthUser | None:
        """Load the persisted session, refreshing and verifying it with the provider."""
        async with self._lock:
            self._loading = True
            try:
                stored = await self._store.load()
                if stored is None:
                    return None

                try:
                    session = stored
                    if session.is_expired():
                        session = await self._auth.refresh(session.refresh_token)
                    user = await self._auth.get_user(session.access_token)
                except (AuthError, UnauthenticatedError) as exc:
                    logger.info("stored_session_discarded", error=str(exc))
                    await self._set_session(None)
                    return None
                except NetworkError as exc:
                    # Keep the stored token; it may still be valid once back online
                    logger.warning("session_restore_offline", error=str(exc))
                    return None

                await self._set_session(
                    AuthSession(
                        access_token=session.access_token,
                        refresh_token=session.refresh_token,
                        expires_at=session.expires_at,
                        user=user,
                    )
                )
                logger.info("session_restored", user_id=user.id)
                return user
            finally:
                self._loading = False

    async def sign_in(self, email: str, password: str) -> AuthUser:
        if not email.strip() or not password:
            raise ValidationError(ValidationFailure.MISSING_FIELDS)

        async with self._lock:
            session = await self._auth.sign_in(email.strip(), password)
            await self._set_session(session)

        logger.info("signed_in", user_id=session.user.id)
        return session.user

    async def sign_up(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        farm_name: str,
        agreed_to_terms: bool,
    ) -> SignUpResult:
        if not all(value.strip() for value in (email, full_name, farm_name)) or not password:
            raise ValidationError(ValidationFailure.MISSING_FIELDS)
        if not agreed_to_terms:
            raise ValidationError(ValidationFailure.TERMS_NOT_ACCEPTED)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(ValidationFailure.PASSWORD_TOO_SHORT)

        async with self._lock:
            result = await self._auth.sign_up(
                email.strip(),
                password,
                {"full_name": full_name.strip(), "farm_name": farm_name.strip()},
            )
            if result.session is not None:
                await self._set_session(result.session)

        logger.info(
            "signed_up",
            user_id=result.user.id if result.user else None,
            confirmation_required=result.confirmation_required,
        )
        return result

    async def sign_out(self) -> None:
        """Revoke the session remotely if possible; always clear it locally."""
        async with self._lock:
            session = self._session
            if session is not None:
                try:
                    await self._auth.sign_out(session.access_token)
                except (AuthError, NetworkError, UnauthenticatedError) as exc:
                    logger.warning("remote_sign_out_failed", error=str(exc))
            await self._set_session(None)

        logger.info("signed_out")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _set_session(self, session: AuthSession | None) -> None:
        """Single write path for the session. Caller must hold the lock."""
        previous_user = self.user
        self._session = session

        if session is None:
            await self._store.clear()
        else:
            await self._store.save(session)

        if previous_user != self.user:
            await self._notify()

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            result = listener(self.user)
            if result is not None:
                await result
