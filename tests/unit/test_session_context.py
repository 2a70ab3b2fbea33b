"""Unit tests for the SessionContext: the auth gateway is mocked."""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.session_context import SessionContext
from src.domain.entities.auth_session import AuthSession, AuthUser, SignUpResult
from src.domain.enums.validation_failure import ValidationFailure
from src.domain.errors import AuthError, NetworkError, UnauthenticatedError, ValidationError
from src.infrastructure.persistence.file_session_store import InMemorySessionStore

USER = AuthUser(id="user-1", email="grower@farm.test")


def _make_session(*, expired: bool = False, token: str = "access-1") -> AuthSession:
    delta = timedelta(hours=-1) if expired else timedelta(hours=1)
    return AuthSession(
        access_token=token,
        refresh_token="refresh-1",
        expires_at=datetime.now(timezone.utc) + delta,
        user=USER,
    )


def _make_auth(session: AuthSession | None = None) -> MagicMock:
    auth = MagicMock()
    auth.sign_in = AsyncMock(return_value=session or _make_session())
    auth.sign_up = AsyncMock()
    auth.refresh = AsyncMock(return_value=_make_session(token="access-2"))
    auth.get_user = AsyncMock(return_value=USER)
    auth.sign_out = AsyncMock()
    return auth


class TestSignIn:
    @pytest.mark.asyncio
    async def test_sets_user_and_persists(self) -> None:
        auth = _make_auth()
        store = InMemorySessionStore()
        context = SessionContext(auth, store)

        user = await context.sign_in(" grower@farm.test ", "secret")

        assert user == USER
        assert context.user == USER
        assert context.is_authenticated is True
        assert store.session is not None
        auth.sign_in.assert_awaited_once_with("grower@farm.test", "secret")

    @pytest.mark.asyncio
    async def test_missing_fields_rejected_locally(self) -> None:
        auth = _make_auth()
        context = SessionContext(auth, InMemorySessionStore())

        with pytest.raises(ValidationError) as exc_info:
            await context.sign_in("", "secret")

        assert exc_info.value.failure == ValidationFailure.MISSING_FIELDS
        auth.sign_in.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_credentials_propagate(self) -> None:
        auth = _make_auth()
        auth.sign_in = AsyncMock(side_effect=AuthError("Invalid login credentials"))
        context = SessionContext(auth, InMemorySessionStore())

        with pytest.raises(AuthError):
            await context.sign_in("grower@farm.test", "wrong")
        assert context.user is None

    @pytest.mark.asyncio
    async def test_notifies_listeners(self) -> None:
        context = SessionContext(_make_auth(), InMemorySessionStore())
        seen: list[AuthUser | None] = []
        context.subscribe(seen.append)

        await context.sign_in("grower@farm.test", "secret")
        await context.sign_out()

        assert seen == [USER, None]


class TestSignUp:
    @pytest.mark.asyncio
    async def test_confirmation_required(self) -> None:
        auth = _make_auth()
        auth.sign_up = AsyncMock(return_value=SignUpResult(user=USER, session=None))
        context = SessionContext(auth, InMemorySessionStore())

        result = await context.sign_up(
            email="grower@farm.test",
            password="secret1",
            full_name=" Ada Grower ",
            farm_name="Green Acres",
            agreed_to_terms=True,
        )

        assert result.confirmation_required is True
        assert context.is_authenticated is False
        auth.sign_up.assert_awaited_once_with(
            "grower@farm.test",
            "secret1",
            {"full_name": "Ada Grower", "farm_name": "Green Acres"},
        )

    @pytest.mark.asyncio
    async def test_auto_confirmed_signs_in(self) -> None:
        session = _make_session()
        auth = _make_auth()
        auth.sign_up = AsyncMock(return_value=SignUpResult(user=USER, session=session))
        context = SessionContext(auth, InMemorySessionStore())

        result = await context.sign_up(
            email="grower@farm.test",
            password="secret1",
            full_name="Ada",
            farm_name="Green Acres",
            agreed_to_terms=True,
        )

        assert result.confirmation_required is False
        assert context.user == USER

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, failure",
        [
            ({"farm_name": ""}, ValidationFailure.MISSING_FIELDS),
            ({"agreed_to_terms": False}, ValidationFailure.TERMS_NOT_ACCEPTED),
            ({"password": "12345"}, ValidationFailure.PASSWORD_TOO_SHORT),
        ],
    )
    async def test_local_validation(self, overrides: dict, failure: ValidationFailure) -> None:  # type: ignore[type-arg]
        auth = _make_auth()
        context = SessionContext(auth, InMemorySessionStore())
        fields = dict(
            email="grower@farm.test",
            password="secret1",
            full_name="Ada",
            farm_name="Green Acres",
            agreed_to_terms=True,
        )
        fields.update(overrides)

        with pytest.raises(ValidationError) as exc_info:
            await context.sign_up(**fields)

        assert exc_info.value.failure == failure
        auth.sign_up.assert_not_awaited()


class TestSignOut:
    @pytest.mark.asyncio
    async def test_clears_token_even_when_remote_fails(self) -> None:
        auth = _make_auth()
        auth.sign_out = AsyncMock(side_effect=NetworkError("offline"))
        store = InMemorySessionStore()
        context = SessionContext(auth, store)
        await context.sign_in("grower@farm.test", "secret")

        await context.sign_out()

        assert context.user is None
        assert store.session is None
        assert context.initial_route() == "login"


class TestAccessToken:
    @pytest.mark.asyncio
    async def test_no_session_raises(self) -> None:
        context = SessionContext(_make_auth(), InMemorySessionStore())
        with pytest.raises(UnauthenticatedError):
            await context.access_token()

    @pytest.mark.asyncio
    async def test_valid_token_returned(self) -> None:
        context = SessionContext(_make_auth(), InMemorySessionStore())
        await context.sign_in("grower@farm.test", "secret")
        assert await context.access_token() == "access-1"

    @pytest.mark.asyncio
    async def test_expired_token_refreshed(self) -> None:
        auth = _make_auth(_make_session(expired=True))
        context = SessionContext(auth, InMemorySessionStore())
        await context.sign_in("grower@farm.test", "secret")

        assert await context.access_token() == "access-2"
        auth.refresh.assert_awaited_once_with("refresh-1")

    @pytest.mark.asyncio
    async def test_rejected_refresh_signs_out(self) -> None:
        auth = _make_auth(_make_session(expired=True))
        auth.refresh = AsyncMock(side_effect=AuthError("Invalid Refresh Token"))
        context = SessionContext(auth, InMemorySessionStore())
        await context.sign_in("grower@farm.test", "secret")

        with pytest.raises(UnauthenticatedError):
            await context.access_token()
        assert context.user is None


class TestRestore:
    @pytest.mark.asyncio
    async def test_nothing_stored(self) -> None:
        context = SessionContext(_make_auth(), InMemorySessionStore())
        assert context.loading is True

        assert await context.restore() is None

        assert context.loading is False
        assert context.initial_route() == "login"

    @pytest.mark.asyncio
    async def test_valid_stored_session(self) -> None:
        auth = _make_auth()
        context = SessionContext(auth, InMemorySessionStore(_make_session()))

        assert await context.restore() == USER

        assert context.initial_route() == "dashboard"
        auth.get_user.assert_awaited_once_with("access-1")
        auth.refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_stored_session_is_refreshed(self) -> None:
        auth = _make_auth()
        store = InMemorySessionStore(_make_session(expired=True))
        context = SessionContext(auth, store)

        await context.restore()

        assert await context.access_token() == "access-2"
        assert store.session is not None
        assert store.session.access_token == "access-2"

    @pytest.mark.asyncio
    async def test_revoked_session_is_cleared(self) -> None:
        auth = _make_auth()
        auth.get_user = AsyncMock(side_effect=UnauthenticatedError())
        store = InMemorySessionStore(_make_session())
        context = SessionContext(auth, store)

        assert await context.restore() is None
        assert store.session is None
        assert context.loading is False

    @pytest.mark.asyncio
    async def test_offline_keeps_stored_session(self) -> None:
        auth = _make_auth()
        auth.get_user = AsyncMock(side_effect=NetworkError("offline"))
        store = InMemorySessionStore(_make_session())
        context = SessionContext(auth, store)

        assert await context.restore() is None
        assert context.is_authenticated is False
        assert store.session is not None
