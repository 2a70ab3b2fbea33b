from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    metadata: dict = field(default_factory=dict)  # type: ignore[type-arg]

    @property
    def display_name(self) -> str:
        """Local part of the email, used for greetings."""
        return self.email.split("@")[0] if self.email else ""


@dataclass(frozen=True)
class AuthSession:
    """Credentials for the signed-in user, as issued by the auth provider."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    user: AuthUser

    # Treat tokens this close to expiry as already expired
    EXPIRY_MARGIN = timedelta(seconds=30)

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or _utcnow()
        return now >= self.expires_at - self.EXPIRY_MARGIN


@dataclass(frozen=True)
class SignUpResult:
    user: AuthUser | None
    session: AuthSession | None

    @property
    def confirmation_required(self) -> bool:
        """The provider created the user but wants the email confirmed first."""
        return self.user is not None and self.session is None
