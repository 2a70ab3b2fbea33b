"""Pydantic models for the JSON documents the backend returns."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.auth_session import AuthSession, AuthUser
from src.domain.entities.listing import Listing


class UserPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str = ""
    user_metadata: dict = Field(default_factory=dict)  # type: ignore[type-arg]

    def to_domain(self) -> AuthUser:
        return AuthUser(id=self.id, email=self.email, metadata=dict(self.user_metadata))


class SessionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    expires_in: int = 3600
    expires_at: int | None = None
    user: UserPayload

    def to_domain(self) -> AuthSession:
        if self.expires_at is not None:
            expires_at = datetime.fromtimestamp(self.expires_at, tz=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)
        return AuthSession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=expires_at,
            user=self.user.to_domain(),
        )


class ListingRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    nomenclature: str
    classification: str | None = None
    price: Decimal
    narrative: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    provenance_certified: bool = True
    logistics_provided: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_domain(self) -> Listing:
        return Listing(
            id=self.id,
            user_id=self.user_id,
            nomenclature=self.nomenclature,
            classification=self.classification,
            price=self.price,
            narrative=self.narrative,
            image_urls=list(self.image_urls),
            provenance_certified=self.provenance_certified,
            logistics_provided=self.logistics_provided,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
