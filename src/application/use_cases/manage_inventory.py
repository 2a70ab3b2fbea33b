from dataclasses import dataclass

import structlog

from src.application.interfaces.listing_repository import ListingRepository
from src.application.session_context import SessionContext
from src.domain.entities.auth_session import AuthUser
from src.domain.entities.listing import Listing
from src.domain.errors import AuthenticationRequiredError

logger = structlog.get_logger(__name__)


def _require_user(session: SessionContext) -> AuthUser:
    user = session.user
    if user is None:
        raise AuthenticationRequiredError("Please log in to manage your listings")
    return user


class GetOwnerListings:
    """Use case: the signed-in user's listings, newest first."""

    def __init__(self, session: SessionContext, listing_repo: ListingRepository) -> None:
        self._session = session
        self._listing_repo = listing_repo

    async def execute(self) -> list[Listing]:
        user = _require_user(self._session)
        listings = await self._listing_repo.list_by_owner(user.id)
        logger.debug("owner_listings_loaded", owner_id=user.id, count=len(listings))
        return listings


@dataclass
class DeleteListingInput:
    listing_id: str


class DeleteListing:
    """Use case: remove one of the signed-in user's listings. Idempotent."""

    def __init__(self, session: SessionContext, listing_repo: ListingRepository) -> None:
        self._session = session
        self._listing_repo = listing_repo

    async def execute(self, input_data: DeleteListingInput) -> None:
        user = _require_user(self._session)
        await self._listing_repo.delete_by_id(input_data.listing_id, user.id)
        logger.info("listing_deleted", listing_id=input_data.listing_id, owner_id=user.id)
