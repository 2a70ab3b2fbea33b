from abc import ABC, abstractmethod

from src.domain.entities.listing import Listing, NewListing


class ListingRepository(ABC):
    """Port for creating, reading and deleting an owner's listings."""

    @abstractmethod
    async def create(self, owner_id: str, new_listing: NewListing) -> Listing:
        """Insert one record owned by owner_id. Raises PersistenceError on rejection."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Listing]:
        """All of owner_id's listings, newest first. Empty list when none."""
        ...

    @abstractmethod
    async def delete_by_id(self, listing_id: str, owner_id: str) -> None:
        """Delete the matching record. Deleting nothing is not an error."""
        ...
