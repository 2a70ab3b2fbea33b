from decimal import Decimal
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.interfaces.listing_repository import ListingRepository
from src.domain.entities.listing import Listing, NewListing
from src.domain.errors import PersistenceError
from src.domain.values.optional_field import to_nullable
from src.infrastructure.database.models import ListingModel

logger = structlog.get_logger(__name__)


def _to_domain(model: ListingModel) -> Listing:
    return Listing(
        id=str(model.id),
        user_id=str(model.user_id),
        nomenclature=model.nomenclature,
        classification=model.classification,
        price=Decimal(model.price),
        narrative=model.narrative,
        image_urls=list(model.image_urls),
        provenance_certified=model.provenance_certified,
        logistics_provided=model.logistics_provided,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _parse_id(value: str, operation: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise PersistenceError(operation, f"invalid id {value!r}") from exc


def _to_model(owner_id: UUID, new_listing: NewListing) -> ListingModel:
    return ListingModel(
        user_id=owner_id,
        nomenclature=new_listing.nomenclature,
        classification=to_nullable(new_listing.classification),
        price=new_listing.price,
        narrative=to_nullable(new_listing.narrative),
        image_urls=list(new_listing.image_urls),
        provenance_certified=new_listing.provenance_certified,
        logistics_provided=new_listing.logistics_provided,
    )


class SqlAlchemyListingRepository(ListingRepository):
    """
    SQLAlchemy implementation for deployments with direct database access.

    Each operation runs in its own transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, owner_id: str, new_listing: NewListing) -> Listing:
        model = _to_model(_parse_id(owner_id, "create listing"), new_listing)
        try:
            async with self._session_factory.begin() as session:
                session.add(model)
                await session.flush()
                await session.refresh(model)
        except SQLAlchemyError as exc:
            logger.error("listing_insert_failed", owner_id=owner_id, error=str(exc))
            raise PersistenceError("create listing", str(exc)) from exc

        logger.info("listing_created", listing_id=str(model.id), owner_id=owner_id)
        return _to_domain(model)

    async def list_by_owner(self, owner_id: str) -> list[Listing]:
        query = (
            select(ListingModel)
            .where(ListingModel.user_id == _parse_id(owner_id, "fetch listings"))
            .order_by(ListingModel.created_at.desc())
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                models = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("listing_query_failed", owner_id=owner_id, error=str(exc))
            raise PersistenceError("fetch listings", str(exc)) from exc

        return [_to_domain(m) for m in models]

    async def delete_by_id(self, listing_id: str, owner_id: str) -> None:
        try:
            listing_uuid, owner_uuid = UUID(listing_id), UUID(owner_id)
        except ValueError:
            # No row can carry a malformed id, so nothing to delete
            logger.debug("listing_delete_skipped", listing_id=listing_id, reason="invalid_id")
            return
        statement = delete(ListingModel).where(
            ListingModel.id == listing_uuid,
            ListingModel.user_id == owner_uuid,
        )
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(statement)
        except SQLAlchemyError as exc:
            logger.error("listing_delete_failed", listing_id=listing_id, error=str(exc))
            raise PersistenceError("delete listing", str(exc)) from exc

        # Zero rows means it was already gone or belongs to someone else
        logger.debug("listing_delete_executed", listing_id=listing_id, rows=result.rowcount)
