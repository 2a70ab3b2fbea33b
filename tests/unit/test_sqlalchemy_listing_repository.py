"""Unit tests for the SQLAlchemy listing repository with a mocked session factory."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.domain.entities.listing import NewListing
from src.domain.errors import PersistenceError
from src.domain.values.optional_field import Some
from src.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
    _to_domain,
    _to_model,
)

OWNER_ID = str(uuid4())


def _make_factory(session: MagicMock) -> MagicMock:
    @asynccontextmanager
    async def _scope():  # type: ignore[no-untyped-def]
        yield session

    factory = MagicMock(side_effect=lambda: _scope())
    factory.begin = MagicMock(side_effect=lambda: _scope())
    return factory


class TestMapping:
    def test_round_trip_preserves_nulls(self) -> None:
        model = _to_model(
            UUID(OWNER_ID),
            NewListing(
                nomenclature="Seed Bag",
                price=Decimal("500"),
                image_urls=["https://x/1.jpg"],
                narrative=Some("Heirloom"),
            ),
        )
        model.id = uuid4()
        model.created_at = model.updated_at = datetime.now(timezone.utc)

        listing = _to_domain(model)

        assert listing.user_id == OWNER_ID
        assert listing.classification is None
        assert listing.narrative == "Heirloom"
        assert listing.price == Decimal("500")
        assert listing.provenance_certified is True
        assert listing.logistics_provided is False


class TestSqlAlchemyListingRepository:
    @pytest.mark.asyncio
    async def test_create_adds_and_refreshes(self) -> None:
        session = MagicMock()
        session.flush = AsyncMock()

        async def _refresh(model) -> None:  # type: ignore[no-untyped-def]
            model.id = uuid4()
            model.created_at = model.updated_at = datetime.now(timezone.utc)

        session.refresh = AsyncMock(side_effect=_refresh)
        repo = SqlAlchemyListingRepository(_make_factory(session))

        listing = await repo.create(
            OWNER_ID,
            NewListing(nomenclature="Corn", price=Decimal("12"), image_urls=["https://x/c.jpg"]),
        )

        session.add.assert_called_once()
        session.flush.assert_awaited_once()
        assert listing.nomenclature == "Corn"
        assert listing.created_at is not None

    @pytest.mark.asyncio
    async def test_database_error_becomes_persistence_error(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        repo = SqlAlchemyListingRepository(_make_factory(session))

        with pytest.raises(PersistenceError) as exc_info:
            await repo.list_by_owner(OWNER_ID)
        assert exc_info.value.operation == "fetch listings"

    @pytest.mark.asyncio
    async def test_delete_missing_row_is_noop(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(return_value=MagicMock(rowcount=0))
        repo = SqlAlchemyListingRepository(_make_factory(session))

        await repo.delete_by_id(str(uuid4()), OWNER_ID)

        session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_malformed_id_is_noop(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock()
        repo = SqlAlchemyListingRepository(_make_factory(session))

        await repo.delete_by_id("not-a-uuid", OWNER_ID)

        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_owner_id_becomes_persistence_error(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock()
        repo = SqlAlchemyListingRepository(_make_factory(session))

        with pytest.raises(PersistenceError) as exc_info:
            await repo.list_by_owner("not-a-uuid")
        assert exc_info.value.operation == "fetch listings"

        with pytest.raises(PersistenceError) as exc_info:
            await repo.create(
                "not-a-uuid",
                NewListing(nomenclature="Corn", price=Decimal("12"), image_urls=["https://x/c.jpg"]),
            )
        assert exc_info.value.operation == "create listing"
        session.execute.assert_not_awaited()
