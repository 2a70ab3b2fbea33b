"""
Read-only views built from the user's listings plus market figures:
the dashboard, the analytics summary and the market index.
"""
from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from src.application.interfaces.listing_repository import ListingRepository
from src.application.interfaces.market_data_source import (
    CommodityPrice,
    MarketDataSource,
    MarketItem,
    SpotlightItem,
)
from src.application.session_context import SessionContext
from src.domain.errors import AuthenticationRequiredError

logger = structlog.get_logger(__name__)

DEFAULT_GREETING_NAME = "FARMER"


@dataclass
class Dashboard:
    greeting_name: str
    active_listings: int
    market_prices: list[CommodityPrice] = field(default_factory=list)
    spotlight: list[SpotlightItem] = field(default_factory=list)


@dataclass
class AnalyticsSummary:
    total_listings: int
    total_value: Decimal
    average_price: Decimal
    total_views: int


@dataclass
class MarketIndex:
    growth_percent: Decimal
    trending: list[MarketItem]


class BuildDashboard:
    def __init__(
        self,
        session: SessionContext,
        listing_repo: ListingRepository,
        market_data: MarketDataSource,
    ) -> None:
        self._session = session
        self._listing_repo = listing_repo
        self._market_data = market_data

    async def execute(self) -> Dashboard:
        user = self._session.user
        if user is None:
            raise AuthenticationRequiredError("Please log in to view your dashboard")

        listings = await self._listing_repo.list_by_owner(user.id)
        return Dashboard(
            greeting_name=user.display_name.upper() or DEFAULT_GREETING_NAME,
            active_listings=len(listings),
            market_prices=await self._market_data.commodity_prices(),
            spotlight=await self._market_data.spotlight(),
        )


class BuildAnalytics:
    def __init__(
        self,
        session: SessionContext,
        listing_repo: ListingRepository,
        market_data: MarketDataSource,
    ) -> None:
        self._session = session
        self._listing_repo = listing_repo
        self._market_data = market_data

    async def execute(self) -> AnalyticsSummary:
        user = self._session.user
        if user is None:
            raise AuthenticationRequiredError("Please log in to view analytics")

        listings = await self._listing_repo.list_by_owner(user.id)
        total = sum((listing.price for listing in listings), Decimal("0"))
        average = total / len(listings) if listings else Decimal("0")

        summary = AnalyticsSummary(
            total_listings=len(listings),
            total_value=total,
            average_price=average,
            total_views=await self._market_data.views_for(len(listings)),
        )
        logger.debug("analytics_built", owner_id=user.id, total_listings=summary.total_listings)
        return summary


class GetMarketIndex:
    def __init__(self, market_data: MarketDataSource) -> None:
        self._market_data = market_data

    async def execute(self) -> MarketIndex:
        return MarketIndex(
            growth_percent=await self._market_data.market_growth_percent(),
            trending=await self._market_data.trending_items(),
        )
