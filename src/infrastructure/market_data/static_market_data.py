"""
Fixed market figures.

There is no market feed behind the app yet; these values have the shape a
real aggregation would return so a live MarketDataSource can replace them.
"""
from decimal import Decimal

from src.application.interfaces.market_data_source import (
    CommodityPrice,
    MarketDataSource,
    MarketItem,
    SpotlightItem,
)

MOCK_VIEWS_PER_LISTING = 42

_COMMODITY_PRICES = [
    CommodityPrice(name="WHEAT", price=Decimal("7.42"), change_percent=Decimal("1.2")),
    CommodityPrice(name="CORN", price=Decimal("4.85"), change_percent=Decimal("-0.4")),
    CommodityPrice(name="SOYBEANS", price=Decimal("13.10"), change_percent=Decimal("0.8")),
]

_SPOTLIGHT = [
    SpotlightItem(
        title="Premium Organic Winter Seed",
        subtitle="MARKETPLACE SPOTLIGHT",
        image_url="https://images.unsplash.com/photo-1574943320219-553eb213f72d?w=800",
    ),
]

_TRENDING = [
    MarketItem("1", "Premium Textiles", "Fabric", Decimal("45000"), Decimal("12.5"), "₹2.3M"),
    MarketItem("2", "Organic Cotton", "Raw Material", Decimal("32000"), Decimal("-3.2"), "₹1.8M"),
    MarketItem("3", "Designer Fabrics", "Fabric", Decimal("68000"), Decimal("8.7"), "₹3.1M"),
    MarketItem("4", "Synthetic Blends", "Raw Material", Decimal("28000"), Decimal("5.3"), "₹1.5M"),
    MarketItem("5", "Silk Products", "Fabric", Decimal("95000"), Decimal("-1.8"), "₹4.2M"),
    MarketItem("6", "Wool Collections", "Raw Material", Decimal("52000"), Decimal("15.2"), "₹2.7M"),
]


class StaticMarketDataSource(MarketDataSource):
    async def commodity_prices(self) -> list[CommodityPrice]:
        return list(_COMMODITY_PRICES)

    async def spotlight(self) -> list[SpotlightItem]:
        return list(_SPOTLIGHT)

    async def trending_items(self) -> list[MarketItem]:
        return list(_TRENDING)

    async def market_growth_percent(self) -> Decimal:
        return Decimal("8.4")

    async def views_for(self, listing_count: int) -> int:
        return listing_count * MOCK_VIEWS_PER_LISTING
