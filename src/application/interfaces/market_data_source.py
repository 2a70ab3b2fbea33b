from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CommodityPrice:
    name: str
    price: Decimal
    change_percent: Decimal

    @property
    def is_positive(self) -> bool:
        return self.change_percent >= 0


@dataclass(frozen=True)
class SpotlightItem:
    title: str
    subtitle: str
    image_url: str


@dataclass(frozen=True)
class MarketItem:
    id: str
    name: str
    category: str
    price: Decimal
    change_percent: Decimal
    volume: str


class MarketDataSource(ABC):
    """
    Port for market figures shown next to the user's own listings.

    The shipped implementation returns fixed values; a live feed can replace
    it without touching the use cases or the console.
    """

    @abstractmethod
    async def commodity_prices(self) -> list[CommodityPrice]:
        ...

    @abstractmethod
    async def spotlight(self) -> list[SpotlightItem]:
        ...

    @abstractmethod
    async def trending_items(self) -> list[MarketItem]:
        ...

    @abstractmethod
    async def market_growth_percent(self) -> Decimal:
        ...

    @abstractmethod
    async def views_for(self, listing_count: int) -> int:
        """Estimated listing views for the analytics screen."""
        ...
