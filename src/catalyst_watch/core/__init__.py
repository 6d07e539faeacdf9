"""External collaborators: price lookups and trading-session clocks."""

from .market_hours import AlwaysOpenClock, MarketClock, USEquityMarketClock
from .price_source import PricePoint, PriceSource, YFinancePriceSource

__all__ = [
    "AlwaysOpenClock",
    "MarketClock",
    "PricePoint",
    "PriceSource",
    "USEquityMarketClock",
    "YFinancePriceSource",
]
