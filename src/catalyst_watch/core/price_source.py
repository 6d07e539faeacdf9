"""Price lookups and daily history backed by yfinance."""

from datetime import datetime
from typing import Optional, Protocol

import pandas as pd
import yfinance as yf
from pydantic import BaseModel

from ..analysis.series import normalize_ohlcv
from ..config.logging import get_logger
from ..exceptions import PriceUnavailableError
from .market_hours import MarketClock, USEquityMarketClock

logger = get_logger(__name__)


class PricePoint(BaseModel):
    """Most recent trade price for a ticker."""

    ticker: str
    price: float
    timestamp: datetime
    is_live: bool


class PriceSource(Protocol):
    """Anything that can quote a ticker and return its daily history."""

    def get_price(self, ticker: str) -> PricePoint: ...

    def get_history(self, ticker: str, days: int) -> pd.DataFrame: ...


def _to_datetime(value) -> datetime:
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return stamp.to_pydatetime()


class YFinancePriceSource:
    """
    Price source using Yahoo Finance.

    During market hours the latest one-minute bar is returned as a live quote.
    Otherwise, or when no intraday bars exist, the most recent daily close is
    returned with ``is_live=False`` instead of raising.
    """

    def __init__(self, market_clock: Optional[MarketClock] = None):
        self.market_clock = market_clock or USEquityMarketClock()
        self.logger = logger.bind(source="yfinance")

    def get_price(self, ticker: str) -> PricePoint:
        symbol = ticker.upper().strip()
        stock = yf.Ticker(symbol)

        market_open = self.market_clock.is_open()
        if market_open:
            intraday = stock.history(period="1d", interval="1m")
            closes = intraday["Close"].dropna() if not intraday.empty else intraday
            if len(closes) > 0:
                return PricePoint(
                    ticker=symbol,
                    price=float(closes.iloc[-1]),
                    timestamp=_to_datetime(closes.index[-1]),
                    is_live=True,
                )
            self.logger.info("No intraday bars, falling back to last close", ticker=symbol)

        daily = stock.history(period="5d")
        closes = daily["Close"].dropna() if not daily.empty else daily
        if len(closes) == 0:
            raise PriceUnavailableError(symbol, "no intraday or daily bars")

        return PricePoint(
            ticker=symbol,
            price=float(closes.iloc[-1]),
            timestamp=_to_datetime(closes.index[-1]),
            is_live=False,
        )

    def get_history(self, ticker: str, days: int) -> pd.DataFrame:
        """
        Daily OHLCV bars covering roughly the last ``days`` calendar days.

        Returns an empty frame when Yahoo has no data for the symbol.
        """
        symbol = ticker.upper().strip()
        data = yf.Ticker(symbol).history(period=f"{int(days)}d", interval="1d")

        if data is None or data.empty:
            self.logger.warning("No history returned", ticker=symbol, days=days)
            return normalize_ohlcv(pd.DataFrame())

        self.logger.debug("History fetched", ticker=symbol, bars=len(data))
        return normalize_ohlcv(data)
