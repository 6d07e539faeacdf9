"""Domain exceptions shared across the analysis, alerting and scan layers."""

from typing import Any, Dict, Optional


class CatalystWatchError(Exception):
    """Base exception for Catalyst Watch."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MalformedSeriesError(CatalystWatchError):
    """Raised when an OHLCV series cannot be interpreted (bad order, missing columns)."""


class InvalidConfigurationError(CatalystWatchError):
    """Raised when alert settings or catalyst records violate their invariants."""


class PriceUnavailableError(CatalystWatchError):
    """Raised when no price at all can be obtained for a ticker."""

    def __init__(self, ticker: str, reason: str = "no price data"):
        super().__init__(
            f"Price unavailable for {ticker}: {reason}",
            details={"ticker": ticker, "reason": reason},
        )
        self.ticker = ticker


class ReferenceStoreError(CatalystWatchError):
    """Raised when the reference store cannot be read."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Reference store {operation} failed: {message}",
            details={"operation": operation},
        )
        self.operation = operation
