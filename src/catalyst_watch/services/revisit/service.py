"""On-demand revisit checks for one user's watchlist."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...config.logging import get_logger
from ...core.price_source import PriceSource
from ..scan.protocols import ReferenceStore
from .engine import check_revisits, evaluate_catalysts
from .models import AlertSettings, RevisitCheck, TriggeredAlert

logger = get_logger(__name__)


@dataclass
class TickerCheckResult:
    """Revisit evaluation for one watchlist ticker."""

    ticker: str
    current_price: Optional[float] = None
    is_live: Optional[bool] = None
    settings: Optional[AlertSettings] = None
    checks: List[RevisitCheck] = field(default_factory=list)
    alerts: List[TriggeredAlert] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "current_price": self.current_price,
            "is_live": self.is_live,
            "tolerance_points": self.settings.tolerance_points if self.settings else None,
            "minimum_move": self.settings.minimum_move if self.settings else None,
            "checks": [check.to_dict() for check in self.checks],
            "alerts": [alert.to_dict() for alert in self.alerts],
            "error": self.error,
        }


class RevisitService:
    """Runs the revisit engine for a single user on request."""

    def __init__(self, reference_store: ReferenceStore, price_source: PriceSource):
        self.reference_store = reference_store
        self.price_source = price_source
        self.logger = logger.bind(service="revisit_service")

    async def check_user(
        self,
        user_id: str,
        ticker: Optional[str] = None,
        current_price: Optional[float] = None,
    ) -> List[TickerCheckResult]:
        """
        Check a user's watchlist (or one ticker on it) for revisits.

        An explicit ``current_price`` is only honoured together with
        ``ticker``. Tickers without alert settings are skipped; a price that
        cannot be fetched is reported on that ticker's result.
        """
        tickers = await asyncio.to_thread(self.reference_store.list_watchlist, user_id)
        tickers = [t.upper() for t in tickers]
        if ticker:
            tickers = [t for t in tickers if t == ticker.upper()]

        now = datetime.now(timezone.utc)
        results = []
        for symbol in tickers:
            settings = await asyncio.to_thread(
                self.reference_store.get_alert_settings, user_id, symbol
            )
            if settings is None:
                continue

            result = TickerCheckResult(ticker=symbol, settings=settings)
            results.append(result)

            if ticker and current_price is not None:
                result.current_price = current_price
            else:
                try:
                    point = await asyncio.to_thread(self.price_source.get_price, symbol)
                except Exception as e:
                    result.error = str(e)
                    self.logger.warning("Price fetch failed", ticker=symbol, error=str(e))
                    continue
                result.current_price = point.price
                result.is_live = point.is_live

            catalysts = await asyncio.to_thread(
                self.reference_store.list_catalysts, user_id, symbol
            )
            result.checks = evaluate_catalysts(
                symbol, result.current_price, catalysts, settings
            )
            result.alerts = check_revisits(
                symbol,
                result.current_price,
                catalysts,
                settings,
                user_id=user_id,
                now=now,
            )

        self.logger.info(
            "Revisit check complete",
            user_id=user_id,
            tickers=len(results),
            alerts=sum(len(r.alerts) for r in results),
        )
        return results
