"""On-demand consolidation and breakout analysis for a single ticker."""

import asyncio
from typing import List, Optional

import numpy as np
import pandas as pd

from ...analysis.breakout import classify_breakout
from ...analysis.consolidation import classify_volume_trend, detect_consolidations
from ...analysis.models import BreakoutSignal, ConsolidationPeriod
from ...analysis.series import bar_date, normalize_ohlcv
from ...config.logging import get_logger
from ...config.settings import Settings, get_settings
from ...core.price_source import PriceSource, YFinancePriceSource

logger = get_logger(__name__)

# Half-width of the synthetic range used when no consolidation qualifies
FALLBACK_RANGE_FRACTION = 0.04
FALLBACK_STRENGTH = 75.0


def fallback_consolidation(series: pd.DataFrame, window: int) -> Optional[ConsolidationPeriod]:
    """
    Range of +/-4% around the last close, covering the trailing ``window`` bars.

    Returns None when the series has no usable close.
    """
    closes = series["close"].dropna()
    if closes.empty:
        return None

    last_close = float(closes.iloc[-1])
    tail = series.iloc[-window:]
    volumes = tail["volume"].to_numpy()
    finite = volumes[np.isfinite(volumes)]
    high = last_close * (1 + FALLBACK_RANGE_FRACTION)
    low = last_close * (1 - FALLBACK_RANGE_FRACTION)

    return ConsolidationPeriod(
        start_date=bar_date(tail.index[0]),
        end_date=bar_date(tail.index[-1]),
        duration_days=len(tail),
        high=high,
        low=low,
        # Width relative to the last close, not to the range low
        percent_range=2 * FALLBACK_RANGE_FRACTION * 100,
        avg_volume=float(finite.mean()) if len(finite) else 0.0,
        volume_trend=classify_volume_trend(volumes),
        strength_score=FALLBACK_STRENGTH,
    )


class AnalysisService:
    """Service for consolidation and breakout analysis."""

    def __init__(
        self,
        price_source: Optional[PriceSource] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.price_source = price_source or YFinancePriceSource()
        self.logger = logger.bind(service="analysis_service")

    async def get_history(self, ticker: str, lookback_days: Optional[int] = None) -> pd.DataFrame:
        if not ticker or not isinstance(ticker, str):
            raise ValueError("Ticker must be a non-empty string")

        days = lookback_days or self.settings.analysis_lookback_days
        history = await asyncio.to_thread(
            self.price_source.get_history, ticker.upper().strip(), days
        )
        return normalize_ohlcv(history)

    async def analyze_consolidations(
        self,
        ticker: str,
        lookback_days: Optional[int] = None,
        min_duration_days: Optional[int] = None,
    ) -> List[ConsolidationPeriod]:
        """
        All consolidation windows in the ticker's recent history.

        Args:
            ticker: Stock symbol
            lookback_days: History length (defaults to ``analysis_lookback_days``)
            min_duration_days: Window length (defaults to ``consolidation_min_days``)
        """
        history = await self.get_history(ticker, lookback_days)
        periods = detect_consolidations(
            history,
            min_duration_days or self.settings.consolidation_min_days,
            self.settings.consolidation_max_range_percent,
        )

        self.logger.info(
            "Consolidations analyzed",
            ticker=ticker.upper(),
            bars=len(history),
            found=len(periods),
        )
        return periods

    async def analyze_breakout(
        self, ticker: str, lookback_days: Optional[int] = None
    ) -> BreakoutSignal:
        """
        Classify the latest bar against the most recent consolidation.

        Falls back to a synthetic range around the last close when no window
        qualifies, and to a ``no_signal`` result when there is no history.
        """
        symbol = ticker.upper().strip() if isinstance(ticker, str) else ticker
        history = await self.get_history(ticker, lookback_days)
        window = self.settings.consolidation_min_days

        periods = detect_consolidations(
            history, window, self.settings.consolidation_max_range_percent
        )
        if periods:
            consolidation = periods[-1]
            used_fallback = False
        else:
            consolidation = fallback_consolidation(history, window)
            used_fallback = consolidation is not None

        signal = classify_breakout(
            history,
            consolidation,
            ticker=symbol,
            volume_threshold=self.settings.breakout_volume_ratio,
        )
        signal.metadata.update(
            {
                "bars": len(history),
                "consolidations_found": len(periods),
                "fallback_range": used_fallback,
            }
        )

        self.logger.info(
            "Breakout analyzed",
            ticker=symbol,
            signal=signal.signal.value,
            confidence=round(signal.confidence, 2),
            fallback_range=used_fallback,
        )
        return signal
