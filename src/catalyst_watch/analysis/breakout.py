"""Breakout classification of the latest bar against a consolidation range."""

from datetime import datetime, timezone
from typing import Optional

import numpy as np
import pandas as pd

from ..config.logging import get_logger
from .indicators import NEUTRAL_RSI, candlestick_pattern, momentum_status, wilder_rsi
from .models import (
    BreakoutSignal,
    ConsolidationPeriod,
    KeyLevels,
    Momentum,
    PriceAction,
    SignalType,
    VolumeConfirmation,
)
from .series import bar_date, normalize_ohlcv

logger = get_logger(__name__)

DEFAULT_VOLUME_THRESHOLD = 1.5
DEFAULT_RSI_PERIOD = 14

STRENGTH_WEIGHT = 0.40
VOLUME_WEIGHT = 0.35
RSI_WEIGHT = 0.25


def _post_window_closes(df: pd.DataFrame, end_date) -> pd.Series:
    """Last close inside the window followed by every close after it."""
    dates = pd.Index([bar_date(label) for label in df.index])
    inside = np.asarray(dates <= end_date)
    after = df["close"][~inside]
    if inside.any():
        seed = df["close"][inside].iloc[[-1]]
        after = pd.concat([seed, after])
    return after.dropna()


def _confidence(
    strength: float,
    volume_ratio: float,
    volume_threshold: float,
    rsi: float,
    direction: str,
) -> float:
    volume_component = min(volume_ratio / (2 * volume_threshold), 1.0) * 100
    if direction == "bullish":
        rsi_component = rsi
    elif direction == "bearish":
        rsi_component = 100 - rsi
    else:
        rsi_component = abs(rsi - 50) * 2

    score = (
        STRENGTH_WEIGHT * strength
        + VOLUME_WEIGHT * volume_component
        + RSI_WEIGHT * rsi_component
    )
    return float(np.clip(score, 0, 100))


def _empty_signal(
    ticker: str, consolidation: Optional[ConsolidationPeriod], now: datetime
) -> BreakoutSignal:
    high = consolidation.high if consolidation else 0.0
    low = consolidation.low if consolidation else 0.0
    height = high - low
    return BreakoutSignal(
        ticker=ticker,
        timestamp=now,
        signal=SignalType.NO_SIGNAL,
        confidence=0.0,
        consolidation=consolidation,
        volume_confirmation=VolumeConfirmation(
            current_volume=0.0,
            average_volume=consolidation.avg_volume if consolidation else 0.0,
            volume_ratio=0.0,
            is_confirmed=False,
        ),
        momentum=Momentum(rsi=NEUTRAL_RSI, status=momentum_status(NEUTRAL_RSI)),
        key_levels=KeyLevels(
            support=[low, low - height],
            resistance=[high, high + height],
            breakout_level=high,
        ),
        price_action=PriceAction(
            current_price=None, breakout_magnitude=0.0, candlestick_pattern=None
        ),
    )


def classify_breakout(
    series: pd.DataFrame,
    consolidation: Optional[ConsolidationPeriod],
    *,
    ticker: str = "",
    volume_threshold: float = DEFAULT_VOLUME_THRESHOLD,
    rsi_period: int = DEFAULT_RSI_PERIOD,
    now: Optional[datetime] = None,
) -> BreakoutSignal:
    """
    Classify the most recent bar of ``series`` against ``consolidation``.

    Empty or unusable data produces a ``no_signal`` result with neutral
    momentum rather than an error.

    Raises:
        MalformedSeriesError: the series has missing columns or unordered
            timestamps
    """
    now = now or datetime.now(timezone.utc)
    df = normalize_ohlcv(series)
    priced = df.dropna(subset=["close"])

    if consolidation is None or priced.empty:
        return _empty_signal(ticker, consolidation, now)

    last = priced.iloc[-1]
    current_price = float(last["close"])
    current_volume = float(last["volume"]) if np.isfinite(last["volume"]) else 0.0

    avg_volume = consolidation.avg_volume
    volume_ratio = current_volume / avg_volume if avg_volume > 0 else 0.0
    is_confirmed = volume_ratio >= volume_threshold

    rsi = wilder_rsi(_post_window_closes(df, consolidation.end_date), rsi_period)

    high, low = consolidation.high, consolidation.low
    height = consolidation.range_height

    if current_price > high:
        direction = "bullish"
        signal = SignalType.BULLISH_BREAKOUT if is_confirmed else SignalType.NO_SIGNAL
    elif current_price < low:
        direction = "bearish"
        signal = SignalType.BEARISH_BREAKDOWN if is_confirmed else SignalType.NO_SIGNAL
    else:
        direction = "inside"
        signal = SignalType.CONSOLIDATION

    breakout_level = low if direction == "bearish" else high
    magnitude = (
        (current_price - breakout_level) / breakout_level * 100
        if breakout_level > 0
        else 0.0
    )

    result = BreakoutSignal(
        ticker=ticker,
        timestamp=now,
        signal=signal,
        confidence=_confidence(
            consolidation.strength_score, volume_ratio, volume_threshold, rsi, direction
        ),
        consolidation=consolidation,
        volume_confirmation=VolumeConfirmation(
            current_volume=current_volume,
            average_volume=avg_volume,
            volume_ratio=volume_ratio,
            is_confirmed=is_confirmed,
        ),
        momentum=Momentum(rsi=rsi, status=momentum_status(rsi)),
        key_levels=KeyLevels(
            support=[low, low - height],
            resistance=[high, high + height],
            breakout_level=breakout_level,
        ),
        price_action=PriceAction(
            current_price=current_price,
            breakout_magnitude=magnitude,
            candlestick_pattern=candlestick_pattern(
                last["open"], last["high"], last["low"], last["close"]
            ),
        ),
    )

    logger.debug(
        "Breakout classified",
        ticker=ticker,
        signal=signal.value,
        confidence=round(result.confidence, 2),
        volume_ratio=round(volume_ratio, 2),
        rsi=round(rsi, 2),
    )
    return result
