"""Technical indicators used by the breakout classifier."""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .models import MomentumStatus

NEUTRAL_RSI = 50.0


def wilder_rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index of the final close using Wilder smoothing.

    The first average gain/loss is the simple mean of the first ``period``
    deltas; later ones use ``(prev * (period - 1) + current) / period``.
    Fewer than ``period + 1`` closes yields exactly 50.
    """
    values = np.asarray(pd.Series(closes, dtype=float).dropna(), dtype=float)
    if period < 1 or len(values) < period + 1:
        return NEUTRAL_RSI

    deltas = np.diff(values)
    gains = np.clip(deltas, 0, None)
    losses = np.clip(-deltas, 0, None)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return NEUTRAL_RSI if avg_gain == 0 else 100.0

    rs = avg_gain / avg_loss
    return float(100 - 100 / (1 + rs))


def momentum_status(rsi: float) -> MomentumStatus:
    if rsi > 70:
        return MomentumStatus.FIRING
    if rsi < 30:
        return MomentumStatus.COOLING
    return MomentumStatus.BUILDING


def candlestick_pattern(
    open_: float, high: float, low: float, close: float
) -> Optional[str]:
    """Name the shape of a single bar, or None when it cannot be read."""
    bar = np.array([open_, high, low, close], dtype=float)
    if not np.all(np.isfinite(bar)):
        return None

    total = high - low
    if total <= 0:
        return "doji"

    body = abs(close - open_)
    upper_shadow = high - max(open_, close)
    lower_shadow = min(open_, close) - low

    if body <= total * 0.1:
        return "doji"
    if body >= total * 0.9:
        return "bullish_marubozu" if close > open_ else "bearish_marubozu"
    if lower_shadow >= body * 2 and upper_shadow <= body * 0.5:
        return "hammer"
    if upper_shadow >= body * 2 and lower_shadow <= body * 0.5:
        return "shooting_star"
    return "bullish" if close > open_ else "bearish"
