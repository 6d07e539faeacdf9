"""Detection of range-bound periods in daily price history."""

from typing import List

import numpy as np
import pandas as pd

from ..config.logging import get_logger
from .models import ConsolidationPeriod, VolumeTrend
from .series import bar_date, normalize_ohlcv

logger = get_logger(__name__)

DEFAULT_MAX_PERCENT_RANGE = 8.0
# Second-half volume within +/-10% of the first half counts as stable
VOLUME_TREND_BAND = 0.10


def classify_volume_trend(volumes: np.ndarray) -> VolumeTrend:
    half = len(volumes) // 2
    if half == 0:
        return VolumeTrend.STABLE

    first = np.nanmean(volumes[:half]) if np.any(np.isfinite(volumes[:half])) else 0.0
    second = np.nanmean(volumes[half:]) if np.any(np.isfinite(volumes[half:])) else 0.0

    if first <= 0:
        return VolumeTrend.INCREASING if second > 0 else VolumeTrend.STABLE
    if second > first * (1 + VOLUME_TREND_BAND):
        return VolumeTrend.INCREASING
    if second < first * (1 - VOLUME_TREND_BAND):
        return VolumeTrend.DECREASING
    return VolumeTrend.STABLE


def strength_from_range(percent_range: float) -> float:
    return max(0.0, 100.0 - percent_range * 5)


def detect_consolidations(
    series: pd.DataFrame,
    min_duration_days: int,
    max_percent_range: float = DEFAULT_MAX_PERCENT_RANGE,
) -> List[ConsolidationPeriod]:
    """
    Find every window of ``min_duration_days`` consecutive bars whose
    high-to-low spread is below ``max_percent_range`` percent of the low.

    Windows are evaluated at every start offset, so overlapping periods are
    all reported, in chronological order.

    Args:
        series: Daily OHLCV frame (see ``normalize_ohlcv``)
        min_duration_days: Window length in bars
        max_percent_range: Exclusive upper bound on ``(high - low) / low * 100``

    Returns:
        Qualifying consolidation periods; empty when the series is too short

    Raises:
        ValueError: ``min_duration_days`` is below 1
        MalformedSeriesError: the series is not a valid OHLCV frame
    """
    if min_duration_days < 1:
        raise ValueError("min_duration_days must be at least 1")

    df = normalize_ohlcv(series)
    window = int(min_duration_days)
    if len(df) < window:
        return []

    highs = df["high"].rolling(window).max().to_numpy()
    lows = df["low"].rolling(window).min().to_numpy()
    volumes = df["volume"].to_numpy()
    index = df.index

    with np.errstate(divide="ignore", invalid="ignore"):
        percent = np.where(
            np.isfinite(lows) & np.isfinite(highs) & (lows > 0),
            (highs - lows) / lows * 100,
            np.inf,
        )

    periods: List[ConsolidationPeriod] = []
    for end in range(window - 1, len(df)):
        pct = float(percent[end])
        if not pct < max_percent_range:
            continue

        start = end - window + 1
        window_volumes = volumes[start : end + 1]
        finite = window_volumes[np.isfinite(window_volumes)]
        avg_volume = float(finite.mean()) if len(finite) else 0.0

        periods.append(
            ConsolidationPeriod(
                start_date=bar_date(index[start]),
                end_date=bar_date(index[end]),
                duration_days=window,
                high=float(highs[end]),
                low=float(lows[end]),
                percent_range=pct,
                avg_volume=avg_volume,
                volume_trend=classify_volume_trend(window_volumes),
                strength_score=strength_from_range(pct),
            )
        )

    logger.debug(
        "Consolidation scan complete",
        bars=len(df),
        window=window,
        found=len(periods),
    )
    return periods
