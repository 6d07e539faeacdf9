"""Validation and normalisation of daily OHLCV frames."""

from typing import Any

import pandas as pd

from ..exceptions import MalformedSeriesError

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


def bar_date(value: Any) -> Any:
    """Calendar date of an index label; non-timestamp labels pass through."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    return value


def normalize_ohlcv(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of ``frame`` with lower-case OHLCV columns and a time index.

    Column names are matched case-insensitively, so yfinance output
    (``Open``, ``High``...) is accepted as is. A ``date`` or ``timestamp``
    column, when present, becomes the index.

    Raises:
        MalformedSeriesError: required columns are missing or the timestamps
            are not strictly increasing.
    """
    if frame is None or len(frame.columns) == 0:
        return pd.DataFrame(columns=OHLCV_COLUMNS, dtype=float)

    df = frame.rename(columns={c: str(c).strip().lower() for c in frame.columns})

    for time_column in ("date", "timestamp", "datetime"):
        if time_column in df.columns:
            df = df.set_index(time_column)
            break

    missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
    if missing:
        raise MalformedSeriesError(
            f"OHLCV series is missing columns: {', '.join(missing)}",
            {"missing": missing},
        )

    df = df[OHLCV_COLUMNS].astype(float)

    if len(df) > 1 and not (df.index.is_monotonic_increasing and df.index.is_unique):
        raise MalformedSeriesError("OHLCV timestamps must be strictly increasing")

    return df
