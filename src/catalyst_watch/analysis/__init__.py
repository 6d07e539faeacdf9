"""Consolidation detection and breakout classification."""

from .breakout import classify_breakout
from .consolidation import detect_consolidations
from .indicators import wilder_rsi
from .models import (
    BreakoutSignal,
    ConsolidationPeriod,
    MomentumStatus,
    SignalType,
    VolumeTrend,
)
from .series import normalize_ohlcv

__all__ = [
    "BreakoutSignal",
    "ConsolidationPeriod",
    "MomentumStatus",
    "SignalType",
    "VolumeTrend",
    "classify_breakout",
    "detect_consolidations",
    "normalize_ohlcv",
    "wilder_rsi",
]
