"""Data models for consolidation and breakout analysis."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class VolumeTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class SignalType(str, Enum):
    BULLISH_BREAKOUT = "bullish_breakout"
    BEARISH_BREAKDOWN = "bearish_breakdown"
    CONSOLIDATION = "consolidation"
    NO_SIGNAL = "no_signal"


class MomentumStatus(str, Enum):
    FIRING = "firing"
    BUILDING = "building"
    COOLING = "cooling"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class ConsolidationPeriod:
    """A window of bars whose high/low spread stayed inside the range limit."""

    start_date: Any
    end_date: Any
    duration_days: int
    high: float
    low: float
    percent_range: float
    avg_volume: float
    volume_trend: VolumeTrend
    strength_score: float

    @property
    def range_height(self) -> float:
        return self.high - self.low

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass(frozen=True)
class VolumeConfirmation:
    current_volume: float
    average_volume: float
    volume_ratio: float
    is_confirmed: bool


@dataclass(frozen=True)
class Momentum:
    rsi: float
    status: MomentumStatus


@dataclass(frozen=True)
class KeyLevels:
    support: List[float]
    resistance: List[float]
    breakout_level: float


@dataclass(frozen=True)
class PriceAction:
    current_price: Optional[float]
    breakout_magnitude: float
    candlestick_pattern: Optional[str]


@dataclass(frozen=True)
class BreakoutSignal:
    """Classification of the latest bar against a consolidation range."""

    ticker: str
    timestamp: datetime
    signal: SignalType
    confidence: float
    consolidation: Optional[ConsolidationPeriod]
    volume_confirmation: VolumeConfirmation
    momentum: Momentum
    key_levels: KeyLevels
    price_action: PriceAction
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))
