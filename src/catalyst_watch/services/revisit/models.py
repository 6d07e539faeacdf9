"""Data models for catalyst price-revisit alerting."""

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ...exceptions import InvalidConfigurationError

DEFAULT_TOLERANCE_POINTS = 2.0
DEFAULT_MINIMUM_MOVE = 10.0


@dataclass(frozen=True)
class Catalyst:
    """A past news event with the prices recorded around it."""

    id: str
    ticker: str
    price_before: float
    price_after: float
    label: str = ""
    occurred_at: Optional[datetime] = None

    def __post_init__(self):
        for name in ("price_before", "price_after"):
            value = getattr(self, name)
            if value is None or not math.isfinite(value):
                raise InvalidConfigurationError(
                    f"Catalyst {self.id} has no usable {name}",
                    {"catalyst_id": self.id, "field": name},
                )
        object.__setattr__(self, "ticker", self.ticker.upper())

    @property
    def magnitude(self) -> float:
        return abs(self.price_after - self.price_before)


@dataclass(frozen=True)
class AlertSettings:
    """Per-(user, ticker) tolerance band and minimum catalyst move."""

    ticker: str
    tolerance_points: float = DEFAULT_TOLERANCE_POINTS
    minimum_move: float = DEFAULT_MINIMUM_MOVE

    def __post_init__(self):
        for name in ("tolerance_points", "minimum_move"):
            value = getattr(self, name)
            if value is None or not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(
                    f"{name} must be a non-negative number, got {value!r}",
                    {"ticker": self.ticker, "field": name},
                )
        object.__setattr__(self, "ticker", self.ticker.upper())


@dataclass(frozen=True)
class TriggeredAlert:
    """Current price has come back within tolerance of a catalyst's pre-event price."""

    ticker: str
    catalyst_id: str
    catalyst_label: str
    price_before: float
    price_after: float
    current_price: float
    tolerance_points: float
    minimum_move: float
    triggered_at: datetime
    user_id: Optional[str] = None

    @property
    def alert_key(self) -> Tuple[Optional[str], str]:
        return (self.user_id, self.catalyst_id)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["triggered_at"] = self.triggered_at.isoformat()
        return data


@dataclass(frozen=True)
class RevisitCheck:
    """Per-catalyst evaluation detail."""

    catalyst: Catalyst
    distance: float
    eligible: bool
    revisiting: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalyst_id": self.catalyst.id,
            "label": self.catalyst.label,
            "price_before": self.catalyst.price_before,
            "price_after": self.catalyst.price_after,
            "magnitude": self.catalyst.magnitude,
            "distance": self.distance,
            "eligible": self.eligible,
            "revisiting": self.revisiting,
        }
