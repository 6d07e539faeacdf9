"""Domain events emitted by the revisit scan."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4


@dataclass
class DomainEvent:
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        result = {"event_type": self.__class__.__name__}
        for name, value in self.__dict__.items():
            result[name] = value.isoformat() if isinstance(value, datetime) else value
        return result


@dataclass
class RevisitAlertTriggeredEvent(DomainEvent):
    """A ticker's price is back inside the band of a past catalyst."""

    user_id: Optional[str] = None
    ticker: str = ""
    catalyst_id: str = ""
    catalyst_label: str = ""
    price_before: float = 0.0
    price_after: float = 0.0
    current_price: float = 0.0
    tolerance_points: float = 0.0
    minimum_move: float = 0.0
    triggered_at: Optional[datetime] = None

    @classmethod
    def from_alert(cls, alert) -> "RevisitAlertTriggeredEvent":
        return cls(
            user_id=alert.user_id,
            ticker=alert.ticker,
            catalyst_id=alert.catalyst_id,
            catalyst_label=alert.catalyst_label,
            price_before=alert.price_before,
            price_after=alert.price_after,
            current_price=alert.current_price,
            tolerance_points=alert.tolerance_points,
            minimum_move=alert.minimum_move,
            triggered_at=alert.triggered_at,
        )


@dataclass
class ScanCompletedEvent(DomainEvent):
    """One scan tick finished (or was skipped)."""

    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    skipped_reason: Optional[str] = None
    tickers_scanned: int = 0
    alerts_delivered: int = 0
    failures: int = 0


@dataclass
class ScanTickerFailedEvent(DomainEvent):
    """A single ticker could not be processed during a scan tick."""

    ticker: Optional[str] = None
    user_id: Optional[str] = None
    stage: str = ""
    error: str = ""
