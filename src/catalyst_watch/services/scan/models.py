"""Scan tick state and reporting models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..revisit.models import TriggeredAlert


class ScanState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EVALUATING = "evaluating"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanFailure:
    """Something that went wrong for one ticker (or the whole tick when ticker is None)."""

    ticker: Optional[str]
    user_id: Optional[str]
    stage: str
    error: str


@dataclass
class ScanReport:
    """Outcome of a single scan tick."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped_reason: Optional[str] = None
    tickers_scanned: int = 0
    alerts: List[TriggeredAlert] = field(default_factory=list)
    failures: List[ScanFailure] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "skipped_reason": self.skipped_reason,
            "tickers_scanned": self.tickers_scanned,
            "alerts": [alert.to_dict() for alert in self.alerts],
            "failures": [
                {
                    "ticker": f.ticker,
                    "user_id": f.user_id,
                    "stage": f.stage,
                    "error": f.error,
                }
                for f in self.failures
            ],
        }
