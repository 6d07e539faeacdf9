"""Collaborator interfaces used by the scan orchestrator."""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from ..revisit.models import AlertSettings, Catalyst, TriggeredAlert


class ReferenceStore(Protocol):
    """Read access to watchlists, alert settings and catalysts."""

    def list_users(self) -> List[str]: ...

    def list_watchlist(self, user_id: str) -> List[str]: ...

    def list_catalysts(self, user_id: str, ticker: str) -> List[Catalyst]: ...

    def get_alert_settings(self, user_id: str, ticker: str) -> Optional[AlertSettings]: ...


class AlertLedger(Protocol):
    """Record of delivered alerts used to enforce a re-alert cooldown."""

    def last_alerted_at(self, user_id: Optional[str], catalyst_id: str) -> Optional[datetime]: ...

    def record(self, alerts: Sequence[TriggeredAlert]) -> None: ...
