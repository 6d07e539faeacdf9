"""Repository for alert history operations."""

import datetime
from typing import List, Optional

from sqlalchemy import desc, func

from ..models import AlertHistory
from .base import BaseRepository


class AlertHistoryRepository(BaseRepository):
    """Repository for alert history operations."""

    def add_alert(
        self,
        user_id: Optional[str],
        catalyst_id: str,
        ticker: str,
        price_before: float,
        current_price: float,
        triggered_at: datetime.datetime,
        message_content: Optional[str] = None,
    ) -> AlertHistory:
        """Record a delivered alert."""
        alert = AlertHistory(
            user_id=user_id,
            catalyst_id=catalyst_id,
            ticker=ticker.upper(),
            price_before=price_before,
            current_price=current_price,
            triggered_at=triggered_at,
            message_content=message_content,
        )

        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return alert

    def get_last_alert_time(
        self, user_id: Optional[str], catalyst_id: str
    ) -> Optional[datetime.datetime]:
        """When this catalyst last alerted this user, or None."""
        return (
            self.session.query(func.max(AlertHistory.triggered_at))
            .filter(
                AlertHistory.user_id == user_id,
                AlertHistory.catalyst_id == catalyst_id,
            )
            .scalar()
        )

    def get_alerts_for_user(self, user_id: str, limit: int = 50) -> List[AlertHistory]:
        """Most recent alerts for a user."""
        return (
            self.session.query(AlertHistory)
            .filter(AlertHistory.user_id == user_id)
            .order_by(desc(AlertHistory.triggered_at))
            .limit(limit)
            .all()
        )
