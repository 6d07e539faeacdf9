"""Repository for per-ticker alert settings."""

from typing import Optional

from ..models import AlertSettingsRecord
from .base import BaseRepository


class AlertSettingsRepository(BaseRepository):
    """Repository for alert settings operations."""

    def upsert_settings(
        self,
        user_id: str,
        ticker: str,
        tolerance_points: float,
        minimum_move: float,
    ) -> AlertSettingsRecord:
        """Create or update the settings row for (user, ticker)."""
        record = self.get_settings(user_id, ticker)
        if record is None:
            record = AlertSettingsRecord(user_id=user_id, ticker=ticker.upper())
            self.session.add(record)

        record.tolerance_points = tolerance_points
        record.minimum_move = minimum_move
        self.session.commit()
        self.session.refresh(record)
        return record

    def get_settings(self, user_id: str, ticker: str) -> Optional[AlertSettingsRecord]:
        return (
            self.session.query(AlertSettingsRecord)
            .filter(
                AlertSettingsRecord.user_id == user_id,
                AlertSettingsRecord.ticker == ticker.upper(),
            )
            .first()
        )
