"""Repository for catalyst operations."""

import datetime
from typing import List, Optional

from ..models import CatalystRecord
from .base import BaseRepository


class CatalystRepository(BaseRepository):
    """Repository for catalyst records."""

    def add_catalyst(
        self,
        user_id: str,
        ticker: str,
        price_before: Optional[float],
        price_after: Optional[float],
        label: str = "",
        occurred_at: Optional[datetime.datetime] = None,
        catalyst_id: Optional[str] = None,
    ) -> CatalystRecord:
        """Store a catalyst; ``catalyst_id`` defaults to a new UUID."""
        record = CatalystRecord(
            user_id=user_id,
            ticker=ticker.upper(),
            label=label,
            price_before=price_before,
            price_after=price_after,
            occurred_at=occurred_at,
        )
        if catalyst_id:
            record.id = catalyst_id

        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def get_catalyst(self, catalyst_id: str) -> Optional[CatalystRecord]:
        return self.session.get(CatalystRecord, catalyst_id)

    def get_catalysts(self, user_id: str, ticker: str) -> List[CatalystRecord]:
        """Catalysts a user recorded for a ticker, oldest first."""
        return (
            self.session.query(CatalystRecord)
            .filter(
                CatalystRecord.user_id == user_id,
                CatalystRecord.ticker == ticker.upper(),
            )
            .order_by(CatalystRecord.created_at, CatalystRecord.id)
            .all()
        )
