"""Repository for watchlist operations."""

from typing import List

from ..models import WatchlistEntry
from .base import BaseRepository


class WatchlistRepository(BaseRepository):
    """Repository for per-user watchlist entries."""

    def add_ticker(self, user_id: str, ticker: str) -> WatchlistEntry:
        """Add a ticker to a user's watchlist, reactivating it if removed."""
        entry = self.get_entry(user_id, ticker)
        if entry:
            if not entry.is_active:
                entry.is_active = True
                self.session.commit()
            return entry

        entry = WatchlistEntry(user_id=user_id, ticker=ticker.upper())
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def remove_ticker(self, user_id: str, ticker: str) -> bool:
        """Remove a ticker from a watchlist (soft delete)."""
        entry = self.get_entry(user_id, ticker)
        if entry and entry.is_active:
            entry.is_active = False
            self.session.commit()
            return True
        return False

    def get_entry(self, user_id: str, ticker: str):
        return (
            self.session.query(WatchlistEntry)
            .filter(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.ticker == ticker.upper(),
            )
            .first()
        )

    def get_tickers(self, user_id: str) -> List[str]:
        """Active tickers on a user's watchlist, alphabetically."""
        rows = (
            self.session.query(WatchlistEntry.ticker)
            .filter(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.is_active.is_(True),
            )
            .order_by(WatchlistEntry.ticker)
            .all()
        )
        return [row.ticker for row in rows]

    def get_user_ids(self) -> List[str]:
        """Users with at least one active watchlist entry."""
        rows = (
            self.session.query(WatchlistEntry.user_id)
            .filter(WatchlistEntry.is_active.is_(True))
            .distinct()
            .order_by(WatchlistEntry.user_id)
            .all()
        )
        return [row.user_id for row in rows]
