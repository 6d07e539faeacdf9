"""SQLAlchemy ORM models for watchlists, alert settings, catalysts and alerts."""

import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from .database import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class WatchlistEntry(Base):
    """A ticker on a user's watchlist."""

    __tablename__ = "watchlist_entries"
    __table_args__ = (UniqueConstraint("user_id", "ticker", name="uq_watchlist_user_ticker"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    ticker = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    added_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<WatchlistEntry(user_id='{self.user_id}', ticker='{self.ticker}')>"


class AlertSettingsRecord(Base):
    """Revisit tolerance and minimum move for one (user, ticker)."""

    __tablename__ = "alert_settings"
    __table_args__ = (UniqueConstraint("user_id", "ticker", name="uq_settings_user_ticker"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    ticker = Column(String, nullable=False, index=True)
    tolerance_points = Column(Float, nullable=False, default=2.0)
    minimum_move = Column(Float, nullable=False, default=10.0)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<AlertSettingsRecord(user_id='{self.user_id}', ticker='{self.ticker}', "
            f"tolerance={self.tolerance_points}, minimum_move={self.minimum_move})>"
        )


class CatalystRecord(Base):
    """A news catalyst with the prices recorded before and after it."""

    __tablename__ = "catalysts"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    ticker = Column(String, nullable=False, index=True)
    label = Column(String, nullable=False, default="")
    # Nullable so partially entered documents can be stored; the store skips them
    price_before = Column(Float, nullable=True)
    price_after = Column(Float, nullable=True)
    occurred_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<CatalystRecord(id='{self.id}', ticker='{self.ticker}', label='{self.label}')>"


class AlertHistory(Base):
    """Revisit alerts that were delivered."""

    __tablename__ = "alert_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    catalyst_id = Column(String, nullable=False, index=True)
    ticker = Column(String, nullable=False)
    price_before = Column(Float, nullable=False)
    current_price = Column(Float, nullable=False)
    triggered_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    message_content = Column(Text, nullable=True)

    def __repr__(self):
        return f"<AlertHistory(user_id='{self.user_id}', catalyst_id='{self.catalyst_id}')>"
