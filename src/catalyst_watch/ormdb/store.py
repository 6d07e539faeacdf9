"""SQL-backed implementations of the reference store and alert ledger."""

import datetime
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..config.logging import get_logger
from ..exceptions import InvalidConfigurationError, ReferenceStoreError
from ..services.revisit.models import AlertSettings, Catalyst, TriggeredAlert
from .repositories import (
    AlertHistoryRepository,
    AlertSettingsRepository,
    CatalystRepository,
    WatchlistRepository,
)

logger = get_logger(__name__)


class SqlReferenceStore:
    """
    Reference store reading from the application database.

    Rows that fail validation (negative settings, catalysts without both
    prices) are logged and left out instead of failing the whole read.
    """

    def __init__(self):
        self.logger = logger.bind(service="reference_store")

    def list_users(self) -> List[str]:
        try:
            with WatchlistRepository() as repo:
                return repo.get_user_ids()
        except SQLAlchemyError as e:
            raise ReferenceStoreError("list_users", str(e)) from e

    def list_watchlist(self, user_id: str) -> List[str]:
        try:
            with WatchlistRepository() as repo:
                return repo.get_tickers(user_id)
        except SQLAlchemyError as e:
            raise ReferenceStoreError("list_watchlist", str(e)) from e

    def list_catalysts(self, user_id: str, ticker: str) -> List[Catalyst]:
        try:
            with CatalystRepository() as repo:
                records = repo.get_catalysts(user_id, ticker)
        except SQLAlchemyError as e:
            raise ReferenceStoreError("list_catalysts", str(e)) from e

        catalysts = []
        for record in records:
            try:
                catalysts.append(
                    Catalyst(
                        id=record.id,
                        ticker=record.ticker,
                        price_before=record.price_before,
                        price_after=record.price_after,
                        label=record.label or "",
                        occurred_at=record.occurred_at,
                    )
                )
            except InvalidConfigurationError as e:
                self.logger.warning(
                    "Skipping invalid catalyst",
                    user_id=user_id,
                    ticker=ticker,
                    catalyst_id=record.id,
                    error=e.message,
                )
        return catalysts

    def get_alert_settings(self, user_id: str, ticker: str) -> Optional[AlertSettings]:
        try:
            with AlertSettingsRepository() as repo:
                record = repo.get_settings(user_id, ticker)
        except SQLAlchemyError as e:
            raise ReferenceStoreError("get_alert_settings", str(e)) from e

        if record is None:
            return None

        try:
            return AlertSettings(
                ticker=record.ticker,
                tolerance_points=record.tolerance_points,
                minimum_move=record.minimum_move,
            )
        except InvalidConfigurationError as e:
            self.logger.warning(
                "Ignoring invalid alert settings",
                user_id=user_id,
                ticker=ticker,
                error=e.message,
            )
            return None


class SqlAlertLedger:
    """Alert ledger stored in the ``alert_history`` table."""

    def last_alerted_at(
        self, user_id: Optional[str], catalyst_id: str
    ) -> Optional[datetime.datetime]:
        with AlertHistoryRepository() as repo:
            last = repo.get_last_alert_time(user_id, catalyst_id)

        # SQLite hands datetimes back without tzinfo; they were written as UTC
        if last is not None and last.tzinfo is None:
            last = last.replace(tzinfo=datetime.UTC)
        return last

    def record(self, alerts: Sequence[TriggeredAlert]) -> None:
        with AlertHistoryRepository() as repo:
            for alert in alerts:
                repo.add_alert(
                    user_id=alert.user_id,
                    catalyst_id=alert.catalyst_id,
                    ticker=alert.ticker,
                    price_before=alert.price_before,
                    current_price=alert.current_price,
                    triggered_at=alert.triggered_at,
                    message_content=alert.catalyst_label,
                )
