"""Load watchlists, alert settings and catalysts from a JSON document."""

import datetime
import json
from pathlib import Path
from typing import Any, Dict

from ..config.logging import get_logger
from .database import get_session_sync
from .repositories import AlertSettingsRepository, CatalystRepository, WatchlistRepository

logger = get_logger(__name__)


def _parse_datetime(value):
    if not value:
        return None
    return datetime.datetime.fromisoformat(value)


def seed_reference_data(data: Dict[str, Any]) -> Dict[str, int]:
    """
    Insert reference data shaped like::

        {"users": {"alice": {
            "watchlist": ["AAPL"],
            "settings": {"AAPL": {"tolerance_points": 2.0, "minimum_move": 10.0}},
            "catalysts": [{"ticker": "AAPL", "label": "Earnings",
                           "price_before": 150.0, "price_after": 165.0}]}}}

    A user's ``watchlist`` replaces the stored one: active tickers missing
    from it are removed, so re-seeding an edited file stays in sync.

    Returns:
        Counts of watchlist entries, settings and catalysts written, and of
        watchlist entries removed
    """
    counts = {"watchlist": 0, "watchlist_removed": 0, "settings": 0, "catalysts": 0}
    session = get_session_sync()

    try:
        watchlists = WatchlistRepository(session)
        settings = AlertSettingsRepository(session)
        catalysts = CatalystRepository(session)

        for user_id, user_data in data.get("users", {}).items():
            if "watchlist" in user_data:
                wanted = {ticker.upper() for ticker in user_data["watchlist"]}
                for ticker in watchlists.get_tickers(user_id):
                    if ticker not in wanted and watchlists.remove_ticker(user_id, ticker):
                        counts["watchlist_removed"] += 1

            for ticker in user_data.get("watchlist", []):
                watchlists.add_ticker(user_id, ticker)
                counts["watchlist"] += 1

            for ticker, values in user_data.get("settings", {}).items():
                settings.upsert_settings(
                    user_id,
                    ticker,
                    tolerance_points=float(values.get("tolerance_points", 2.0)),
                    minimum_move=float(values.get("minimum_move", 10.0)),
                )
                counts["settings"] += 1

            for item in user_data.get("catalysts", []):
                if item.get("id") and catalysts.get_catalyst(item["id"]) is not None:
                    continue
                catalysts.add_catalyst(
                    user_id,
                    item["ticker"],
                    price_before=item.get("price_before"),
                    price_after=item.get("price_after"),
                    label=item.get("label", ""),
                    occurred_at=_parse_datetime(item.get("occurred_at")),
                    catalyst_id=item.get("id"),
                )
                counts["catalysts"] += 1
    finally:
        session.close()

    logger.info("Reference data seeded", **counts)
    return counts


def seed_from_file(path: str) -> Dict[str, int]:
    with open(Path(path), "r") as f:
        return seed_reference_data(json.load(f))
