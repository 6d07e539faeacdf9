"""Shared test configuration and fixtures."""

import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

import pandas as pd
import pytest
from sqlalchemy import create_engine

sys.path.append("src")


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Point settings at a throwaway data directory for every test."""
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("ENDPOINT_AUTH_TOKEN", "test_endpoint_token")
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path / "data"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'settings.db'}")
    monkeypatch.setenv("LOG_FILE_ENABLED", "false")

    from catalyst_watch.config.settings import get_settings

    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_globals():
    """Clear module-level singletons so tests never share state."""
    from catalyst_watch.events import set_event_bus
    from catalyst_watch.ormdb import database
    from catalyst_watch.services.scan.jobs import get_orchestrator

    def _reset():
        set_event_bus(None)
        get_orchestrator.cache_clear()
        database._engine = None
        database._SessionLocal = None

    _reset()
    yield
    _reset()


@pytest.fixture
def isolated_db(tmp_path):
    """Create an isolated SQLite database and route all sessions to it."""
    from catalyst_watch.ormdb import database
    from catalyst_watch.ormdb import models  # noqa: F401

    db_path = tmp_path / "isolated.db"
    engine = create_engine(
        f"sqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    database.configure_database(engine)
    database.Base.metadata.create_all(bind=engine)

    yield {
        "engine": engine,
        "session_factory": database.get_session_factory(),
        "db_path": str(db_path),
    }

    engine.dispose()


def build_ohlcv(
    closes: Sequence[float],
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
    opens: Optional[Sequence[float]] = None,
    start: str = "2024-01-02",
) -> pd.DataFrame:
    """Daily OHLCV frame on business days; missing columns default to the close."""
    n = len(closes)
    return pd.DataFrame(
        {
            "open": list(opens) if opens is not None else list(closes),
            "high": list(highs) if highs is not None else list(closes),
            "low": list(lows) if lows is not None else list(closes),
            "close": list(closes),
            "volume": list(volumes) if volumes is not None else [1000.0] * n,
        },
        index=pd.bdate_range(start, periods=n),
    )


@pytest.fixture
def ohlcv_factory():
    """Factory for daily OHLCV frames."""
    return build_ohlcv


@pytest.fixture
def range_bound_series():
    """20 bars trading between 99 and 101 on steady volume."""
    n = 20
    return build_ohlcv(
        closes=[100.0] * n,
        highs=[101.0] * n,
        lows=[99.0] * n,
        volumes=[1000.0] * n,
    )


class FakeReferenceStore:
    """In-memory reference store keyed the same way as the SQL one."""

    def __init__(self, watchlists=None, catalysts=None, settings=None):
        self.watchlists = watchlists or {}
        self.catalysts = catalysts or {}
        self.settings = settings or {}

    def list_users(self):
        return list(self.watchlists)

    def list_watchlist(self, user_id):
        return list(self.watchlists.get(user_id, []))

    def list_catalysts(self, user_id, ticker):
        return [c for c in self.catalysts.get(ticker, []) if c.ticker == ticker]

    def get_alert_settings(self, user_id, ticker):
        return self.settings.get((user_id, ticker))


class StaticPriceSource:
    """Price source answering from a dict; missing tickers raise."""

    def __init__(self, prices):
        self.prices = prices
        self.calls = []

    def get_price(self, ticker):
        from catalyst_watch.core.price_source import PricePoint
        from catalyst_watch.exceptions import PriceUnavailableError

        self.calls.append(ticker)
        if ticker not in self.prices:
            raise PriceUnavailableError(ticker, "not quoted")
        return PricePoint(
            ticker=ticker,
            price=self.prices[ticker],
            timestamp=datetime(2024, 1, 16, 15, 0, tzinfo=timezone.utc),
            is_live=True,
        )

    def get_history(self, ticker, days):
        raise NotImplementedError


class RecordingDelivery:
    def __init__(self):
        self.batches = []

    async def deliver(self, alerts):
        self.batches.append(list(alerts))

    @property
    def alerts(self):
        return [alert for batch in self.batches for alert in batch]


class MemoryLedger:
    def __init__(self):
        self.sent = {}

    def last_alerted_at(self, user_id, catalyst_id):
        return self.sent.get((user_id, catalyst_id))

    def record(self, alerts):
        for alert in alerts:
            self.sent[(alert.user_id, alert.catalyst_id)] = alert.triggered_at


@pytest.fixture
def revisit_store():
    """Two users sharing AAPL, one of them also watching MSFT and TSLA."""
    from catalyst_watch.services.revisit import AlertSettings, Catalyst

    return FakeReferenceStore(
        watchlists={"alice": ["AAPL", "MSFT"], "bob": ["aapl", "TSLA"]},
        catalysts={
            "AAPL": [
                Catalyst(id="aapl-earnings", ticker="AAPL", price_before=150.0, price_after=165.0,
                         label="Earnings beat"),
                Catalyst(id="aapl-minor", ticker="AAPL", price_before=151.0, price_after=152.0),
            ],
            "MSFT": [
                Catalyst(id="msft-guidance", ticker="MSFT", price_before=300.0, price_after=280.0),
            ],
            "TSLA": [
                Catalyst(id="tsla-recall", ticker="TSLA", price_before=200.0, price_after=180.0),
            ],
        },
        settings={
            ("alice", "AAPL"): AlertSettings("AAPL", tolerance_points=2.0, minimum_move=10.0),
            ("alice", "MSFT"): AlertSettings("MSFT", tolerance_points=2.0, minimum_move=10.0),
            ("bob", "AAPL"): AlertSettings("AAPL", tolerance_points=0.5, minimum_move=5.0),
            ("bob", "TSLA"): AlertSettings("TSLA", tolerance_points=5.0, minimum_move=10.0),
        },
    )
