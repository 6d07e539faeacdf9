"""Tests for FastAPI application endpoints."""

import sys
from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

sys.path.append("src")
from conftest import StaticPriceSource, build_ohlcv
from catalyst_watch.config.settings import get_settings
from catalyst_watch.core.market_hours import AlwaysOpenClock
from catalyst_watch.events import get_event_bus
from catalyst_watch.exceptions import PriceUnavailableError
from catalyst_watch.services.analysis import AnalysisService
from catalyst_watch.services.delivery import LoggingAlertDelivery
from catalyst_watch.services.revisit.service import RevisitService
from catalyst_watch.services.scan import ScanOrchestrator
from catalyst_watch.webapi.auth import verify_auth_token
from catalyst_watch.webapi.dependencies import (
    get_analysis_service,
    get_revisit_service,
    get_scan_orchestrator,
)

AUTH = {"Authorization": "Bearer test_endpoint_token"}


def breakout_history():
    closes = [100.0] * 20 + [105.0]
    highs = [101.0] * 20 + [109.0]
    lows = [99.0] * 20 + [103.0]
    volumes = [1000.0] * 20 + [2000.0]
    return build_ohlcv(closes, highs=highs, lows=lows, volumes=volumes)


class TestFastAPIApp:
    """Test the FastAPI application endpoints."""

    @pytest.fixture
    def price_history(self):
        price_source = Mock()
        price_source.get_history.return_value = breakout_history()
        return price_source

    @pytest.fixture
    def orchestrator(self, revisit_store):
        return ScanOrchestrator(
            price_source=StaticPriceSource({"AAPL": 150.2, "MSFT": 301.0, "TSLA": 210.0}),
            reference_store=revisit_store,
            delivery=LoggingAlertDelivery(),
            market_clock=AlwaysOpenClock(),
        )

    @pytest.fixture
    def app(self, price_history, revisit_store, orchestrator):
        """Create test FastAPI app with service dependencies replaced."""
        from catalyst_watch.webapi.app import create_app

        app = create_app()
        app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(
            price_source=price_history
        )
        app.dependency_overrides[get_revisit_service] = lambda: RevisitService(
            revisit_store, StaticPriceSource({"AAPL": 150.2, "MSFT": 310.0})
        )
        app.dependency_overrides[get_scan_orchestrator] = lambda: orchestrator
        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return TestClient(app)

    @pytest.fixture
    def async_client(self, app):
        """Create async test client."""
        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://test")

    # Root and Health Endpoints Tests

    def test_root_endpoint_requires_auth(self, client):
        response = client.get("/")
        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    def test_root_endpoint_with_valid_auth(self, client):
        response = client.get("/", headers=AUTH)
        assert response.status_code == 200
        body = response.json()
        assert body["data"] == {"message": "Catalyst Watch API"}
        assert body["request_id"] == response.headers["X-Request-ID"]
        assert body["timestamp"].endswith("Z")

    def test_root_endpoint_with_invalid_auth(self, client):
        response = client.get("/", headers={"Authorization": "Bearer invalid_token"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid authentication token"

    def test_health_is_open(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        health = response.json()["health"]
        assert health["status"] == "healthy"
        assert health["services"]["database"]["connectivity"] is True
        assert "event_bus" in health["services"]

    def test_restart_does_not_duplicate_audit_handler(self, app):
        bus = get_event_bus()

        for _ in range(2):
            with TestClient(app):
                handlers = bus.get_statistics()["handlers_by_event_type"]
                assert handlers["ScanCompletedEvent"] == 1

        assert bus.get_statistics()["handlers_by_event_type"]["ScanCompletedEvent"] == 0

    def test_liveness_probe(self, client):
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    # Analysis Endpoints

    def test_breakout_requires_auth(self, client):
        response = client.get("/api/v1/analysis/AAPL/breakout")
        assert response.status_code in (401, 403)

    def test_breakout(self, client, price_history):
        response = client.get("/api/v1/analysis/aapl/breakout", headers=AUTH)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["ticker"] == "AAPL"
        assert data["signal"] == "bullish_breakout"
        assert data["volume_confirmation"]["is_confirmed"] is True
        assert data["key_levels"]["breakout_level"] == 101.0
        assert data["metadata"]["fallback_range"] is False
        price_history.get_history.assert_called_once_with("AAPL", 100)

    def test_breakout_lookback_validation(self, client):
        response = client.get(
            "/api/v1/analysis/AAPL/breakout?lookback_days=0", headers=AUTH
        )
        assert response.status_code == 422
        assert response.json()["error"]["type"] == "ValidationError"

    def test_consolidations(self, client):
        response = client.get(
            "/api/v1/analysis/aapl/consolidations?min_duration_days=20", headers=AUTH
        )

        assert response.status_code == 200
        body = response.json()
        assert body["ticker"] == "AAPL"
        assert len(body["data"]) == 1
        assert body["data"][0]["start_date"] == "2024-01-02"
        assert body["data"][0]["volume_trend"] == "stable"
        assert body["data"][0]["strength_score"] == pytest.approx(100 - 2 / 99 * 500)

    def test_malformed_history_is_422(self, client, price_history):
        price_history.get_history.return_value = breakout_history().drop(columns=["volume"])

        response = client.get("/api/v1/analysis/AAPL/consolidations", headers=AUTH)

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "MalformedSeriesError"

    def test_price_source_outage_is_503(self, client, price_history):
        price_history.get_history.side_effect = PriceUnavailableError("AAPL", "rate limited")

        response = client.get("/api/v1/analysis/AAPL/breakout", headers=AUTH)

        assert response.status_code == 503
        assert response.json()["error"]["details"]["ticker"] == "AAPL"

    # Alert Endpoints

    def test_check_alerts_whole_watchlist(self, client):
        response = client.get("/api/v1/alerts/check?user_id=alice", headers=AUTH)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == "alice"
        assert [a["catalyst_id"] for a in data["alerts"]] == ["aapl-earnings"]
        assert [t["ticker"] for t in data["tickers"]] == ["AAPL", "MSFT"]

    def test_check_alerts_with_explicit_price(self, client):
        response = client.get(
            "/api/v1/alerts/check?user_id=alice&ticker=MSFT&current_price=299.5",
            headers=AUTH,
        )

        data = response.json()["data"]
        assert [a["catalyst_id"] for a in data["alerts"]] == ["msft-guidance"]
        assert data["tickers"][0]["current_price"] == 299.5

    def test_check_alerts_rejects_non_positive_price(self, client):
        response = client.get(
            "/api/v1/alerts/check?user_id=alice&ticker=MSFT&current_price=0",
            headers=AUTH,
        )
        assert response.status_code == 422

    def test_check_alerts_requires_user(self, client):
        response = client.get("/api/v1/alerts/check", headers=AUTH)
        assert response.status_code == 422

    def test_alert_history(self, client, isolated_db):
        from catalyst_watch.ormdb.repositories import AlertHistoryRepository

        first = datetime(2024, 1, 16, 15, 0)
        with AlertHistoryRepository() as repo:
            repo.add_alert("alice", "c1", "AAPL", 150.0, 150.4, first, "Earnings")
            repo.add_alert("alice", "c2", "AAPL", 140.0, 140.2, first + timedelta(minutes=5))
            repo.add_alert("bob", "c1", "AAPL", 150.0, 150.4, first)

        response = client.get("/api/v1/alerts/history?user_id=alice", headers=AUTH)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 2
        assert [a["catalyst_id"] for a in data["alerts"]] == ["c2", "c1"]
        assert data["alerts"][1]["label"] == "Earnings"

    # Scan Endpoints

    def test_scan_status_before_first_tick(self, client):
        response = client.get("/api/v1/scan/status", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["data"] == {"state": "idle", "last_report": None}

    def test_run_scan_then_status(self, client):
        response = client.post("/api/v1/scan/run?force=true", headers=AUTH)

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["tickers_scanned"] == 3
        assert len(report["alerts"]) == 3
        assert report["skipped_reason"] is None

        status = client.get("/api/v1/scan/status", headers=AUTH).json()["data"]
        assert status["last_report"]["tickers_scanned"] == 3

    def test_run_scan_requires_auth(self, client):
        response = client.post("/api/v1/scan/run")
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_async_client(self, async_client):
        async with async_client as ac:
            response = await ac.get("/api/v1/scan/status", headers=AUTH)
        assert response.status_code == 200

    def test_unexpected_errors_are_hidden(self, app):
        failing = Mock()
        failing.get_history.side_effect = RuntimeError("secret stack detail")
        app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(
            price_source=failing
        )
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/v1/analysis/AAPL/breakout", headers=AUTH)

        assert response.status_code == 500
        assert "secret" not in response.text
        assert response.json()["error"]["type"] == "InternalServerError"


class TestVerifyAuthToken:
    """Authentication dependency."""

    def test_valid(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials="test_endpoint_token"
        )
        assert verify_auth_token(credentials) == "test_endpoint_token"

    def test_invalid(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="wrong")

        with pytest.raises(HTTPException) as exc_info:
            verify_auth_token(credentials)

        assert exc_info.value.status_code == 401

    def test_not_configured(self, monkeypatch):
        monkeypatch.setenv("ENDPOINT_AUTH_TOKEN", "")
        get_settings.cache_clear()
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="test")

        with pytest.raises(HTTPException) as exc_info:
            verify_auth_token(credentials)

        assert exc_info.value.status_code == 500
        assert "ENDPOINT_AUTH_TOKEN not configured" in exc_info.value.detail
