"""Scheduler entry points for the revisit scan."""

from functools import lru_cache
from typing import Optional

from ...config.logging import get_logger
from ...config.settings import Settings, get_settings
from ...core.market_hours import USEquityMarketClock
from ...core.price_source import YFinancePriceSource
from ...events import EventBus, get_event_bus
from ..delivery.delivery import AlertDelivery, EventBusAlertDelivery, LoggingAlertDelivery
from .models import ScanReport
from .orchestrator import ScanOrchestrator

logger = get_logger(__name__)


def build_orchestrator(
    settings: Optional[Settings] = None, event_bus: Optional[EventBus] = None
) -> ScanOrchestrator:
    """Wire a ScanOrchestrator against yfinance and the application database."""
    from ...ormdb.store import SqlAlertLedger, SqlReferenceStore

    settings = settings or get_settings()
    event_bus = event_bus or get_event_bus()
    market_clock = USEquityMarketClock(settings.market_timezone)
    delivery: AlertDelivery = (
        LoggingAlertDelivery()
        if settings.alert_delivery == "log"
        else EventBusAlertDelivery(event_bus)
    )

    return ScanOrchestrator(
        price_source=YFinancePriceSource(market_clock),
        reference_store=SqlReferenceStore(),
        delivery=delivery,
        market_clock=market_clock,
        alert_ledger=SqlAlertLedger(),
        batch_size=settings.scan_batch_size,
        max_concurrency=settings.scan_max_concurrency,
        cooldown_minutes=settings.alert_cooldown_minutes,
        tick_timeout_seconds=settings.scan_tick_timeout_seconds,
        event_bus=event_bus,
    )


@lru_cache()
def get_orchestrator() -> ScanOrchestrator:
    """Process-wide orchestrator shared by the scheduler job and the API."""
    return build_orchestrator()


def run_revisit_scan_sync(force: bool = False) -> ScanReport:
    """Run one scan tick; referenced by the scheduler job by import path."""
    report = get_orchestrator().run_tick_sync(force=force)

    if report.skipped:
        logger.debug("Revisit scan skipped", reason=report.skipped_reason)
    else:
        logger.info(
            "Revisit scan finished",
            tickers=report.tickers_scanned,
            alerts=len(report.alerts),
            failures=len(report.failures),
        )
    return report
