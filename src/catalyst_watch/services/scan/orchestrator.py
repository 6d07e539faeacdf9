"""Periodic revisit scan across every user's watchlist."""

import asyncio
import threading
import time
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from ...config.logging import get_logger, log_performance
from ...core.market_hours import MarketClock
from ...core.price_source import PricePoint, PriceSource
from ...events import EventBus, ScanCompletedEvent, ScanTickerFailedEvent
from ..delivery.delivery import AlertDelivery
from ..revisit.engine import check_revisits
from ..revisit.models import TriggeredAlert
from .models import ScanFailure, ScanReport, ScanState
from .protocols import AlertLedger, ReferenceStore

logger = get_logger(__name__)


def _batches(items: Sequence[str], size: int) -> List[List[str]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class ScanOrchestrator:
    """
    Runs one revisit scan per tick.

    A tick loads every user's watchlist, fetches each distinct ticker's price
    once (batched, with bounded concurrency), evaluates each (user, ticker)
    pair with the revisit engine and hands the resulting alerts to the
    delivery adapter. Failures for one ticker are recorded in the report and
    never stop the others.
    """

    def __init__(
        self,
        price_source: PriceSource,
        reference_store: ReferenceStore,
        delivery: AlertDelivery,
        market_clock: MarketClock,
        alert_ledger: Optional[AlertLedger] = None,
        *,
        batch_size: int = 5,
        max_concurrency: int = 5,
        cooldown_minutes: int = 0,
        tick_timeout_seconds: Optional[float] = None,
        event_bus: Optional[EventBus] = None,
    ):
        if batch_size < 1 or max_concurrency < 1:
            raise ValueError("batch_size and max_concurrency must be at least 1")
        if cooldown_minutes < 0:
            raise ValueError("cooldown_minutes cannot be negative")

        self.price_source = price_source
        self.reference_store = reference_store
        self.delivery = delivery
        self.market_clock = market_clock
        self.alert_ledger = alert_ledger
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency
        self.cooldown = timedelta(minutes=cooldown_minutes)
        self.tick_timeout_seconds = tick_timeout_seconds
        self.event_bus = event_bus

        self.state = ScanState.IDLE
        self.last_report: Optional[ScanReport] = None
        self._tick_lock = threading.Lock()
        self.logger = logger.bind(service="scan_orchestrator")

    async def run_tick(
        self, *, force: bool = False, now: Optional[datetime] = None
    ) -> ScanReport:
        """
        Run one scan.

        Args:
            force: Scan even when the market clock reports the market closed
            now: Pin the tick time (alerts carry it as ``triggered_at``)

        Returns:
            ScanReport for the tick; skipped ticks have ``skipped_reason`` set
        """
        started_at = now or datetime.now(timezone.utc)
        clock_start = time.perf_counter()
        report = ScanReport(started_at=started_at)

        if not force and not self.market_clock.is_open(started_at):
            report.skipped_reason = "market_closed"
            report.finished_at = datetime.now(timezone.utc)
            self.logger.debug("Market closed, scan skipped")
            await self._finish(report, clock_start)
            return report

        if not self._tick_lock.acquire(blocking=False):
            report.skipped_reason = "tick_in_progress"
            report.finished_at = datetime.now(timezone.utc)
            self.logger.info("Scan already running, tick skipped")
            return report

        try:
            return await self._run_locked(report, started_at, clock_start)
        finally:
            self._tick_lock.release()

    async def _run_locked(
        self, report: ScanReport, started_at: datetime, clock_start: float
    ) -> ScanReport:
        try:
            if self.tick_timeout_seconds:
                await asyncio.wait_for(
                    self._scan(report, started_at), self.tick_timeout_seconds
                )
            else:
                await self._scan(report, started_at)
        except asyncio.TimeoutError:
            self.state = ScanState.FAILED
            report.failures.append(
                ScanFailure(
                    ticker=None,
                    user_id=None,
                    stage="tick",
                    error=f"timed out after {self.tick_timeout_seconds}s",
                )
            )
            self.logger.warning(
                "Scan tick timed out",
                timeout_seconds=self.tick_timeout_seconds,
                alerts_delivered=len(report.alerts),
            )
        except asyncio.CancelledError:
            self.state = ScanState.FAILED
            self.logger.warning("Scan tick cancelled", alerts_delivered=len(report.alerts))
            self.state = ScanState.IDLE
            raise
        except Exception as e:
            self.state = ScanState.FAILED
            report.failures.append(
                ScanFailure(ticker=None, user_id=None, stage="tick", error=str(e))
            )
            self.logger.error("Scan tick failed", error=str(e), exc_info=True)

        report.finished_at = datetime.now(timezone.utc)
        self.state = ScanState.IDLE
        await self._finish(report, clock_start)
        return report

    def run_tick_sync(self, *, force: bool = False) -> ScanReport:
        """Blocking wrapper for scheduler threads that have no event loop."""
        return asyncio.run(self.run_tick(force=force))

    async def _scan(self, report: ScanReport, now: datetime) -> None:
        self.state = ScanState.FETCHING
        users = await asyncio.to_thread(self.reference_store.list_users)

        watchers: Dict[str, List[str]] = OrderedDict()
        for user_id in users:
            try:
                tickers = await asyncio.to_thread(
                    self.reference_store.list_watchlist, user_id
                )
            except Exception as e:
                await self._record_failure(report, None, user_id, "watchlist", e)
                continue

            for ticker in tickers:
                subscribed = watchers.setdefault(ticker.upper(), [])
                if user_id not in subscribed:
                    subscribed.append(user_id)

        report.tickers_scanned = len(watchers)
        self.logger.info("Scan started", users=len(users), tickers=len(watchers))

        semaphore = asyncio.Semaphore(self.max_concurrency)
        for batch in _batches(list(watchers), self.batch_size):
            self.state = ScanState.FETCHING
            points = await asyncio.gather(
                *(self._fetch_price(ticker, semaphore, report) for ticker in batch)
            )

            self.state = ScanState.EVALUATING
            for ticker, point in zip(batch, points):
                if point is None:
                    continue
                for user_id in watchers[ticker]:
                    alerts = await self._evaluate(user_id, ticker, point, report, now)
                    if alerts:
                        await self._deliver(user_id, ticker, alerts, report)

    async def _fetch_price(
        self, ticker: str, semaphore: asyncio.Semaphore, report: ScanReport
    ) -> Optional[PricePoint]:
        async with semaphore:
            try:
                return await asyncio.to_thread(self.price_source.get_price, ticker)
            except Exception as e:
                await self._record_failure(report, ticker, None, "price", e)
                return None

    async def _evaluate(
        self,
        user_id: str,
        ticker: str,
        point: PricePoint,
        report: ScanReport,
        now: datetime,
    ) -> List[TriggeredAlert]:
        try:
            settings = await asyncio.to_thread(
                self.reference_store.get_alert_settings, user_id, ticker
            )
            if settings is None:
                return []

            catalysts = await asyncio.to_thread(
                self.reference_store.list_catalysts, user_id, ticker
            )
            alerts = check_revisits(
                ticker, point.price, catalysts, settings, user_id=user_id, now=now
            )
            if alerts and self.alert_ledger is not None and self.cooldown:
                alerts = await asyncio.to_thread(self._outside_cooldown, alerts, now)
            return alerts
        except Exception as e:
            await self._record_failure(report, ticker, user_id, "evaluate", e)
            return []

    def _outside_cooldown(
        self, alerts: List[TriggeredAlert], now: datetime
    ) -> List[TriggeredAlert]:
        fresh = []
        for alert in alerts:
            last = self.alert_ledger.last_alerted_at(alert.user_id, alert.catalyst_id)
            if last is None or now - last >= self.cooldown:
                fresh.append(alert)
        return fresh

    async def _deliver(
        self,
        user_id: str,
        ticker: str,
        alerts: List[TriggeredAlert],
        report: ScanReport,
    ) -> None:
        try:
            await self.delivery.deliver(alerts)
        except Exception as e:
            await self._record_failure(report, ticker, user_id, "deliver", e)
            return

        report.alerts.extend(alerts)
        if self.alert_ledger is not None:
            try:
                await asyncio.to_thread(self.alert_ledger.record, alerts)
            except Exception as e:
                self.logger.warning(
                    "Could not record alert history", ticker=ticker, error=str(e)
                )

    async def _record_failure(
        self,
        report: ScanReport,
        ticker: Optional[str],
        user_id: Optional[str],
        stage: str,
        error: Exception,
    ) -> None:
        failure = ScanFailure(ticker=ticker, user_id=user_id, stage=stage, error=str(error))
        report.failures.append(failure)
        self.logger.warning(
            "Scan step failed",
            ticker=ticker,
            user_id=user_id,
            stage=stage,
            error=str(error),
        )
        if self.event_bus is not None:
            await self.event_bus.publish(
                ScanTickerFailedEvent(
                    ticker=ticker, user_id=user_id, stage=stage, error=str(error)
                )
            )

    async def _finish(self, report: ScanReport, clock_start: float) -> None:
        self.last_report = report
        if not report.skipped:
            log_performance(
                "revisit_scan",
                (time.perf_counter() - clock_start) * 1000,
                # Half the tick budget
                slow_ms=self.tick_timeout_seconds * 500 if self.tick_timeout_seconds else None,
                tickers=report.tickers_scanned,
                alerts=len(report.alerts),
                failures=len(report.failures),
            )

        if self.event_bus is not None:
            await self.event_bus.publish(
                ScanCompletedEvent(
                    started_at=report.started_at,
                    finished_at=report.finished_at,
                    skipped_reason=report.skipped_reason,
                    tickers_scanned=report.tickers_scanned,
                    alerts_delivered=len(report.alerts),
                    failures=len(report.failures),
                )
            )
