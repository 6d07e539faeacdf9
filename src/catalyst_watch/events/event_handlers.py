"""Event handlers for scan and alert events."""

from abc import ABC, abstractmethod

from ..config.logging import get_logger
from .event_bus import EventBus
from .events import (
    DomainEvent,
    RevisitAlertTriggeredEvent,
    ScanCompletedEvent,
    ScanTickerFailedEvent,
)

logger = get_logger(__name__)


class EventHandler(ABC):
    """Base class for event handlers."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logger.bind(handler=name)

    @abstractmethod
    async def handle(self, event: DomainEvent):
        """Handle the domain event."""


class ScanAuditHandler(EventHandler):
    """Writes every scan outcome and revisit alert to the structured log."""

    event_types = (RevisitAlertTriggeredEvent, ScanCompletedEvent, ScanTickerFailedEvent)

    def __init__(self):
        super().__init__("scan_audit_handler")

    async def handle(self, event: DomainEvent):
        if isinstance(event, RevisitAlertTriggeredEvent):
            self.logger.info(
                "Catalyst price revisited",
                user_id=event.user_id,
                ticker=event.ticker,
                catalyst_id=event.catalyst_id,
                catalyst=event.catalyst_label,
                price_before=event.price_before,
                current_price=event.current_price,
                tolerance=event.tolerance_points,
            )
        elif isinstance(event, ScanTickerFailedEvent):
            self.logger.warning(
                "Ticker failed during scan",
                ticker=event.ticker,
                user_id=event.user_id,
                stage=event.stage,
                error=event.error,
            )
        elif isinstance(event, ScanCompletedEvent):
            self.logger.info(
                "Scan tick finished",
                skipped_reason=event.skipped_reason,
                tickers_scanned=event.tickers_scanned,
                alerts_delivered=event.alerts_delivered,
                failures=event.failures,
            )

    def register(self, bus: EventBus) -> None:
        for event_type in self.event_types:
            bus.subscribe(event_type, self.handle)

    def unregister(self, bus: EventBus) -> None:
        for event_type in self.event_types:
            bus.unsubscribe(event_type, self.handle)
