"""Alert delivery adapters."""

from typing import Optional, Protocol, Sequence

from ...config.logging import get_logger
from ...events import EventBus, RevisitAlertTriggeredEvent, get_event_bus
from ..revisit.models import TriggeredAlert

logger = get_logger(__name__)


class AlertDelivery(Protocol):
    async def deliver(self, alerts: Sequence[TriggeredAlert]) -> None: ...


class EventBusAlertDelivery:
    """Publishes one RevisitAlertTriggeredEvent per alert."""

    def __init__(self, event_bus: Optional[EventBus] = None):
        self._event_bus = event_bus
        self.logger = logger.bind(service="event_bus_delivery")

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus or get_event_bus()

    async def deliver(self, alerts: Sequence[TriggeredAlert]) -> None:
        await self.event_bus.publish_many(
            RevisitAlertTriggeredEvent.from_alert(alert) for alert in alerts
        )

        if alerts:
            self.logger.info("Revisit alerts published", count=len(alerts))


class LoggingAlertDelivery:
    """Writes alerts to the log; used when no subscribers are wired."""

    def __init__(self):
        self.logger = logger.bind(service="logging_delivery")

    async def deliver(self, alerts: Sequence[TriggeredAlert]) -> None:
        for alert in alerts:
            self.logger.info(
                "Revisit alert",
                user_id=alert.user_id,
                ticker=alert.ticker,
                catalyst_id=alert.catalyst_id,
                catalyst=alert.catalyst_label,
                price_before=alert.price_before,
                current_price=alert.current_price,
            )
