"""Event-driven architecture components."""

from .event_bus import EventBus, get_event_bus, set_event_bus
from .event_handlers import EventHandler, ScanAuditHandler
from .events import (
    DomainEvent,
    RevisitAlertTriggeredEvent,
    ScanCompletedEvent,
    ScanTickerFailedEvent,
)

__all__ = [
    # Events
    "DomainEvent",
    "RevisitAlertTriggeredEvent",
    "ScanCompletedEvent",
    "ScanTickerFailedEvent",
    # Event Bus
    "EventBus",
    "get_event_bus",
    "set_event_bus",
    # Event Handlers
    "EventHandler",
    "ScanAuditHandler",
]
