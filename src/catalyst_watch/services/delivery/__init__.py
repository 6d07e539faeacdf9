"""Alert delivery adapters."""

from .delivery import AlertDelivery, EventBusAlertDelivery, LoggingAlertDelivery

__all__ = ["AlertDelivery", "EventBusAlertDelivery", "LoggingAlertDelivery"]
