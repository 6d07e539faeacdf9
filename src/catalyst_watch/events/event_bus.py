"""In-process event bus used to fan scan results out to subscribers."""

import asyncio
import inspect
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, Iterable, List, Optional, Type, Union

from ..config.logging import get_logger
from .events import DomainEvent

logger = get_logger(__name__)

Handler = Callable[[DomainEvent], Union[None, Awaitable[None]]]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or type(handler).__name__


class EventBus:
    """Publish/subscribe dispatcher keyed by event class."""

    def __init__(self, name: str = "default", max_history: int = 1000):
        self.name = name
        self.logger = logger.bind(event_bus=name)

        self._handlers: Dict[Type[DomainEvent], List[Handler]] = defaultdict(list)
        self._history: Deque[Dict[str, Any]] = deque(maxlen=max_history)
        self._stats = {
            "events_published": 0,
            "handlers_executed": 0,
            "errors_count": 0,
            "last_event_time": None,
        }

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """Register ``handler`` (sync or async) for ``event_type``."""
        self._handlers[event_type].append(handler)
        self.logger.debug(
            "Event handler subscribed",
            event_type=event_type.__name__,
            handler=_handler_name(handler),
        )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: Handler) -> bool:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    async def publish(self, event: DomainEvent) -> Dict[str, Any]:
        """
        Publish an event to every handler subscribed to its class.

        Handler errors are logged and counted, never raised to the publisher.

        Args:
            event: Event to dispatch

        Returns:
            Summary with handler success and failure counts
        """
        event_type = type(event)
        self._stats["events_published"] += 1
        self._stats["last_event_time"] = datetime.now(timezone.utc)
        self._history.append(
            {
                "event_type": event_type.__name__,
                "event_id": event.event_id,
                "timestamp": event.timestamp.isoformat(),
            }
        )

        handlers = list(self._handlers.get(event_type, []))
        summary = {
            "event_id": event.event_id,
            "handlers_executed": len(handlers),
            "successful_handlers": 0,
            "failed_handlers": 0,
        }
        if not handlers:
            self.logger.debug("No handlers for event", event_type=event_type.__name__)
            return summary

        self._stats["handlers_executed"] += len(handlers)
        outcomes = await asyncio.gather(*(self._run_handler(h, event) for h in handlers))
        summary["successful_handlers"] = sum(1 for ok in outcomes if ok)
        summary["failed_handlers"] = len(outcomes) - summary["successful_handlers"]
        return summary

    async def publish_many(self, events: Iterable[DomainEvent]) -> List[Dict[str, Any]]:
        return [await self.publish(event) for event in events]

    async def _run_handler(self, handler: Handler, event: DomainEvent) -> bool:
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(event)
            else:
                await asyncio.to_thread(handler, event)
            return True
        except Exception as e:
            self._stats["errors_count"] += 1
            self.logger.error(
                "Event handler failed",
                event_type=type(event).__name__,
                handler=_handler_name(handler),
                error=str(e),
                exc_info=True,
            )
            return False

    def get_statistics(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "handlers_by_event_type": {
                event_type.__name__: len(handlers)
                for event_type, handlers in self._handlers.items()
            },
            "history_size": len(self._history),
        }

    def get_event_history(self, limit: int = 100) -> List[Dict[str, Any]]:
        return list(self._history)[-limit:]

    def clear_history(self):
        self._history.clear()


_global_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get or create the process-wide event bus."""
    global _global_event_bus

    if _global_event_bus is None:
        _global_event_bus = EventBus("global")

    return _global_event_bus


def set_event_bus(event_bus: Optional[EventBus]):
    """Replace the process-wide event bus (tests pass None to reset it)."""
    global _global_event_bus
    _global_event_bus = event_bus
