"""Webhook event routing."""

from typing import Any, Awaitable, Callable

from deployhook.utils.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[Any]]


async def _ignore(payload: dict[str, Any]) -> None:
    return None


class EventRouter:
    """Dispatches authenticated webhook events to handlers by event type.

    Event types without a registered handler are accepted and ignored, so new
    GitHub event types never fail a delivery.
    """

    def __init__(self, handlers: dict[str, EventHandler] | None = None):
        self._handlers: dict[str, EventHandler] = dict(handlers or {})

    def register(self, event_type: str, handler: EventHandler) -> None:
        """Register the handler for an event type."""
        if event_type in self._handlers:
            logger.warning("router.handler_replaced", event_type=event_type)
        self._handlers[event_type] = handler

    def handler_for(self, event_type: str) -> EventHandler:
        return self._handlers.get(event_type, _ignore)

    @property
    def event_types(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        """Run the handler registered for ``event_type``."""
        if event_type not in self._handlers:
            logger.debug("router.event_ignored", event_type=event_type)
        await self.handler_for(event_type)(payload)
