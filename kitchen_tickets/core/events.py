"""
Domain events system

Ticket events are collected by the services while a transaction is open and
published on the event bus only after it commits, so subscribers never see a
change that was rolled back.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import uuid
import structlog

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = datetime.now(timezone.utc)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.event_type
        }


class TicketEvent(DomainEvent):
    """Base for events about a single ticket in a store"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        store_id: uuid.UUID,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.ticket_id = ticket_id
        self.store_id = store_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "ticket_id": str(self.ticket_id),
            "store_id": str(self.store_id)
        })
        return data


class TicketCreated(TicketEvent):
    """Event fired when a ticket is created from a finalized order"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        store_id: uuid.UUID,
        order_id: uuid.UUID,
        priority: int,
        line_count: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(ticket_id, store_id, event_id)
        self.order_id = order_id
        self.priority = priority
        self.line_count = line_count

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "order_id": str(self.order_id),
            "priority": self.priority,
            "line_count": self.line_count
        })
        return data


class TicketStatusChanged(TicketEvent):
    """Event fired when the rollup moves a ticket to a new status"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        store_id: uuid.UUID,
        status: str,
        previous_status: Optional[str] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(ticket_id, store_id, event_id)
        self.status = status
        self.previous_status = previous_status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status": self.status,
            "previous_status": self.previous_status
        })
        return data


class TicketCompleted(TicketEvent):
    """Event fired once, when the last unresolved line of a ticket completes"""


class TicketCancelled(TicketEvent):
    """Event fired when a ticket is cancelled directly"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        store_id: uuid.UUID,
        reason: Optional[str] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(ticket_id, store_id, event_id)
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


class TicketLineStatusChanged(TicketEvent):
    """Event fired when kitchen staff move a line to a new status"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        store_id: uuid.UUID,
        line_id: uuid.UUID,
        product_id: uuid.UUID,
        status: str,
        previous_status: str,
        event_id: uuid.UUID = None
    ):
        super().__init__(ticket_id, store_id, event_id)
        self.line_id = line_id
        self.product_id = product_id
        self.status = status
        self.previous_status = previous_status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "line_id": str(self.line_id),
            "product_id": str(self.product_id),
            "status": self.status,
            "previous_status": self.previous_status
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers"""
        handlers = self._subscribers.get(event.event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event.event_type}")
            return

        logger.info(f"Publishing event {event.event_type}: {event.event_id}")

        # Handler errors are logged, never raised to the publisher
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}", exc_info=True)

    async def publish_all(self, events: List[DomainEvent]):
        """Publish events in the order they were raised"""
        for event in events:
            await self.publish(event)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")


# Global event bus instance
event_bus = EventBus()
