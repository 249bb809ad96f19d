"""
WebSocket connection manager for real-time kitchen display updates

Displays subscribe per store; ticket events published on the event bus are
pushed to every display of the ticket's store.
"""

from typing import Dict, Set
from fastapi import WebSocket
from json import dumps
import structlog
import uuid

from kitchen_tickets.core.events import EventBus, TicketEvent

logger = structlog.get_logger(__name__)

TICKET_EVENT_TYPES = (
    "TicketCreated",
    "TicketStatusChanged",
    "TicketLineStatusChanged",
    "TicketCompleted",
    "TicketCancelled",
)

# Event class name -> message type sent to displays
MESSAGE_TYPES = {
    "TicketCreated": "ticket_created",
    "TicketStatusChanged": "ticket_updated",
    "TicketLineStatusChanged": "ticket_line_updated",
    "TicketCompleted": "ticket_completed",
    "TicketCancelled": "ticket_cancelled",
}


class ConnectionManager:
    """Manages WebSocket connections"""

    def __init__(self):
        # Active connections by store ID (for kitchen displays)
        self.store_connections: Dict[uuid.UUID, Set[WebSocket]] = {}

        # WebSocket to store mapping (for cleanup)
        self.connection_to_store: Dict[WebSocket, uuid.UUID] = {}

    async def connect_store(self, websocket: WebSocket, store_id: uuid.UUID):
        """Connect a kitchen display WebSocket for a store"""
        await websocket.accept()

        if store_id not in self.store_connections:
            self.store_connections[store_id] = set()

        self.store_connections[store_id].add(websocket)
        self.connection_to_store[websocket] = store_id

        logger.info(f"Connected store {store_id} WebSocket")
        return f"Connected to store {store_id}"

    def disconnect(self, websocket: WebSocket):
        """Disconnect a WebSocket connection"""
        if websocket not in self.connection_to_store:
            logger.warning("Attempted to disconnect unknown WebSocket")
            return

        store_id = self.connection_to_store.pop(websocket)
        if store_id in self.store_connections:
            self.store_connections[store_id].discard(websocket)
            if not self.store_connections[store_id]:
                del self.store_connections[store_id]
        logger.info(f"Disconnected store {store_id} WebSocket")

    async def broadcast_to_store(self, store_id: uuid.UUID, message: dict):
        """Broadcast message to all displays of a store"""
        if store_id not in self.store_connections:
            logger.debug(f"No connections for store {store_id}")
            return

        connections = list(self.store_connections[store_id])
        message_json = dumps(message)

        disconnected = []
        for connection in connections:
            try:
                await connection.send_text(message_json)
            except Exception as e:
                logger.error(f"Error sending to connection: {e}")
                disconnected.append(connection)

        # Clean up dead connections
        for connection in disconnected:
            self.disconnect(connection)

        logger.debug(f"Broadcasted to {len(connections)} connections for store {store_id}")

    async def send_ticket_event(self, event: TicketEvent):
        """Event bus handler: forward a ticket event to the ticket's store"""
        message = event.to_dict()
        message["type"] = MESSAGE_TYPES.get(event.event_type, event.event_type)
        await self.broadcast_to_store(event.store_id, message)

    def register(self, bus: EventBus):
        """Subscribe this manager to all ticket events on the bus"""
        for event_type in TICKET_EVENT_TYPES:
            bus.subscribe(event_type, self.send_ticket_event)

    def unregister(self, bus: EventBus):
        for event_type in TICKET_EVENT_TYPES:
            bus.unsubscribe(event_type, self.send_ticket_event)

    def get_connection_count(self) -> dict:
        """Get count of active connections"""
        return {
            "stores": len(self.store_connections),
            "store_connections": sum(len(conns) for conns in self.store_connections.values()),
        }


# Global connection manager instance
manager = ConnectionManager()
