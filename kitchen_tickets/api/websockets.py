"""
WebSocket endpoints for real-time kitchen display updates
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from datetime import datetime, timezone
import structlog
import uuid

from kitchen_tickets.core.websocket_manager import manager

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.websocket("/stores/{store_id}")
async def websocket_store(websocket: WebSocket, store_id: uuid.UUID):
    """WebSocket connection for the kitchen displays of a store"""
    message = await manager.connect_store(websocket, store_id)

    try:
        # Send connection confirmation
        await websocket.send_json({
            "type": "connection_confirmed",
            "store_id": str(store_id),
            "message": message
        })

        # Listen for incoming messages (client pings)
        while True:
            data = await websocket.receive_json()
            logger.debug(f"Received message from store {store_id}: {data}")

            if data.get("type") == "ping":
                await websocket.send_json({
                    "type": "pong",
                    "timestamp": datetime.now(timezone.utc).isoformat()
                })

    except WebSocketDisconnect:
        logger.info(f"Store {store_id} display disconnected")
    finally:
        manager.disconnect(websocket)


@router.get("/connections")
async def get_connections():
    """Get count of active WebSocket connections"""
    return manager.get_connection_count()
