"""
Schemas for API responses and requests
"""

from kitchen_tickets.schemas.ticket import (
    OrderRef,
    TicketLineCreate,
    TicketCreate,
    TicketStatusUpdateRequest,
    TicketCancelRequest,
    LineStatusUpdateRequest,
    TicketLineResponse,
    TicketResponse,
    TicketDetailResponse,
    LineView,
    TicketView,
)
from kitchen_tickets.schemas.queue import (
    QueueCreate,
    QueueUpdate,
    QueueResponse,
    QueueDetailResponse,
    AssignmentCreate,
    AssignmentResponse,
)

__all__ = [
    "OrderRef",
    "TicketLineCreate",
    "TicketCreate",
    "TicketStatusUpdateRequest",
    "TicketCancelRequest",
    "LineStatusUpdateRequest",
    "TicketLineResponse",
    "TicketResponse",
    "TicketDetailResponse",
    "LineView",
    "TicketView",
    "QueueCreate",
    "QueueUpdate",
    "QueueResponse",
    "QueueDetailResponse",
    "AssignmentCreate",
    "AssignmentResponse",
]
