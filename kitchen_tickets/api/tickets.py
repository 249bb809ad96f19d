"""
Tickets API endpoints for kitchen ticket management
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional
import structlog
import uuid

from kitchen_tickets.core.database import get_session
from kitchen_tickets.core.events import event_bus
from kitchen_tickets.schemas.ticket import (
    TicketCreate, TicketCancelRequest, TicketStatusUpdateRequest,
    LineStatusUpdateRequest, TicketResponse, TicketDetailResponse,
    TicketLineResponse, TicketView
)
from kitchen_tickets.services.live_view import LiveViewBuilder
from kitchen_tickets.services.ticket_service import TicketService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=TicketDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket_data: TicketCreate,
    session: Session = Depends(get_session)
):
    """Create a kitchen ticket from a finalized order

    The ticket and all of its lines are stored together or not at all.
    """
    service = TicketService(session)
    ticket = service.create_ticket(ticket_data.order, ticket_data.lines)
    await event_bus.publish_all(service.drain_events())
    return service.get_ticket(ticket.id)


@router.get("/live", response_model=List[TicketView])
async def list_live_tickets(
    store_id: Optional[uuid.UUID] = Query(None, description="Filter by store"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    queue_id: Optional[uuid.UUID] = Query(None, description="Only lines prepared by this queue"),
    session: Session = Depends(get_session)
):
    """List active tickets for kitchen displays, highest priority first"""
    return LiveViewBuilder(session).list_active(
        store_id=store_id,
        status=status_filter,
        queue_id=queue_id
    )


@router.patch("/lines/{line_id}/status", response_model=TicketLineResponse)
async def update_line_status(
    line_id: uuid.UUID,
    update: LineStatusUpdateRequest,
    session: Session = Depends(get_session)
):
    """Move a ticket line to a new status

    Valid transitions:
    - pending -> in_progress, cancelled
    - in_progress -> completed, cancelled

    The ticket completes once every line is completed or cancelled and at
    least one was completed. Open lines leave the ticket status unchanged.
    """
    service = TicketService(session)
    line = service.update_line_status(line_id, update.status)
    await event_bus.publish_all(service.drain_events())
    return line


@router.patch("/{ticket_id}/status", response_model=TicketResponse)
async def update_ticket_status(
    ticket_id: uuid.UUID,
    update: TicketStatusUpdateRequest,
    session: Session = Depends(get_session)
):
    """Set a ticket's status directly (only cancellation is allowed)"""
    service = TicketService(session)
    ticket = service.update_ticket_status(ticket_id, update.status, reason=update.reason)
    await event_bus.publish_all(service.drain_events())
    return ticket


@router.post("/{ticket_id}/cancel", response_model=TicketResponse)
async def cancel_ticket(
    ticket_id: uuid.UUID,
    cancel_data: Optional[TicketCancelRequest] = None,
    session: Session = Depends(get_session)
):
    """Cancel a ticket and every line not yet completed"""
    service = TicketService(session)
    reason = cancel_data.reason if cancel_data else None
    ticket = service.cancel_ticket(ticket_id, reason=reason)
    await event_bus.publish_all(service.drain_events())
    return ticket


@router.get("", response_model=List[TicketResponse])
async def list_tickets(
    store_id: Optional[uuid.UUID] = Query(None, description="Filter by store"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    session: Session = Depends(get_session)
):
    """List tickets by priority, then age"""
    return TicketService(session).list_tickets(store_id=store_id, status=status_filter)


@router.get("/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket(
    ticket_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Get ticket details with lines"""
    return TicketService(session).get_ticket(ticket_id)
