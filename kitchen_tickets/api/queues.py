"""
Kitchen queues API endpoints: queue management, product routing and the
per-queue display view
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional
import structlog
import uuid

from kitchen_tickets.core.database import get_session
from kitchen_tickets.schemas.queue import (
    QueueCreate, QueueUpdate, QueueResponse, QueueDetailResponse,
    AssignmentCreate, AssignmentResponse
)
from kitchen_tickets.schemas.ticket import TicketView
from kitchen_tickets.services.live_view import LiveViewBuilder
from kitchen_tickets.services.queue_service import QueueService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=QueueResponse, status_code=status.HTTP_201_CREATED)
async def create_queue(
    queue_data: QueueCreate,
    session: Session = Depends(get_session)
):
    """Create a kitchen queue for a store"""
    return QueueService(session).create_queue(
        store_id=queue_data.store_id,
        name=queue_data.name,
        is_active=queue_data.is_active
    )


@router.get("", response_model=List[QueueResponse])
async def list_queues(
    store_id: Optional[uuid.UUID] = Query(None, description="Filter by store"),
    active_only: bool = Query(False, description="Only return active queues"),
    session: Session = Depends(get_session)
):
    """List kitchen queues by name"""
    return QueueService(session).list_queues(store_id=store_id, active_only=active_only)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_assignment(
    assignment_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Stop routing a product to a queue"""
    QueueService(session).remove_assignment(assignment_id)


@router.get("/{queue_id}", response_model=QueueDetailResponse)
async def get_queue(
    queue_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Get queue details with its product assignments"""
    return QueueService(session).get_queue(queue_id)


@router.put("/{queue_id}", response_model=QueueResponse)
async def update_queue(
    queue_id: uuid.UUID,
    queue_data: QueueUpdate,
    session: Session = Depends(get_session)
):
    """Rename, activate or deactivate a queue"""
    return QueueService(session).update_queue(
        queue_id,
        name=queue_data.name,
        is_active=queue_data.is_active
    )


@router.delete("/{queue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_queue(
    queue_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Delete a queue and all of its product assignments"""
    QueueService(session).delete_queue(queue_id)


@router.post(
    "/{queue_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED
)
async def assign_product(
    queue_id: uuid.UUID,
    assignment_data: AssignmentCreate,
    session: Session = Depends(get_session)
):
    """Route a product to a queue"""
    return QueueService(session).assign_product(queue_id, assignment_data.product_id)


@router.get("/{queue_id}/view", response_model=List[TicketView])
async def get_queue_view(
    queue_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Active tickets with only the lines this queue prepares"""
    return LiveViewBuilder(session).queue_view(queue_id)
