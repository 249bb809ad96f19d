"""
Ticket request and response schemas
"""

from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import List, Optional
import uuid

from kitchen_tickets.models.ticket import TicketStatus
from kitchen_tickets.models.ticket_line import LineStatus


class OrderRef(SQLModel):
    """Finalized order handed to the kitchen"""
    order_id: Optional[uuid.UUID] = None  # Checked by the service: required
    store_id: uuid.UUID
    priority: Optional[int] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class TicketLineCreate(SQLModel):
    """One finalized order line item"""
    order_line_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str = Field(min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(default=None, max_length=1000)
    preparation_time: Optional[int] = Field(default=None, ge=0)


class TicketCreate(SQLModel):
    """Schema for creating a ticket from an order"""
    order: OrderRef
    lines: List[TicketLineCreate] = []


class TicketStatusUpdateRequest(SQLModel):
    """Direct ticket status change; only 'cancelled' is accepted"""
    status: str
    reason: Optional[str] = Field(default=None, max_length=500)


class TicketCancelRequest(SQLModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class LineStatusUpdateRequest(SQLModel):
    status: str


class TicketLineResponse(SQLModel):
    """Schema for ticket line response"""
    id: uuid.UUID
    ticket_id: uuid.UUID
    order_line_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    notes: Optional[str] = None
    preparation_time: Optional[int] = None
    sort_order: int
    status: LineStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: datetime


class TicketResponse(SQLModel):
    """Schema for ticket response"""
    id: uuid.UUID
    order_id: uuid.UUID
    store_id: uuid.UUID
    status: TicketStatus
    priority: int
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_reason: Optional[str] = None
    version: int


class TicketDetailResponse(TicketResponse):
    """Schema for ticket with lines"""
    lines: List[TicketLineResponse] = []


class LineView(TicketLineResponse):
    """Ticket line as shown on a kitchen display"""
    queue_ids: List[uuid.UUID] = []


class TicketView(TicketResponse):
    """Ticket as shown on a kitchen display"""
    lines: List[LineView] = []
