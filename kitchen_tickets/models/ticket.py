"""
Ticket model for KDS kitchen tickets
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from kitchen_tickets.models.columns import UTCDateTime, status_column, utc_now

if TYPE_CHECKING:
    from kitchen_tickets.models.ticket_line import TicketLine


class TicketStatus(str, Enum):
    """Status of a kitchen ticket"""
    PENDING = "pending"             # Open, lines may already be in preparation
    IN_PROGRESS = "in_progress"     # Not reached through line progress
    COMPLETED = "completed"         # Every line resolved, one or more completed (set by rollup only)
    CANCELLED = "cancelled"         # Cancelled directly by staff


TERMINAL_TICKET_STATUSES = frozenset({TicketStatus.COMPLETED, TicketStatus.CANCELLED})
ACTIVE_TICKET_STATUSES = (TicketStatus.PENDING, TicketStatus.IN_PROGRESS)


class Ticket(SQLModel, table=True):
    """Kitchen ticket derived 1:1 from a finalized sales order"""

    __tablename__ = "kitchen_tickets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_id: uuid.UUID = Field(
        unique=True,
        index=True,
        description="Finalized sales order this ticket was created from"
    )
    store_id: uuid.UUID = Field(
        index=True,
        description="Store the order was placed in (snapshot)"
    )

    status: TicketStatus = Field(
        default=TicketStatus.PENDING,
        sa_column=status_column(TicketStatus, TicketStatus.PENDING),
        description="Current status of the ticket"
    )
    priority: int = Field(
        default=0,
        index=True,
        description="Priority level (higher = served first)"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Notes for the kitchen"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    completed_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCDateTime,
        description="When the rollup completed the ticket"
    )
    cancelled_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCDateTime,
        description="When the ticket was cancelled"
    )
    cancelled_reason: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reason for cancelling"
    )
    version: int = Field(
        default=0,
        description="Incremented on every ticket mutation"
    )

    # Relationships
    lines: list["TicketLine"] = Relationship(
        back_populates="ticket",
        sa_relationship_kwargs={
            "order_by": "TicketLine.sort_order",
            "cascade": "all, delete-orphan",
        },
    )

    def is_terminal(self) -> bool:
        """Check if the ticket can no longer change status"""
        return self.status in TERMINAL_TICKET_STATUSES

    def touch(self, now: Optional[datetime] = None) -> None:
        """Record a mutation"""
        self.updated_at = now or utc_now()
        self.version += 1
