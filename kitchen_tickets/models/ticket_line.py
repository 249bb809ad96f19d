"""
Ticket line model for individual items being prepared
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from kitchen_tickets.core.exceptions import InvalidTransitionError
from kitchen_tickets.models.columns import UTCDateTime, status_column, utc_now

if TYPE_CHECKING:
    from kitchen_tickets.models.ticket import Ticket


class LineStatus(str, Enum):
    """Preparation status of a ticket line"""
    PENDING = "pending"           # Waiting to be started
    IN_PROGRESS = "in_progress"   # Being prepared
    COMPLETED = "completed"       # Prepared (terminal)
    CANCELLED = "cancelled"       # Will not be prepared (terminal)


LINE_TRANSITIONS = {
    LineStatus.PENDING: frozenset({LineStatus.IN_PROGRESS, LineStatus.CANCELLED}),
    LineStatus.IN_PROGRESS: frozenset({LineStatus.COMPLETED, LineStatus.CANCELLED}),
    LineStatus.COMPLETED: frozenset(),
    LineStatus.CANCELLED: frozenset(),
}

RESOLVED_LINE_STATUSES = frozenset({LineStatus.COMPLETED, LineStatus.CANCELLED})


class TicketLine(SQLModel, table=True):
    """One preparable item within a kitchen ticket"""

    __tablename__ = "kitchen_ticket_lines"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    ticket_id: uuid.UUID = Field(
        foreign_key="kitchen_tickets.id",
        index=True,
        description="Ticket this line belongs to"
    )
    order_line_id: uuid.UUID = Field(
        index=True,
        description="Order line item this line mirrors"
    )
    product_id: uuid.UUID = Field(
        index=True,
        description="Product being prepared"
    )

    # Item details (snapshot from catalog)
    product_name: str = Field(max_length=255, description="Product name (snapshot from catalog)")
    quantity: int = Field(default=1, description="Quantity to prepare")
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Special instructions for this item"
    )
    preparation_time: Optional[int] = Field(
        default=None,
        description="Expected preparation time in minutes"
    )
    sort_order: int = Field(default=0, description="Display order within ticket")

    status: LineStatus = Field(
        default=LineStatus.PENDING,
        sa_column=status_column(LineStatus, LineStatus.PENDING),
        description="Preparation status"
    )
    started_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCDateTime,
        description="When preparation started"
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCDateTime,
        description="When preparation completed"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    ticket: Optional["Ticket"] = Relationship(back_populates="lines")

    # State machine methods
    def is_terminal(self) -> bool:
        """Check if the line can no longer change status"""
        return self.status in RESOLVED_LINE_STATUSES

    def can_transition_to(self, new_status: LineStatus) -> bool:
        """Check if the state machine allows moving to new_status"""
        return new_status in LINE_TRANSITIONS[self.status]

    def transition_to(self, new_status: LineStatus, now: Optional[datetime] = None) -> None:
        """Move the line to new_status and stamp the matching timestamp"""
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot move line from {self.status.value} to {new_status.value}"
            )

        now = now or utc_now()
        if new_status == LineStatus.IN_PROGRESS:
            self.started_at = now
        elif new_status == LineStatus.COMPLETED:
            self.completed_at = now

        self.status = new_status
        self.updated_at = now
