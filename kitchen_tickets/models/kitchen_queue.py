"""
Kitchen queue models: preparation stations and their product assignments
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid

from kitchen_tickets.models.columns import UTCDateTime, utc_now


class KitchenQueue(SQLModel, table=True):
    """Named preparation station (grill, bar, ...) within a store"""

    __tablename__ = "kitchen_queues"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    store_id: uuid.UUID = Field(
        index=True,
        description="Store this queue belongs to"
    )

    name: str = Field(max_length=255, nullable=False, description="Queue display name")
    is_active: bool = Field(default=True, index=True, description="Whether queue is active")

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    # Relationships
    assignments: list["QueueAssignment"] = Relationship(
        back_populates="queue",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class QueueAssignment(SQLModel, table=True):
    """Routes a product to a queue; a product may be served by several queues"""

    __tablename__ = "kitchen_queue_assignments"
    __table_args__ = (
        UniqueConstraint("queue_id", "product_id", name="uq_queue_assignment_queue_product"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    queue_id: uuid.UUID = Field(
        foreign_key="kitchen_queues.id",
        index=True,
        description="Queue preparing the product"
    )
    product_id: uuid.UUID = Field(
        index=True,
        description="Catalog product routed to the queue"
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    queue: Optional[KitchenQueue] = Relationship(back_populates="assignments")
