"""
Kitchen queue request and response schemas
"""

from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import List, Optional
import uuid


class QueueCreate(SQLModel):
    store_id: uuid.UUID
    name: str = Field(max_length=255)
    is_active: bool = True


class QueueUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None


class AssignmentCreate(SQLModel):
    product_id: uuid.UUID


class AssignmentResponse(SQLModel):
    id: uuid.UUID
    queue_id: uuid.UUID
    product_id: uuid.UUID
    created_at: datetime


class QueueResponse(SQLModel):
    """Schema for kitchen queue response"""
    id: uuid.UUID
    store_id: uuid.UUID
    name: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class QueueDetailResponse(QueueResponse):
    """Queue with the products routed to it"""
    assignments: List[AssignmentResponse] = []
