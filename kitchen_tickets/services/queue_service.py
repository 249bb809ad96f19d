"""
Queue registry: kitchen queues and the products routed to them
"""

from typing import List, Optional
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
import structlog

from kitchen_tickets.core.config import get_settings
from kitchen_tickets.core.database import atomic
from kitchen_tickets.core.exceptions import (
    DuplicateAssignmentError, NotFoundError, PersistenceError, ValidationError
)
from kitchen_tickets.models.columns import utc_now
from kitchen_tickets.models.kitchen_queue import KitchenQueue, QueueAssignment

logger = structlog.get_logger(__name__)
settings = get_settings()


def _clean_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise ValidationError("Queue name is required")
    return name.strip()


class QueueService:
    """Queue and assignment operations on an explicitly passed session"""

    def __init__(self, session: Session):
        self.session = session

    def create_queue(self, store_id: uuid.UUID, name: str, is_active: bool = True) -> KitchenQueue:
        if store_id is None:
            raise ValidationError("Store reference is required")

        queue = KitchenQueue(store_id=store_id, name=_clean_name(name), is_active=is_active)
        with atomic(self.session, "create queue"):
            self.session.add(queue)

        self.session.refresh(queue)
        logger.info(f"Created queue '{queue.name}' ({queue.id}) for store {store_id}")
        return queue

    def list_queues(self, store_id: Optional[uuid.UUID] = None, active_only: bool = False) -> List[KitchenQueue]:
        """List queues ordered by name"""
        query = select(KitchenQueue)

        if store_id:
            query = query.where(KitchenQueue.store_id == store_id)

        if active_only:
            query = query.where(KitchenQueue.is_active == True)  # noqa: E712

        query = query.order_by(KitchenQueue.name.asc(), KitchenQueue.id.asc())
        return list(self.session.exec(query).all())

    def get_queue(self, queue_id: uuid.UUID) -> KitchenQueue:
        """Get a queue with its assignments"""
        queue = self.session.exec(
            select(KitchenQueue)
            .where(KitchenQueue.id == queue_id)
            .options(selectinload(KitchenQueue.assignments))
        ).first()

        if not queue:
            raise NotFoundError("Queue not found")
        return queue

    def update_queue(
        self,
        queue_id: uuid.UUID,
        name: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> KitchenQueue:
        with atomic(self.session, "update queue"):
            queue = self.get_queue(queue_id)

            if name is not None:
                queue.name = _clean_name(name)
            if is_active is not None:
                queue.is_active = is_active

            queue.updated_at = utc_now()
            self.session.add(queue)

        self.session.refresh(queue)
        logger.info(f"Updated queue {queue_id}")
        return queue

    def delete_queue(self, queue_id: uuid.UUID) -> None:
        """Delete a queue together with its assignments"""
        with atomic(self.session, "delete queue"):
            queue = self.get_queue(queue_id)
            assignment_count = len(queue.assignments)
            # Cascade on the relationship removes the assignments in the same flush
            self.session.delete(queue)

        logger.info(f"Deleted queue {queue_id} and {assignment_count} assignments")

    def assign_product(self, queue_id: uuid.UUID, product_id: uuid.UUID) -> QueueAssignment:
        """Route a product to a queue; an existing pair is rejected, not updated"""
        try:
            with atomic(self.session, "assign product"):
                self.get_queue(queue_id)

                existing = self.session.exec(
                    select(QueueAssignment.id).where(
                        QueueAssignment.queue_id == queue_id,
                        QueueAssignment.product_id == product_id
                    )
                ).first()
                if existing is not None:
                    raise DuplicateAssignmentError()

                assignment = QueueAssignment(queue_id=queue_id, product_id=product_id)
                self.session.add(assignment)
        except PersistenceError as e:
            # Unique constraint hit by a concurrent assignment of the same pair
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateAssignmentError() from e
            raise

        self.session.refresh(assignment)
        logger.info(f"Assigned product {product_id} to queue {queue_id}")
        return assignment

    def remove_assignment(self, assignment_id: uuid.UUID) -> None:
        with atomic(self.session, "remove assignment"):
            assignment = self.session.get(QueueAssignment, assignment_id)
            if not assignment:
                raise NotFoundError("Assignment not found")
            self.session.delete(assignment)

        logger.info(f"Removed assignment {assignment_id}")

    def list_assignments(
        self,
        queue_id: Optional[uuid.UUID] = None,
        store_id: Optional[uuid.UUID] = None
    ) -> List[QueueAssignment]:
        query = select(QueueAssignment)

        if queue_id:
            query = query.where(QueueAssignment.queue_id == queue_id)

        if store_id:
            query = query.join(KitchenQueue).where(KitchenQueue.store_id == store_id)

        query = query.order_by(QueueAssignment.created_at.asc(), QueueAssignment.id.asc())
        return list(self.session.exec(query).all())

    def ensure_default_queue(self, store_id: uuid.UUID) -> Optional[KitchenQueue]:
        """Create the default queue for a store that has none

        Returns the new queue, or None when the store already has queues.
        """
        has_queue = self.session.exec(
            select(KitchenQueue.id).where(KitchenQueue.store_id == store_id)
        ).first()
        if has_queue is not None:
            return None

        return self.create_queue(store_id, settings.DEFAULT_QUEUE_NAME)
