"""
Live kitchen display views: active tickets in service order, optionally
narrowed to what a single queue prepares
"""

from typing import Dict, List, Optional, Set, Union
import uuid

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
import structlog

from kitchen_tickets.core.exceptions import NotFoundError
from kitchen_tickets.models.kitchen_queue import KitchenQueue, QueueAssignment
from kitchen_tickets.models.ticket import Ticket, TicketStatus, ACTIVE_TICKET_STATUSES
from kitchen_tickets.models.ticket_line import TicketLine
from kitchen_tickets.schemas.ticket import LineView, TicketView
from kitchen_tickets.services.queue_router import build_product_index, partition_lines
from kitchen_tickets.services.ticket_service import SERVICE_ORDER, parse_status

logger = structlog.get_logger(__name__)


class LiveViewBuilder:
    """Read-only projection of tickets for kitchen displays"""

    def __init__(self, session: Session):
        self.session = session

    def list_active(
        self,
        store_id: Optional[uuid.UUID] = None,
        status: Union[str, TicketStatus, None] = None,
        queue_id: Optional[uuid.UUID] = None
    ) -> List[TicketView]:
        """List tickets for a display

        Without ``status`` only pending and in-progress tickets are listed.
        With ``queue_id`` the tickets are limited to the queue's store, each
        ticket keeps only the lines routed to that queue, and tickets left with
        no lines are dropped.
        """
        queue = None
        if queue_id is not None:
            queue = self.session.get(KitchenQueue, queue_id)
            if not queue:
                raise NotFoundError("Queue not found")
            store_id = queue.store_id

        query = select(Ticket).options(selectinload(Ticket.lines))

        if store_id:
            query = query.where(Ticket.store_id == store_id)

        if status is not None:
            query = query.where(Ticket.status == parse_status(TicketStatus, status))
        else:
            query = query.where(Ticket.status.in_(ACTIVE_TICKET_STATUSES))

        tickets = self.session.exec(query.order_by(*SERVICE_ORDER)).all()

        # Assignments per store; a line is only routed to queues of its ticket's store
        store_assignments: Dict[uuid.UUID, List[QueueAssignment]] = {}

        views = []
        for ticket in tickets:
            if ticket.store_id not in store_assignments:
                store_assignments[ticket.store_id] = self._store_assignments(ticket.store_id)
            assignments = store_assignments[ticket.store_id]
            product_index = build_product_index(assignments)

            lines = list(ticket.lines)
            if queue is not None:
                lines = partition_lines(lines, assignments).lines_for(queue.id)
                if not lines:
                    continue
            views.append(self._ticket_view(ticket, lines, product_index))

        logger.debug(f"Built {len(views)} ticket views (store={store_id}, queue={queue_id})")
        return views

    def queue_view(self, queue_id: uuid.UUID) -> List[TicketView]:
        """Active tickets as seen from one queue"""
        return self.list_active(queue_id=queue_id)

    def _store_assignments(self, store_id: uuid.UUID) -> List[QueueAssignment]:
        return list(self.session.exec(
            select(QueueAssignment)
            .join(KitchenQueue)
            .where(KitchenQueue.store_id == store_id)
        ).all())

    def _ticket_view(
        self,
        ticket: Ticket,
        lines: List[TicketLine],
        product_index: Dict[uuid.UUID, Set[uuid.UUID]]
    ) -> TicketView:
        line_views = [
            LineView(
                **line.model_dump(),
                queue_ids=sorted(product_index.get(line.product_id, set()), key=str),
            )
            for line in lines
        ]
        return TicketView(**ticket.model_dump(), lines=line_views)
