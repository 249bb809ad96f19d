"""
Ticket store: creation of tickets from orders and their status transitions

Every write is one transaction (see ``atomic``). Line updates lock the owning
ticket row, re-read the ticket's full line set after the write and apply the
rollup before committing, so two concurrent "last line" updates cannot both
complete the ticket or both miss the completion.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Type, TypeVar, Union
from enum import Enum
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
import structlog

from kitchen_tickets.core.config import get_settings
from kitchen_tickets.core.database import atomic
from kitchen_tickets.core.events import (
    DomainEvent, TicketCreated, TicketStatusChanged, TicketCompleted,
    TicketCancelled, TicketLineStatusChanged
)
from kitchen_tickets.core.exceptions import (
    DuplicateTicketError, InvalidTransitionError, NotFoundError, PersistenceError,
    ValidationError
)
from kitchen_tickets.models.columns import utc_now
from kitchen_tickets.models.ticket import Ticket, TicketStatus
from kitchen_tickets.models.ticket_line import TicketLine, LineStatus
from kitchen_tickets.schemas.ticket import OrderRef, TicketLineCreate
from kitchen_tickets.services.rollup import evaluate_rollup

logger = structlog.get_logger(__name__)
settings = get_settings()

StatusT = TypeVar("StatusT", bound=Enum)

# Service order for kitchen displays: a strict total order
SERVICE_ORDER = (Ticket.priority.desc(), Ticket.created_at.asc(), Ticket.id.asc())


def parse_status(enum_cls: Type[StatusT], value: Union[str, StatusT, None]) -> StatusT:
    """Parse a status value, accepting 'in-progress' as well as 'in_progress'"""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid status value: {value!r}")

    normalized = value.strip().lower().replace("-", "_")
    try:
        return enum_cls(normalized)
    except ValueError:
        raise ValidationError(f"Invalid status value: {value!r}")


class TicketService:
    """Ticket and ticket line operations on an explicitly passed session"""

    def __init__(self, session: Session):
        self.session = session
        self._events: List[DomainEvent] = []

    def drain_events(self) -> List[DomainEvent]:
        """Return and forget the events of committed operations"""
        events, self._events = self._events, []
        return events

    # Creation

    def create_ticket(self, order: Optional[OrderRef], lines: Sequence[TicketLineCreate] = ()) -> Ticket:
        """Create a ticket and all of its lines, or nothing at all"""
        if order is None or order.order_id is None:
            raise ValidationError("Order reference is required")
        if order.store_id is None:
            raise ValidationError("Store reference is required")

        try:
            with atomic(self.session, "create ticket") as events:
                existing = self.session.exec(
                    select(Ticket.id).where(Ticket.order_id == order.order_id)
                ).first()
                if existing is not None:
                    raise DuplicateTicketError(f"Order {order.order_id} already has ticket {existing}")

                now = utc_now()
                ticket = Ticket(
                    order_id=order.order_id,
                    store_id=order.store_id,
                    status=TicketStatus.PENDING,
                    priority=order.priority if order.priority is not None else settings.DEFAULT_TICKET_PRIORITY,
                    notes=order.notes,
                    created_at=now,
                    updated_at=now,
                )
                self.session.add(ticket)

                for position, line_data in enumerate(lines):
                    self.session.add(self._new_line(ticket, line_data, position, now))

                events.append(TicketCreated(
                    ticket_id=ticket.id,
                    store_id=ticket.store_id,
                    order_id=ticket.order_id,
                    priority=ticket.priority,
                    line_count=len(lines),
                ))
        except PersistenceError as e:
            # Lost a race with another request creating the same order's ticket
            if isinstance(e.__cause__, IntegrityError) and self._order_has_ticket(order.order_id):
                raise DuplicateTicketError(f"Order {order.order_id} already has a ticket") from e
            raise

        self._events.extend(events)
        self.session.refresh(ticket)
        logger.info(f"Created ticket {ticket.id} for order {ticket.order_id} with {len(lines)} lines")
        return ticket

    def _order_has_ticket(self, order_id: uuid.UUID) -> bool:
        return self.session.exec(
            select(Ticket.id).where(Ticket.order_id == order_id)
        ).first() is not None

    def _new_line(
        self,
        ticket: Ticket,
        line_data: TicketLineCreate,
        position: int,
        now: datetime
    ) -> TicketLine:
        return TicketLine(
            ticket_id=ticket.id,
            order_line_id=line_data.order_line_id,
            product_id=line_data.product_id,
            product_name=line_data.product_name,
            quantity=line_data.quantity,
            notes=line_data.notes,
            preparation_time=line_data.preparation_time,
            sort_order=position,
            status=LineStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    # Reads

    def get_ticket(self, ticket_id: uuid.UUID) -> Ticket:
        """Get a ticket with its lines"""
        ticket = self.session.exec(
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .options(selectinload(Ticket.lines))
        ).first()

        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    def get_line(self, line_id: uuid.UUID) -> TicketLine:
        line = self.session.get(TicketLine, line_id)
        if not line:
            raise NotFoundError("Ticket line not found")
        return line

    def list_tickets(
        self,
        store_id: Optional[uuid.UUID] = None,
        status: Union[str, TicketStatus, None] = None
    ) -> List[Ticket]:
        """List tickets in service order, optionally filtered"""
        query = select(Ticket).options(selectinload(Ticket.lines))

        if store_id:
            query = query.where(Ticket.store_id == store_id)

        if status is not None:
            query = query.where(Ticket.status == parse_status(TicketStatus, status))

        return list(self.session.exec(query.order_by(*SERVICE_ORDER)).all())

    # Transitions

    def update_ticket_status(
        self,
        ticket_id: uuid.UUID,
        new_status: Union[str, TicketStatus],
        reason: Optional[str] = None
    ) -> Ticket:
        """Set a ticket's status directly

        Only ``cancelled`` can be set this way; ``in_progress`` and
        ``completed`` are derived from the lines by the rollup.
        """
        target = parse_status(TicketStatus, new_status)
        if target != TicketStatus.CANCELLED:
            raise ValidationError(
                f"Ticket status '{target.value}' is derived from its lines; only 'cancelled' can be set"
            )

        with atomic(self.session, "cancel ticket") as events:
            ticket = self._lock_ticket(ticket_id)
            if ticket.is_terminal():
                raise InvalidTransitionError(f"Ticket is already {ticket.status.value}")

            now = utc_now()
            for line in self._load_lines(ticket.id):
                if not line.is_terminal():
                    line.transition_to(LineStatus.CANCELLED, now)
                    self.session.add(line)

            previous = ticket.status
            ticket.status = TicketStatus.CANCELLED
            ticket.cancelled_at = now
            ticket.cancelled_reason = reason
            ticket.touch(now)
            self.session.add(ticket)

            events.append(TicketStatusChanged(
                ticket_id=ticket.id,
                store_id=ticket.store_id,
                status=ticket.status.value,
                previous_status=previous.value,
            ))
            events.append(TicketCancelled(ticket.id, ticket.store_id, reason=reason))

        self._events.extend(events)
        self.session.refresh(ticket)
        logger.info(f"Ticket {ticket_id} cancelled, reason: {reason}")
        return ticket

    def cancel_ticket(self, ticket_id: uuid.UUID, reason: Optional[str] = None) -> Ticket:
        return self.update_ticket_status(ticket_id, TicketStatus.CANCELLED, reason=reason)

    def update_line_status(self, line_id: uuid.UUID, new_status: Union[str, LineStatus]) -> TicketLine:
        """Move a line through the state machine and roll the change up"""
        target = parse_status(LineStatus, new_status)

        with atomic(self.session, "update line status") as events:
            ticket_id = self.session.exec(
                select(TicketLine.ticket_id).where(TicketLine.id == line_id)
            ).first()
            if ticket_id is None:
                raise NotFoundError("Ticket line not found")

            # Serialize writers on this ticket before reading any line state
            ticket = self._lock_ticket(ticket_id)
            line = self.session.exec(
                select(TicketLine)
                .where(TicketLine.id == line_id)
                .execution_options(populate_existing=True)
            ).one()

            previous = line.status
            now = utc_now()
            line.transition_to(target, now)
            self.session.add(line)
            self.session.flush()

            events.append(TicketLineStatusChanged(
                ticket_id=ticket.id,
                store_id=ticket.store_id,
                line_id=line.id,
                product_id=line.product_id,
                status=line.status.value,
                previous_status=previous.value,
            ))
            self._apply_rollup(ticket.id, now, events)

        self._events.extend(events)
        self.session.refresh(line)
        logger.info(f"Line {line_id} moved from {previous.value} to {target.value}")
        return line

    def _apply_rollup(self, ticket_id: uuid.UUID, now: datetime, events: List[DomainEvent]) -> Ticket:
        """Recompute the ticket status from its current lines, inside the caller's transaction"""
        ticket = self._lock_ticket(ticket_id)
        line_statuses = self.session.exec(
            select(TicketLine.status).where(TicketLine.ticket_id == ticket_id)
        ).all()

        new_status = evaluate_rollup(ticket.status, line_statuses)
        if new_status == ticket.status:
            return ticket

        previous = ticket.status
        ticket.status = new_status
        if new_status == TicketStatus.COMPLETED:
            ticket.completed_at = now
        ticket.touch(now)
        self.session.add(ticket)

        events.append(TicketStatusChanged(
            ticket_id=ticket.id,
            store_id=ticket.store_id,
            status=new_status.value,
            previous_status=previous.value,
        ))
        if new_status == TicketStatus.COMPLETED:
            events.append(TicketCompleted(ticket.id, ticket.store_id))
            logger.info(f"Ticket {ticket.id} completed by rollup")

        return ticket

    def _lock_ticket(self, ticket_id: uuid.UUID) -> Ticket:
        """Load the ticket row for update, refreshing any cached copy"""
        ticket = self.session.exec(
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    def _load_lines(self, ticket_id: uuid.UUID) -> List[TicketLine]:
        return list(self.session.exec(
            select(TicketLine)
            .where(TicketLine.ticket_id == ticket_id)
            .order_by(TicketLine.sort_order)
            .execution_options(populate_existing=True)
        ).all())
