"""
Ticket status rollup

The ticket status is derived from its lines. ``evaluate_rollup`` is a pure
reducer over the multiset of line statuses; the ticket service calls it inside
the same transaction as every line mutation.
"""

from typing import Iterable

from kitchen_tickets.models.ticket import TicketStatus
from kitchen_tickets.models.ticket_line import LineStatus, RESOLVED_LINE_STATUSES


def evaluate_rollup(current: TicketStatus, line_statuses: Iterable[LineStatus]) -> TicketStatus:
    """Return the status the ticket should have given its lines' statuses

    - a cancelled or completed ticket never changes
    - a ticket without lines never changes (stays pending until cancelled)
    - every line completed or cancelled, at least one completed: completed
    - any line still pending or in_progress: unchanged
    """
    if current in (TicketStatus.CANCELLED, TicketStatus.COMPLETED):
        return current

    statuses = list(line_statuses)
    if not statuses:
        return current

    # Open lines, or every line cancelled, leave the status to staff
    resolved = all(s in RESOLVED_LINE_STATUSES for s in statuses)
    if resolved and any(s == LineStatus.COMPLETED for s in statuses):
        return TicketStatus.COMPLETED

    return current
