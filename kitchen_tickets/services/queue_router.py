"""
Queue routing: partitions ticket lines by the queues their products go to
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set
import uuid

from kitchen_tickets.models.kitchen_queue import QueueAssignment
from kitchen_tickets.models.ticket_line import TicketLine


@dataclass
class QueueRouting:
    """Lines grouped per queue, plus those no queue prepares"""

    by_queue: Dict[uuid.UUID, List[TicketLine]] = field(default_factory=dict)
    unassigned: List[TicketLine] = field(default_factory=list)

    def lines_for(self, queue_id: uuid.UUID) -> List[TicketLine]:
        return self.by_queue.get(queue_id, [])


def build_product_index(assignments: Iterable[QueueAssignment]) -> Dict[uuid.UUID, Set[uuid.UUID]]:
    """Map product id -> ids of the queues it is assigned to"""
    index: Dict[uuid.UUID, Set[uuid.UUID]] = {}
    for assignment in assignments:
        index.setdefault(assignment.product_id, set()).add(assignment.queue_id)
    return index


def queues_for_product(
    product_id: uuid.UUID,
    assignments: Iterable[QueueAssignment]
) -> Set[uuid.UUID]:
    """Ids of the queues that prepare product_id"""
    return build_product_index(assignments).get(product_id, set())


def partition_lines(
    lines: Iterable[TicketLine],
    assignments: Iterable[QueueAssignment],
    product_lookup: Optional[Callable[[TicketLine], Optional[uuid.UUID]]] = None,
) -> QueueRouting:
    """Partition lines by queue

    A line whose product is assigned to several queues appears under each of
    them. A line with no assignment (or no known product) goes to
    ``unassigned``; every input line ends up in at least one bucket. Line order
    is preserved within each bucket.
    """
    lookup = product_lookup or (lambda line: line.product_id)
    index = build_product_index(assignments)
    routing = QueueRouting()

    for line in lines:
        product_id = lookup(line)
        queue_ids = index.get(product_id) if product_id is not None else None

        if not queue_ids:
            routing.unassigned.append(line)
            continue

        for queue_id in sorted(queue_ids, key=str):
            routing.by_queue.setdefault(queue_id, []).append(line)

    return routing
