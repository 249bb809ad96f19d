"""
Maintenance job to give every store a default kitchen queue

Stores are taken from existing tickets and from the store ids passed on the
command line. A store that already has a queue is left alone.
"""

import sys
import uuid
from typing import Iterable, List

from sqlmodel import Session, select
import structlog

from kitchen_tickets.core.database import engine
from kitchen_tickets.models.ticket import Ticket
from kitchen_tickets.services.queue_service import QueueService

logger = structlog.get_logger(__name__)


def seed_default_queues(session: Session, extra_store_ids: Iterable[uuid.UUID] = ()) -> dict:
    """Create the default queue for each known store without queues"""
    store_ids = set(session.exec(select(Ticket.store_id).distinct()).all())
    store_ids.update(extra_store_ids)

    service = QueueService(session)
    created = []
    for store_id in sorted(store_ids, key=str):
        queue = service.ensure_default_queue(store_id)
        if queue is not None:
            created.append(queue.id)
            logger.info(f"Created default queue {queue.id} for store {store_id}")

    return {"stores": len(store_ids), "created": len(created)}


def parse_store_ids(args: List[str]) -> List[uuid.UUID]:
    return [uuid.UUID(arg) for arg in args]


def main():
    """Main entry point for the seeding job"""
    logger.info("Starting default queue seeding")

    try:
        store_ids = parse_store_ids(sys.argv[1:])
    except ValueError as e:
        logger.error(f"Invalid store id: {e}")
        sys.exit(2)

    with Session(engine) as session:
        results = seed_default_queues(session, store_ids)

    logger.info(f"Default queue seeding complete: {results}")


if __name__ == "__main__":
    main()
