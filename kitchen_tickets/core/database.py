"""
Database configuration and session management
"""

from contextlib import contextmanager
from typing import Iterator, List

from sqlmodel import Session, create_engine
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
import structlog

from kitchen_tickets.core.config import get_settings
from kitchen_tickets.core.events import DomainEvent
from kitchen_tickets.core.exceptions import KitchenError, PersistenceError

logger = structlog.get_logger(__name__)
settings = get_settings()


def build_engine(database_url: str, echo: bool = False):
    """Create an engine for the given URL

    SQLite needs its connection shared across threads and a busy timeout so
    concurrent writers wait on the database lock instead of failing at once.
    """
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.DB_LOCK_TIMEOUT_SECONDS,
        }
    elif url.get_backend_name() == "postgresql":
        connect_args = {
            "options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_SECONDS * 1000}"
        }

    new_engine = create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=url.get_backend_name() != "sqlite",
        connect_args=connect_args,
    )

    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        _begin_immediate(new_engine)

    return new_engine


def _begin_immediate(sqlite_engine):
    """Take the SQLite write lock when a transaction begins

    SQLite ignores SELECT ... FOR UPDATE; starting every transaction with
    BEGIN IMMEDIATE makes concurrent writers queue on the busy timeout.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(session: Session, action: str) -> Iterator[List[DomainEvent]]:
    """Run one logical write as a single transaction

    Yields a list the caller appends domain events to. The block's changes are
    committed together; on any error everything is rolled back, storage
    errors are re-raised as PersistenceError and the events are discarded.
    Events are only returned through the list once the commit succeeded.
    """
    events: List[DomainEvent] = []
    try:
        yield events
        session.commit()
    except KitchenError:
        session.rollback()
        events.clear()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        events.clear()
        logger.error(f"Failed to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e
    except Exception:
        session.rollback()
        events.clear()
        raise
