"""
Test configuration for pytest
"""

import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator
import uuid

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

from kitchen_tickets.core.database import build_engine, get_session  # noqa: E402
from kitchen_tickets.core.events import event_bus  # noqa: E402
import kitchen_tickets.models  # noqa: E402,F401


# Create test engine using in-memory SQLite for unit tests
test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine shared by several threads"""
    engine = build_engine(f"sqlite:///{tmp_path / 'kitchen.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(db: Session):
    """API client whose requests use the test session"""
    from fastapi.testclient import TestClient
    from kitchen_tickets.main import app

    def _get_test_session():
        yield db

    app.dependency_overrides[get_session] = _get_test_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Drop subscribers registered by a test"""
    yield
    event_bus.clear_subscribers()


@pytest.fixture
def store_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def order_factory(store_id: uuid.UUID):
    """Build an order reference and its lines for a product list"""
    from kitchen_tickets.schemas.ticket import OrderRef, TicketLineCreate

    def _build(products=(), priority=None, store=None, notes=None):
        order = OrderRef(
            order_id=uuid.uuid4(),
            store_id=store or store_id,
            priority=priority,
            notes=notes,
        )
        lines = [
            TicketLineCreate(
                order_line_id=uuid.uuid4(),
                product_id=product_id,
                product_name=f"Product {index}",
                quantity=1,
            )
            for index, product_id in enumerate(products)
        ]
        return order, lines

    return _build


@pytest.fixture
def ticket_factory(db: Session, order_factory):
    """Create a ticket with one line per product through the ticket service"""
    from kitchen_tickets.services.ticket_service import TicketService

    def _create(products=None, priority=None, store=None):
        if products is None:
            products = [uuid.uuid4()]
        order, lines = order_factory(products, priority=priority, store=store)
        service = TicketService(db)
        ticket = service.create_ticket(order, lines)
        return service.get_ticket(ticket.id)

    return _create
