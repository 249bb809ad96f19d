"""
Kitchen Tickets - Main Application Entry Point
Kitchen ticket orchestration and queue routing for kitchen displays
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from kitchen_tickets.core.config import get_settings
from kitchen_tickets.core.events import event_bus
from kitchen_tickets.core.exceptions import register_exception_handlers
from kitchen_tickets.core.websocket_manager import manager
from kitchen_tickets.api import tickets, queues, websockets

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Initializing {settings.APP_NAME} ({settings.ENVIRONMENT})")
    # Tables are created by Alembic migrations, not auto-generated
    logger.info("Database managed by Alembic migrations")
    manager.register(event_bus)

    yield

    # Shutdown
    manager.unregister(event_bus)
    logger.info(f"Shutting down {settings.APP_NAME}")


# Create FastAPI application
app = FastAPI(
    title="Kitchen Tickets API",
    description="Kitchen tickets from finalized orders, routed to preparation queues",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(tickets.router, prefix=f"{settings.API_V1_PREFIX}/tickets", tags=["tickets"])
app.include_router(queues.router, prefix=f"{settings.API_V1_PREFIX}/queues", tags=["queues"])
app.include_router(websockets.router, prefix=f"{settings.API_V1_PREFIX}/ws", tags=["websockets"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "kitchen-tickets-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Kitchen Tickets API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "kitchen_tickets.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
