"""
Domain exceptions and their API error responses

Services raise these; the API layer renders them with a consistent body of
``detail``, ``error_code`` and ``path``.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


class KitchenError(Exception):
    """Base error for ticket and queue operations"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "KITCHEN_ERROR"
    default_detail: str = "Kitchen operation failed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(KitchenError):
    """Malformed input: unknown status value, missing required reference"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_detail = "Validation failed"


class NotFoundError(KitchenError):
    """Referenced ticket, line, queue or assignment does not exist"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_detail = "Resource not found"


class InvalidTransitionError(KitchenError):
    """Status change forbidden by the state machine"""

    status_code = status.HTTP_409_CONFLICT
    error_code = "INVALID_TRANSITION"
    default_detail = "Status transition not allowed"


class ConflictError(KitchenError):
    """Write would violate a uniqueness rule"""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
    default_detail = "Resource conflict"


class DuplicateAssignmentError(ConflictError):
    error_code = "DUPLICATE_ASSIGNMENT"
    default_detail = "This product is already assigned to this queue"


class DuplicateTicketError(ConflictError):
    error_code = "DUPLICATE_TICKET"
    default_detail = "A kitchen ticket already exists for this order"


class PersistenceError(KitchenError):
    """The store could not complete the operation; nothing was applied"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "PERSISTENCE_ERROR"
    default_detail = "Storage operation failed"


async def handle_kitchen_error(request: Request, exc: KitchenError) -> JSONResponse:
    """Render a domain error as a JSON response"""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} at {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{exc.error_code} at {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "path": str(request.url.path),
        },
    )


def register_exception_handlers(app):
    """Register domain error handlers with the FastAPI app"""
    app.add_exception_handler(KitchenError, handle_kitchen_error)
