"""Error taxonomy of the service and its HTTP mapping.

Services raise these; ``register_error_handlers`` turns them into JSON
responses shaped like FastAPI's own ``{"detail": ...}`` errors.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskTrackerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"


class UnauthorizedError(TaskTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class NotFoundError(TaskTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(TaskTrackerError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class InternalError(TaskTrackerError):
    pass


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(TaskTrackerError)
    async def task_tracker_error(request: Request, exc: TaskTrackerError):
        headers = None
        if isinstance(exc, UnauthorizedError):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )

    # Malformed input is a 400 here, not FastAPI's default 422
    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )