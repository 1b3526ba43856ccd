"""HTTP error shape {error, details?} and the handlers that produce it."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bonkagent.errors import DashboardError, ValidationError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Failure already translated into a status code and a human message."""

    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def error_response(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@contextmanager
def failure_message(message: str) -> Iterator[None]:
    """Re-raise upstream/transport failures as a 500 with a route-specific message."""
    try:
        yield
    except ValidationError:
        raise
    except DashboardError as e:
        logger.error("%s: %s", message, e)
        raise ApiError(500, message, e.details if e.details is not None else e.message) from e


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        return error_response(exc.status_code, exc.error, exc.details)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return error_response(400, exc.message, exc.details)

    @app.exception_handler(DashboardError)
    async def _dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
        logger.error("Unhandled upstream failure on %s: %s", request.url.path, exc)
        return error_response(500, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, "Invalid request", exc.errors())

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return error_response(500, "An unexpected error occurred", str(exc))
