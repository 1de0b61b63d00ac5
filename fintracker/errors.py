# fintracker/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .logging_utils import get_logger

LOGGER = get_logger(__name__)


class ApiError(Exception):
    """An error the client should see as ``{"error": message}`` with ``status_code``."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def store_error_message(exc: SQLAlchemyError) -> str:
    # the driver's own text ("duplicate key value ...", "UNIQUE constraint failed ...")
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc)


def validation_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "Invalid request")
    return f"{loc}: {msg}" if loc else msg


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # malformed input is reported like any other failed request: 500 {"error"}
        message = validation_error_message(exc)
        LOGGER.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=500, content={"error": message})

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        LOGGER.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": store_error_message(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc)})
