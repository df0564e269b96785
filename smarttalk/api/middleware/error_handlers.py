import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from smarttalk.db.sessions import SessionNotFoundError

logger = logging.getLogger("SmartTalkAI")


async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    logger.info(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Session not found"},
    )


async def database_unavailable_handler(request: Request, exc: Exception):
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable. Please ensure MongoDB is running."},
    )


async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error during {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error."},
    )


def register_exception_handlers(app: FastAPI):
    """Maps domain and database exceptions to HTTP responses."""
    app.add_exception_handler(SessionNotFoundError, session_not_found_handler)
    app.add_exception_handler(ServerSelectionTimeoutError, database_unavailable_handler)
    app.add_exception_handler(ConnectionFailure, database_unavailable_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
