"""
Exception handlers that render every failure as the response envelope.

Clients always receive ``{"success": false, "message": ...}``. Domain errors
carry their own status; 5xx details are logged and never returned.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.errors import BoardServiceError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Validation failed: " + "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    """Register global error handlers on the app."""

    @app.exception_handler(BoardServiceError)
    async def board_error_handler(request: Request, exc: BoardServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s: %s | path=%s", exc.error_type.value, exc.message, request.url.path)
            return error_response(exc.status_code, GENERIC_ERROR_MESSAGE)
        logger.info(
            "%s (%d): %s | path=%s",
            exc.error_type.value, exc.status_code, exc.message, request.url.path,
        )
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning("HTTP %d: %s | path=%s", exc.status_code, exc.detail, request.url.path)
        if exc.status_code >= 500:
            return error_response(exc.status_code, GENERIC_ERROR_MESSAGE)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.info("%s | path=%s", message, request.url.path)
        return error_response(400, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception | path=%s | type=%s", request.url.path, type(exc).__name__)
        return error_response(500, GENERIC_ERROR_MESSAGE)
