from collections.abc import Awaitable, Callable
from logging import Logger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from blog.utils.helpers import host

BASE_EXCEPTION = (
    OSError,
    PermissionError,
    MemoryError,
    RuntimeError,
    ConnectionError,
    TimeoutError,
)


class BaseAppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail


def error_envelope(message: str, **extra: object) -> dict[str, object]:
    """Uniform error body: ``{"success": false, "message": ...}``."""
    return {"success": False, "message": message, **extra}


def create_exception_handler(
    logger: Logger,
) -> Callable[[Request, Exception], Awaitable[ORJSONResponse]]:
    """
    Create a standardized exception handler for the application.

    Args:
        logger: Logger instance to use for logging exceptions.

    Returns:
        A callable exception handler.
    """

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
        detail = getattr(exc, "detail", "Internal Server Error")

        logger.warning(f"{detail} for ip: {host(request)} for endpoint {request.url.path}")

        # Any extra public attributes set by the exception ride along
        extra = {
            k: v
            for k, v in exc.__dict__.items()
            if k not in ("status_code", "detail") and not k.startswith("_")
        }

        return ORJSONResponse(content=error_envelope(detail, **extra), status_code=status_code)

    return handler


async def http_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Render framework ``HTTPException``s (401, 404 on unknown routes, ...) in the error envelope."""
    http_exc = cast(StarletteHTTPException, exc)
    return ORJSONResponse(
        content=error_envelope(str(http_exc.detail)),
        status_code=http_exc.status_code,
        headers=http_exc.headers,
    )
