"""Custom validation error handling for FastAPI."""

from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from blog.configs import file_logger
from blog.errors.base import error_envelope
from blog.utils.helpers import host

logger = file_logger(getLogger(__name__))


def format_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    """Flatten pydantic error dicts into ``field``/``message``/``type`` entries."""
    formatted_errors: list[dict[str, object]] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        # Skip the leading 'body' / 'query' segment
        field_path = loc[1:] if len(loc) > 1 and loc[0] in ("body", "query", "path") else loc
        formatted_error: dict[str, object] = {
            "field": ".".join(str(part) for part in field_path),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        }
        if "ctx" in error:
            formatted_error["context"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in error["ctx"].items()
            }
        formatted_errors.append(formatted_error)
    return formatted_errors


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle Pydantic validation errors with cleaner response format.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with formatted validation errors.
    """
    formatted_errors = format_errors(cast(RequestValidationError, exc))

    logger.warning(
        f"Validation error for ip: {host(request)} at endpoint {request.url.path}: {formatted_errors}",
    )

    return ORJSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_envelope("Validation failed", errors=formatted_errors),
    )
