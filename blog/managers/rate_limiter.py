"""Rate limiter configuration using slowapi."""

from collections.abc import Callable
from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from blog.configs import LimiterConfig, file_logger
from blog.errors.base import error_envelope
from blog.utils.helpers import host

logger = file_logger(getLogger(__name__))

PUBLIC_READ_LIMIT = "60/minute"
DASHBOARD_READ_LIMIT = "120/minute"
DASHBOARD_WRITE_LIMIT = "30/minute"


def get_identifier(request: Request) -> str:
    """
    Get unique identifier for rate limiting.

    Uses API key from header if available, otherwise falls back to IP address.

    Args:
        request: FastAPI request object.

    Returns:
        Unique identifier string.
    """
    if api_key := request.headers.get("X-API-Key"):
        return f"apikey:{api_key}"
    return f"ip:{get_remote_address(request)}"


def tiered(limit: str) -> Callable[[str], str]:
    """Double ``limit`` for callers identified by API key."""
    count, _, period = limit.partition("/")

    def resolve(key: str) -> str:
        return f"{int(count) * 2}/{period}" if key.startswith("apikey:") else limit

    return resolve


limiter = Limiter(key_func=get_identifier, **LimiterConfig().model_dump())


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle rate limit exceeded exceptions.

    Args:
        request: FastAPI request object.
        exc: RateLimitExceeded exception.

    Returns:
        JSON response with error details.
    """
    http_exc = cast(RateLimitExceeded, exc)
    response = _rate_limit_exceeded_handler(request, http_exc)
    logger.warning(f"Rate limit exceeded for ip: {host(request)} on {request.url.path}")
    return ORJSONResponse(
        status_code=HTTP_429_TOO_MANY_REQUESTS,
        content=error_envelope(
            "Rate limit exceeded",
            allowed_requests=http_exc.detail,
            retry_after=response.headers.get("retry-after"),
        ),
    )
