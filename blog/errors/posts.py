"""
Post errors and the handler boundary for post operations.

Failures that are not a deliberate rejection (not found, forbidden, bad
lifecycle transition) are logged together with the request payload and the
acting user, then re-raised as ``PostOperationError`` carrying a message of
the form ``"<operation failed>: <reason>"``.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from logging import getLogger
from uuid import UUID

from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from blog.configs import file_logger
from blog.errors.auth import AuthorizationError
from blog.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))

CREATE_FAILED = "Failed to create post"
UPDATE_FAILED = "Failed to update post"
DELETE_FAILED = "Failed to delete post"
RESTORE_FAILED = "Failed to restore post"
FORCE_DELETE_FAILED = "Failed to permanently delete post"
FEATURED_FAILED = "Failed to retrieve featured posts"
LATEST_FAILED = "Failed to retrieve latest posts"
SEARCH_FAILED = "Failed to search posts"


class PostError(BaseAppError):
    """Base exception for post errors."""


class PostNotFoundError(PostError):
    """Raised when no post matches an id or slug."""

    def __init__(self, identifier: UUID | str) -> None:
        super().__init__(f"Post '{identifier}' not found", HTTP_404_NOT_FOUND)


class InvalidTransitionError(PostError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move post from {current} to {target}", HTTP_409_CONFLICT)
        self.current = current
        self.target = target


class PostOperationError(PostError):
    """Generic failure of a post operation, prefixed with the operation name."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(f"{operation}: {reason}", status_code)


PASSTHROUGH_ERRORS = (PostNotFoundError, InvalidTransitionError, AuthorizationError)


@contextmanager
def operation_boundary(
    operation: str,
    *,
    payload: Mapping[str, object] | None = None,
    user_id: UUID | None = None,
) -> Generator[None]:
    """
    Map unexpected failures of a post operation to ``PostOperationError``.

    Args:
        operation: Operation failure prefix, e.g. ``"Failed to create post"``.
        payload: Request input to log alongside the failure.
        user_id: Acting user, if any.

    Raises:
        PostOperationError: For any failure other than a deliberate rejection.
    """
    try:
        yield
    except PASSTHROUGH_ERRORS:
        raise
    except BaseAppError as e:
        logger.exception(
            f"{operation}: {e.detail}",
            extra={"request": dict(payload or {}), "user_id": str(user_id)},
        )
        raise PostOperationError(operation, e.detail, e.status_code) from e
    except Exception as e:
        logger.exception(
            f"{operation}: {e}",
            extra={"request": dict(payload or {}), "user_id": str(user_id)},
        )
        raise PostOperationError(operation, str(e)) from e


post_exception_handler = create_exception_handler(logger)
