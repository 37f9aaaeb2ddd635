"""Authorization errors."""

from logging import getLogger

from starlette.status import HTTP_403_FORBIDDEN

from blog.configs import file_logger
from blog.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class AuthorizationError(BaseAppError):
    """Raised when the acting user may not perform an action."""

    def __init__(
        self,
        detail: str = "This action is unauthorized.",
        status_code: int = HTTP_403_FORBIDDEN,
    ) -> None:
        super().__init__(detail, status_code)


class PostAuthorizationError(AuthorizationError):
    """Raised by the post policy when an ability check fails."""

    def __init__(self, action: str) -> None:
        super().__init__(f"You are not allowed to {action} this post.")
        self.action = action


auth_exception_handler = create_exception_handler(logger)
