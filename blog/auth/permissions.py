"""Permission strings and role checks for posts."""

from collections.abc import Iterable
from enum import StrEnum

from blog.models import UserDB


class Permission(StrEnum):
    """Granular post permissions; ``ALL`` grants every post action."""

    ALL = "blog.posts.*"
    VIEW = "blog.posts.view"
    CREATE = "blog.posts.create"
    EDIT = "blog.posts.edit"
    DELETE = "blog.posts.delete"
    UPDATE = "blog.posts.update"


def has_permission(user: UserDB, permission: Permission) -> bool:
    """Whether ``user`` was granted ``permission`` explicitly."""
    return permission.value in (user.permissions or [])


def has_any_permission(user: UserDB, *permissions: Permission) -> bool:
    return any(has_permission(user, p) for p in permissions)


def has_any_role(user: UserDB, roles: Iterable[str]) -> bool:
    """
    Check role membership.

    Args:
        user: Acting user
        roles: Accepted role names

    Returns:
        bool: True if the user holds at least one of ``roles``
    """
    return not set(user.roles or []).isdisjoint(roles)


def is_owner(user: UserDB, author_id: object) -> bool:
    return user.uuid == author_id
