"""
Post lifecycle.

A post is ``ACTIVE`` until it is soft-deleted, after which it can be restored
or purged. Purging is terminal: the row and its dependents are removed by the
repository once ``purge`` has accepted the transition.

::

    ACTIVE --soft_delete--> SOFT_DELETED --restore--> ACTIVE
      |                          |
      +---------purge------------+--------> PURGED
"""

from datetime import datetime
from enum import StrEnum

from blog.errors.posts import InvalidTransitionError
from blog.models.post import PostDB
from blog.utils.helpers import utcnow


class PostState(StrEnum):
    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"
    PURGED = "purged"


ALLOWED_TRANSITIONS: dict[PostState, frozenset[PostState]] = {
    PostState.ACTIVE: frozenset({PostState.SOFT_DELETED, PostState.PURGED}),
    PostState.SOFT_DELETED: frozenset({PostState.ACTIVE, PostState.PURGED}),
    PostState.PURGED: frozenset(),
}


def state_of(post: PostDB) -> PostState:
    """Derive the lifecycle state from the soft-delete marker."""
    return PostState.SOFT_DELETED if post.deleted_at is not None else PostState.ACTIVE


def _check(current: PostState, target: PostState) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)


def soft_delete(post: PostDB, at: datetime | None = None) -> PostState:
    """Hide an active post from default queries."""
    _check(state_of(post), PostState.SOFT_DELETED)
    post.deleted_at = at or utcnow()
    return PostState.SOFT_DELETED


def restore(post: PostDB) -> PostState:
    """Bring a soft-deleted post back."""
    _check(state_of(post), PostState.ACTIVE)
    post.deleted_at = None
    return PostState.ACTIVE


def purge(post: PostDB) -> PostState:
    """Accept permanent removal of a post in any non-terminal state."""
    _check(state_of(post), PostState.PURGED)
    return PostState.PURGED
