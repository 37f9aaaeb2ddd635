"""
Post authorization policy.

Each ability answers whether a user may perform an action, optionally on a
given post. ``authorize`` turns a denial into ``PostAuthorizationError``.
"""

from collections.abc import Callable
from enum import StrEnum

from blog.auth.permissions import Permission, has_any_permission, has_any_role, is_owner
from blog.configs import settings
from blog.errors.auth import PostAuthorizationError
from blog.models import PostDB, UserDB


class PostAction(StrEnum):
    VIEW_ANY = "view any"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "permanently delete"


class PostPolicy:
    """
    Ability checks for posts.

    Update and delete are granted to the author regardless of permissions.
    Force delete is stricter than delete: ownership never suffices, the user
    needs the wildcard permission and a privileged role.
    """

    def __init__(self, privileged_roles: list[str] | None = None) -> None:
        self.privileged_roles = frozenset(
            privileged_roles if privileged_roles is not None else settings.PRIVILEGED_ROLES,
        )
        self._abilities: dict[PostAction, Callable[[UserDB, PostDB | None], bool]] = {
            PostAction.VIEW_ANY: lambda user, _: self.view_any(user),
            PostAction.VIEW: self.view,
            PostAction.CREATE: lambda user, _: self.create(user),
            PostAction.UPDATE: self.update,
            PostAction.DELETE: self.delete,
            PostAction.RESTORE: self.restore,
            PostAction.FORCE_DELETE: self.force_delete,
        }

    def view_any(self, user: UserDB) -> bool:
        return has_any_permission(user, Permission.ALL, Permission.VIEW)

    def view(self, user: UserDB, post: PostDB | None = None) -> bool:
        return has_any_permission(user, Permission.ALL, Permission.VIEW)

    def create(self, user: UserDB) -> bool:
        return has_any_permission(user, Permission.ALL, Permission.CREATE)

    def update(self, user: UserDB, post: PostDB | None = None) -> bool:
        if has_any_permission(user, Permission.ALL, Permission.EDIT):
            return True
        return post is not None and is_owner(user, post.author_id)

    def delete(self, user: UserDB, post: PostDB | None = None) -> bool:
        if has_any_permission(user, Permission.ALL, Permission.DELETE):
            return True
        return post is not None and is_owner(user, post.author_id)

    def restore(self, user: UserDB, post: PostDB | None = None) -> bool:
        return has_any_permission(user, Permission.ALL, Permission.UPDATE)

    def force_delete(self, user: UserDB, post: PostDB | None = None) -> bool:
        return has_any_permission(user, Permission.ALL) and has_any_role(
            user,
            self.privileged_roles,
        )

    def allows(self, action: PostAction, user: UserDB, post: PostDB | None = None) -> bool:
        return self._abilities[action](user, post)

    def authorize(self, action: PostAction, user: UserDB, post: PostDB | None = None) -> None:
        """
        Raise unless ``user`` may perform ``action``.

        Raises:
            PostAuthorizationError: If the ability check fails
        """
        if not self.allows(action, user, post):
            raise PostAuthorizationError(action.value)
