"""Authorization for post actions."""

from blog.auth.permissions import Permission, has_any_permission, has_any_role, has_permission
from blog.auth.policy import PostAction, PostPolicy

__all__ = [
    "Permission",
    "PostAction",
    "PostPolicy",
    "has_any_permission",
    "has_any_role",
    "has_permission",
]
