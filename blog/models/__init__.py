from blog.models.comment import POST_COMMENTABLE, CommentDB
from blog.models.lifecycle import PostState, purge, restore, soft_delete, state_of
from blog.models.post import CoverImageDB, PostDB
from blog.models.tag import PostTagLink, TagDB
from blog.models.types import PublishState
from blog.models.user import UserDB

__all__ = [
    "POST_COMMENTABLE",
    "CommentDB",
    "CoverImageDB",
    "PostDB",
    "PostState",
    "PostTagLink",
    "PublishState",
    "TagDB",
    "UserDB",
    "purge",
    "restore",
    "soft_delete",
    "state_of",
]
