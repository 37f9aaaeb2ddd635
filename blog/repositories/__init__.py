from blog.repositories.base import BaseRepository
from blog.repositories.cover import CoverRepository
from blog.repositories.post import AdminSort, PostRepository, Trashed
from blog.repositories.tag import TagRepository
from blog.repositories.user import UserRepository

__all__ = [
    "AdminSort",
    "BaseRepository",
    "CoverRepository",
    "PostRepository",
    "TagRepository",
    "Trashed",
    "UserRepository",
]
