from blog.schemas.auth import TokenData
from blog.schemas.health import CacheHealthResponse, HealthCheckResponse
from blog.schemas.post import (
    AuthorResponse,
    CommentResponse,
    PaginationMeta,
    PostCollection,
    PostCreate,
    PostResponse,
    PostUpdate,
    TagResponse,
)

__all__ = [
    "AuthorResponse",
    "CacheHealthResponse",
    "CommentResponse",
    "HealthCheckResponse",
    "PaginationMeta",
    "PostCollection",
    "PostCreate",
    "PostResponse",
    "PostUpdate",
    "TagResponse",
    "TokenData",
]
