# blog/dependencies/__init__.py

from blog.dependencies.dependencies import (
    AdminListQuery,
    AdminListQueryDep,
    CacheDep,
    PageDep,
    PostCreatePayloadDep,
    PostPayload,
    PostServiceDep,
    PostUpdatePayloadDep,
    SessionDep,
    StorageDep,
    UserDBDep,
    get_cache_manager,
    get_current_user,
    get_post_service,
    get_storage,
)

__all__ = [
    "AdminListQuery",
    "AdminListQueryDep",
    "CacheDep",
    "PageDep",
    "PostCreatePayloadDep",
    "PostPayload",
    "PostServiceDep",
    "PostUpdatePayloadDep",
    "SessionDep",
    "StorageDep",
    "UserDBDep",
    "get_cache_manager",
    "get_current_user",
    "get_post_service",
    "get_storage",
]
