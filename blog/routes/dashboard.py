# blog/routes/dashboard.py

"""
Dashboard Post Routes.

Authenticated CRUD over posts in every publish state, including soft-deleted
ones, plus restore, permanent deletion and the tag list.

Summary
-------
Endpoints include:
  - List posts (publish filter, sort, trashed)
  - Create post (JSON or multipart with a cover file)
  - Get post by id
  - Update post
  - Soft-delete post
  - Restore post
  - Permanently delete post
  - List tags

Errors
------
Write handlers log failures with the request payload and the acting user and
answer ``{"success": false, "message": "<operation failed>: <reason>"}``.
Not found, forbidden and invalid lifecycle transitions keep their own status.
"""

from logging import getLogger
from uuid import UUID

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED

from blog.configs import file_logger
from blog.dependencies import (
    AdminListQueryDep,
    PostCreatePayloadDep,
    PostServiceDep,
    PostUpdatePayloadDep,
    UserDBDep,
)
from blog.errors.posts import (
    CREATE_FAILED,
    DELETE_FAILED,
    FORCE_DELETE_FAILED,
    RESTORE_FAILED,
    UPDATE_FAILED,
    operation_boundary,
)
from blog.managers import limiter, tiered
from blog.managers.rate_limiter import DASHBOARD_READ_LIMIT, DASHBOARD_WRITE_LIMIT

router = APIRouter(prefix="/v1/dashboard", tags=["🛠️ Dashboard"])

logger = file_logger(getLogger(__name__))


def _error(description: str, message: str) -> dict[str, object]:
    return {
        "description": description,
        "content": {"application/json": {"example": {"success": False, "message": message}}},
    }


UNAUTHORIZED = _error("Unauthorized", "Could not validate credentials")
FORBIDDEN = _error("Forbidden", "You are not allowed to update this post.")
NOT_FOUND = _error("Not found", "Post '<uuid>' not found")
RATE_LIMITED = _error("Rate limit exceeded", "Rate limit exceeded")
POST_EXAMPLE = {
    "post": {
        "id": "123e4567-e89b-12d3-a456-426614174000",
        "title": "Ten Tips for Writing Better Posts",
        "slug": "ten-tips-for-writing-better-posts",
        "publish": "draft",
        "featured": False,
        "authorId": "123e4567-e89b-12d3-a456-426614174111",
        "duration": "3 min read",
        "totalViews": 0,
        "coverUrl": "/uploads/post/cover/tips_4f1c.jpg",
        "tags": [{"id": "123e4567-e89b-12d3-a456-426614174222", "name": "writing"}],
    },
}


@router.get(
    "/posts",
    response_class=ORJSONResponse,
    summary="List posts (dashboard)",
    description=(
        "Paginated list over every publish state. Filter with `filter[publish]`, "
        "sort with `sort=created_at|-created_at`, include soft-deleted posts with "
        "`trashed=with|only`."
    ),
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 429: RATE_LIMITED},
    operation_id="dashboard_posts_list",
)
@limiter.limit(tiered(DASHBOARD_READ_LIMIT))
async def list_posts(
    request: Request,
    response: Response,
    user: UserDBDep,
    query: AdminListQueryDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """
    List posts for the dashboard.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    user : UserDB
        Authenticated user.
    query : AdminListQuery
        Page, publish filter, sort and trashed options.
    service : PostService
        Post service dependency.

    Returns
    -------
    ORJSONResponse
        ``{"posts": {"data": [...], "meta": {...}}}``
    """
    posts = await service.list_admin(
        user,
        page=query.page,
        publish=query.publish,
        sort=query.sort,
        trashed=query.trashed,
    )
    return ORJSONResponse(content={"posts": posts})


@router.post(
    "/posts",
    response_class=ORJSONResponse,
    status_code=HTTP_201_CREATED,
    summary="Create a post",
    description=(
        "Create a post from a JSON or multipart body. `coverUrl` is either an "
        "image URL or an uploaded image file."
    ),
    responses={
        201: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        413: _error("Image too large", f"{CREATE_FAILED}: Your image is too large."),
        415: _error("Unsupported image", f"{CREATE_FAILED}: This image format isn't supported."),
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_create",
)
@limiter.limit(tiered(DASHBOARD_WRITE_LIMIT))
async def create_post(
    request: Request,
    response: Response,
    user: UserDBDep,
    payload: PostCreatePayloadDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """
    Create a post authored by the current user.

    Parameters
    ----------
    payload : PostPayload[PostCreate]
        Validated body and the cover decision.

    Returns
    -------
    ORJSONResponse
        ``{"post": {...}}`` with status 201.
    """
    with operation_boundary(CREATE_FAILED, payload=payload.log_payload, user_id=user.uuid):
        post = await service.create(user, payload.data, payload.cover)
    return ORJSONResponse(content={"post": post}, status_code=HTTP_201_CREATED)


@router.get(
    "/posts/{post_id}",
    response_class=ORJSONResponse,
    summary="Get post by id (dashboard)",
    description="Retrieve a post by id; soft-deleted posts resolve too.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_get",
)
@limiter.limit(tiered(DASHBOARD_READ_LIMIT))
async def get_post(
    request: Request,
    response: Response,
    post_id: UUID,
    user: UserDBDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Return ``{"post": {...}}``."""
    return ORJSONResponse(content={"post": await service.show(user, post_id)})


@router.put(
    "/posts/{post_id}",
    response_class=ORJSONResponse,
    summary="Update a post",
    description=(
        "Update the fields present in the body. The `tags` list replaces the "
        "post's tags; omitting it clears them. `coverUrl` may be a URL or a file."
    ),
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_update",
)
@limiter.limit(tiered(DASHBOARD_WRITE_LIMIT))
async def update_post(
    request: Request,
    response: Response,
    post_id: UUID,
    user: UserDBDep,
    payload: PostUpdatePayloadDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """
    Update a post.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    payload : PostPayload[PostUpdate]
        Validated body and the cover decision.

    Returns
    -------
    ORJSONResponse
        ``{"post": {...}}`` freshly read after the write.
    """
    with operation_boundary(UPDATE_FAILED, payload=payload.log_payload, user_id=user.uuid):
        post = await service.update(user, post_id, payload.data, payload.cover)
    return ORJSONResponse(content={"post": post})


@router.delete(
    "/posts/{post_id}",
    response_class=ORJSONResponse,
    summary="Delete a post",
    description="Soft-delete a post. Its stored cover file is removed.",
    responses={
        200: {
            "content": {
                "application/json": {"example": {"message": "Post deleted successfully."}},
            },
        },
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_delete",
)
@limiter.limit(tiered(DASHBOARD_WRITE_LIMIT))
async def delete_post(
    request: Request,
    response: Response,
    post_id: UUID,
    user: UserDBDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Soft-delete a post."""
    with operation_boundary(DELETE_FAILED, payload={"post_id": str(post_id)}, user_id=user.uuid):
        await service.destroy(user, post_id)
    return ORJSONResponse(content={"message": "Post deleted successfully."})


@router.patch(
    "/posts/{post_id}/restore",
    response_class=ORJSONResponse,
    summary="Restore a post",
    description="Bring a soft-deleted post back. Restoring an active post is a 409.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        409: _error("Conflict", "Cannot move post from active to active"),
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_restore",
)
@limiter.limit(tiered(DASHBOARD_WRITE_LIMIT))
async def restore_post(
    request: Request,
    response: Response,
    post_id: UUID,
    user: UserDBDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Restore a soft-deleted post and return it."""
    with operation_boundary(RESTORE_FAILED, payload={"post_id": str(post_id)}, user_id=user.uuid):
        post = await service.restore(user, post_id)
    return ORJSONResponse(content={"post": post})


@router.delete(
    "/posts/{post_id}/force",
    response_class=ORJSONResponse,
    summary="Permanently delete a post",
    description=(
        "Remove a post, its cover, tag links and comments for good. Requires the "
        "wildcard post permission and a privileged role."
    ),
    responses={
        200: {
            "content": {
                "application/json": {"example": {"message": "Post permanently deleted."}},
            },
        },
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="dashboard_posts_force_delete",
)
@limiter.limit(tiered(DASHBOARD_WRITE_LIMIT))
async def force_delete_post(
    request: Request,
    response: Response,
    post_id: UUID,
    user: UserDBDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Permanently delete a post."""
    with operation_boundary(
        FORCE_DELETE_FAILED,
        payload={"post_id": str(post_id)},
        user_id=user.uuid,
    ):
        await service.force_delete(user, post_id)
    return ORJSONResponse(content={"message": "Post permanently deleted."})


@router.get(
    "/tag",
    response_class=ORJSONResponse,
    summary="List tags",
    description="Every tag, in display order.",
    responses={401: UNAUTHORIZED, 429: RATE_LIMITED},
    operation_id="dashboard_tags_list",
)
@limiter.limit(tiered(DASHBOARD_READ_LIMIT))
async def list_tags(
    request: Request,
    response: Response,
    user: UserDBDep,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Return ``{"tags": [...]}``."""
    return ORJSONResponse(content={"tags": await service.list_tags()})
