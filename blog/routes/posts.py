# blog/routes/posts.py

"""
Public Post Routes.

Read-only endpoints for published posts: paginated listing, featured and
latest surfacing, title search and single post by slug.

Summary
-------
Endpoints include:
  - List published posts
  - Featured posts
  - Latest posts
  - Search posts by title
  - Get post by slug

Rate Limiting
-------------
All endpoints define explicit limits and include `429` response examples. Tiered
limits apply when `X-API-Key` is present.
"""

from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response

from blog.configs import file_logger
from blog.dependencies import PageDep, PostServiceDep
from blog.errors.posts import FEATURED_FAILED, LATEST_FAILED, SEARCH_FAILED, operation_boundary
from blog.managers import limiter, tiered
from blog.managers.rate_limiter import PUBLIC_READ_LIMIT

router = APIRouter(prefix="/v1/posts", tags=["📰 Posts"])

logger = file_logger(getLogger(__name__))

RATE_LIMITED = {
    "description": "Rate limit exceeded",
    "content": {
        "application/json": {"example": {"success": False, "message": "Rate limit exceeded"}},
    },
}
NOT_FOUND = {
    "description": "Not found",
    "content": {
        "application/json": {"example": {"success": False, "message": "Post 'slug' not found"}},
    },
}


@router.get(
    "",
    response_class=ORJSONResponse,
    summary="List published posts",
    description="Paginated list of published posts, newest first.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "posts": {
                            "data": [{"id": "123e4567-e89b-12d3-a456-426614174000"}],
                            "meta": {"currentPage": 1, "perPage": 10, "total": 1},
                        },
                    },
                },
            },
        },
        429: RATE_LIMITED,
    },
    operation_id="posts_list",
)
@limiter.limit(tiered(PUBLIC_READ_LIMIT))
async def list_posts(
    request: Request,
    response: Response,
    service: PostServiceDep,
    page: PageDep = 1,
) -> ORJSONResponse:
    """
    List published posts.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    service : PostService
        Post service dependency.
    page : int
        1-based page number.

    Returns
    -------
    ORJSONResponse
        ``{"posts": {"data": [...], "meta": {...}}}``
    """
    return ORJSONResponse(content={"posts": await service.list_public(page)})


@router.get(
    "/featureds",
    response_class=ORJSONResponse,
    summary="Featured posts",
    description="Up to five featured published posts, newest first.",
    responses={429: RATE_LIMITED},
    operation_id="posts_featured",
)
@limiter.limit(tiered(PUBLIC_READ_LIMIT))
async def featured_posts(
    request: Request,
    response: Response,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Return ``{"featureds": [...]}``."""
    with operation_boundary(FEATURED_FAILED):
        featureds = await service.featured()
    return ORJSONResponse(content={"featureds": featureds})


@router.get(
    "/latest",
    response_class=ORJSONResponse,
    summary="Latest posts",
    description="Up to five most recently created published posts.",
    responses={429: RATE_LIMITED},
    operation_id="posts_latest",
)
@limiter.limit(tiered(PUBLIC_READ_LIMIT))
async def latest_posts(
    request: Request,
    response: Response,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Return ``{"latest": [...]}``."""
    with operation_boundary(LATEST_FAILED):
        latest = await service.latest()
    return ORJSONResponse(content={"latest": latest})


@router.get(
    "/search",
    response_class=ORJSONResponse,
    summary="Search posts",
    description="Case-insensitive partial match on the title of published posts.",
    responses={429: RATE_LIMITED},
    operation_id="posts_search",
)
@limiter.limit(tiered(PUBLIC_READ_LIMIT))
async def search_posts(
    request: Request,
    response: Response,
    service: PostServiceDep,
    query: Annotated[str, Query(max_length=255, description="Title search term")] = "",
) -> ORJSONResponse:
    """
    Search published posts by title.

    Parameters
    ----------
    query : str
        Search term; an empty term returns no results.

    Returns
    -------
    ORJSONResponse
        ``{"results": [...]}``
    """
    with operation_boundary(SEARCH_FAILED, payload={"query": query}):
        results = await service.search(query)
    return ORJSONResponse(content={"results": results})


@router.get(
    "/{slug}",
    response_class=ORJSONResponse,
    summary="Get post by slug",
    description="Retrieve a published post by its slug.",
    responses={404: NOT_FOUND, 429: RATE_LIMITED},
    operation_id="posts_get_by_slug",
)
@limiter.limit(tiered(PUBLIC_READ_LIMIT))
async def get_post(
    request: Request,
    response: Response,
    slug: str,
    service: PostServiceDep,
) -> ORJSONResponse:
    """Return ``{"post": {...}}`` for a published post, 404 otherwise."""
    return ORJSONResponse(content={"post": await service.show_by_slug(slug)})
