# tests/routes/test_posts.py
"""Tests for the public post endpoints."""

from collections.abc import Awaitable, Callable
from datetime import timedelta

import pytest
from httpx import AsyncClient

from blog.configs import settings
from blog.models import PostDB, PublishState, UserDB
from blog.utils.helpers import utcnow

PostFactory = Callable[..., Awaitable[PostDB]]


@pytest.mark.asyncio
async def test_list_shows_only_published_posts(
    client: AsyncClient,
    author: UserDB,
    make_post: PostFactory,
) -> None:
    await make_post(author, title="Out There")
    await make_post(author, title="Not Yet", publish=PublishState.DRAFT)
    await make_post(author, title="Binned", deleted_at=utcnow())

    response = await client.get("/v1/posts")

    assert response.status_code == 200
    posts = response.json()["posts"]
    assert [p["title"] for p in posts["data"]] == ["Out There"]
    assert posts["meta"]["total"] == 1
    assert posts["meta"]["currentPage"] == 1


@pytest.mark.asyncio
async def test_list_page_must_be_positive(client: AsyncClient) -> None:
    response = await client.get("/v1/posts", params={"page": 0})

    assert response.status_code == 422
    assert response.json()["message"] == "Validation failed"


@pytest.mark.asyncio
async def test_list_page_is_capped(client: AsyncClient) -> None:
    too_far = await client.get("/v1/posts", params={"page": settings.MAX_PAGE + 1})
    last = await client.get("/v1/posts", params={"page": settings.MAX_PAGE})

    assert too_far.status_code == 422
    assert too_far.json()["success"] is False
    assert last.status_code == 200
    assert last.json()["posts"]["data"] == []


@pytest.mark.asyncio
async def test_get_by_slug(client: AsyncClient, author: UserDB, make_post: PostFactory) -> None:
    post = await make_post(author, title="Island Notes")

    response = await client.get(f"/v1/posts/{post.slug}")

    assert response.status_code == 200
    body = response.json()["post"]
    assert body["slug"] == "island-notes"
    assert body["author"]["username"] == "author"
    assert body["duration"] == "3 min read"


@pytest.mark.asyncio
async def test_unknown_or_draft_slug_is_404(
    client: AsyncClient,
    author: UserDB,
    make_post: PostFactory,
) -> None:
    draft = await make_post(author, title="Hidden", publish=PublishState.DRAFT)

    missing = await client.get("/v1/posts/nope")
    hidden = await client.get(f"/v1/posts/{draft.slug}")

    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Post 'nope' not found"}
    assert hidden.status_code == 404


@pytest.mark.asyncio
async def test_featureds(client: AsyncClient, author: UserDB, make_post: PostFactory) -> None:
    await make_post(author, title="Star", featured=True)
    await make_post(author, title="Plain")

    response = await client.get("/v1/posts/featureds")

    assert response.status_code == 200
    featureds = response.json()["featureds"]
    assert [p["title"] for p in featureds] == ["Star"]
    assert featureds[0]["content"] is None


@pytest.mark.asyncio
async def test_latest_is_capped_at_five(
    client: AsyncClient,
    author: UserDB,
    make_post: PostFactory,
) -> None:
    now = utcnow()
    for i in range(6):
        await make_post(author, title=f"Post {i}", created_at=now - timedelta(minutes=i))

    response = await client.get("/v1/posts/latest")

    assert response.status_code == 200
    assert [p["title"] for p in response.json()["latest"]] == [f"Post {i}" for i in range(5)]


@pytest.mark.asyncio
async def test_search(client: AsyncClient, author: UserDB, make_post: PostFactory) -> None:
    await make_post(author, title="Surfing in Bali")
    await make_post(author, title="Cooking at home")

    found = await client.get("/v1/posts/search", params={"query": "BALI"})
    empty = await client.get("/v1/posts/search")

    assert [p["title"] for p in found.json()["results"]] == ["Surfing in Bali"]
    assert empty.json() == {"results": []}
