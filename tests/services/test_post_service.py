# tests/services/test_post_service.py
"""Tests for PostService use cases."""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from uuid import UUID

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from blog.errors import InvalidTransitionError, PostAuthorizationError, PostNotFoundError
from blog.models import CommentDB, PostDB, PublishState, UserDB
from blog.repositories import CoverRepository, PostRepository
from blog.schemas.post import PostCreate, PostUpdate
from blog.services import PostService, SetUpload, SetUrl
from blog.services.storage import LocalStorage
from blog.utils.helpers import utcnow

PostFactory = Callable[..., Awaitable[PostDB]]


def _id(post: dict[str, object]) -> UUID:
    return UUID(str(post["id"]))


def _create(**overrides: object) -> PostCreate:
    data: dict[str, object] = {
        "title": "A Fresh Post",
        "content": " ".join(["word"] * 450),
        "publish": "published",
        "tags": ["python", "Python", "fastapi"],
    }
    data.update(overrides)
    return PostCreate.model_validate(data)


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_returns_shaped_post(self, service: PostService, author: UserDB) -> None:
        post = await service.create(author, _create(totalViews=50))

        assert post["title"] == "A Fresh Post"
        assert post["slug"] == "a-fresh-post"
        assert post["authorId"] == str(author.uuid)
        assert post["duration"] == "2 min read"
        assert post["totalViews"] == 0
        assert post["totalComments"] == 0
        assert post["comments"] == []
        assert post["coverUrl"] is None
        assert [t["name"] for t in post["tags"]] == ["python", "fastapi"]
        assert post["author"]["username"] == "author"

    @pytest.mark.asyncio
    async def test_create_with_cover_url(self, service: PostService, author: UserDB) -> None:
        post = await service.create(author, _create(), SetUrl("https://cdn.example.com/c.jpg"))

        assert post["coverUrl"] == "https://cdn.example.com/c.jpg"

    @pytest.mark.asyncio
    async def test_create_with_upload(
        self,
        service: PostService,
        storage: LocalStorage,
        author: UserDB,
        make_image: Callable[..., bytes],
    ) -> None:
        upload = SetUpload(data=make_image(), filename="cover.jpg", content_type="image/jpeg")

        post = await service.create(author, _create(), upload)

        assert post["coverUrl"].startswith("/uploads/post/cover/cover_")
        path = post["coverUrl"].removeprefix("/uploads/")
        assert await storage.exists(path)

    @pytest.mark.asyncio
    async def test_create_requires_permission(
        self,
        service: PostService,
        make_user: Callable[..., Awaitable[UserDB]],
    ) -> None:
        reader = await make_user()
        with pytest.raises(PostAuthorizationError):
            await service.create(reader, _create())

    @pytest.mark.asyncio
    async def test_failed_cover_rolls_back_post(
        self,
        service: PostService,
        session: AsyncSession,
        author: UserDB,
    ) -> None:
        bad = SetUpload(data=b"not an image", filename="x.jpg", content_type="image/jpeg")

        with pytest.raises(Exception, match="Invalid or corrupted image"):
            await service.create(author, _create(), bad)

        assert await PostRepository(session).count() == 0


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_reflects_new_values_even_when_cached(
        self,
        service: PostService,
        admin: UserDB,
        author: UserDB,
    ) -> None:
        created = await service.create(author, _create())
        post_id = _id(created)
        await service.show(admin, post_id)  # warm the cache

        updated = await service.update(
            author,
            post_id,
            PostUpdate.model_validate({"title": "Retitled", "tags": ["new"]}),
        )
        shown = await service.show(admin, post_id)

        assert updated["title"] == "Retitled"
        assert updated["slug"] == "retitled"
        assert [t["name"] for t in updated["tags"]] == ["new"]
        assert shown == updated

    @pytest.mark.asyncio
    async def test_omitting_tags_clears_them(self, service: PostService, author: UserDB) -> None:
        created = await service.create(author, _create())

        updated = await service.update(
            author,
            _id(created),
            PostUpdate.model_validate({"featured": True}),
        )

        assert updated["tags"] == []
        assert updated["featured"] is True
        assert updated["title"] == "A Fresh Post"

    @pytest.mark.asyncio
    async def test_null_title_is_ignored(self, service: PostService, author: UserDB) -> None:
        created = await service.create(author, _create())

        updated = await service.update(
            author,
            _id(created),
            PostUpdate.model_validate({"title": None, "description": None}),
        )

        assert updated["title"] == "A Fresh Post"
        assert updated["description"] is None

    @pytest.mark.asyncio
    async def test_non_owner_without_permission_is_forbidden(
        self,
        service: PostService,
        author: UserDB,
        other_author: UserDB,
    ) -> None:
        created = await service.create(author, _create())

        with pytest.raises(PostAuthorizationError):
            await service.update(
                other_author,
                _id(created),
                PostUpdate.model_validate({"title": "Hijacked"}),
            )

    @pytest.mark.asyncio
    async def test_editor_may_update_any_post(
        self,
        service: PostService,
        author: UserDB,
        editor: UserDB,
    ) -> None:
        created = await service.create(author, _create())

        updated = await service.update(
            editor,
            _id(created),
            PostUpdate.model_validate({"content": "short now"}),
        )

        assert updated["duration"] == "1 min read"
        assert updated["authorId"] == str(author.uuid)

    @pytest.mark.asyncio
    async def test_update_of_trashed_post_is_not_found(
        self,
        service: PostService,
        author: UserDB,
        make_post: PostFactory,
    ) -> None:
        post = await make_post(author, deleted_at=utcnow())

        with pytest.raises(PostNotFoundError):
            await service.update(author, post.id, PostUpdate())


class TestDeleteRestoreForce:
    @pytest.mark.asyncio
    async def test_destroy_soft_deletes_and_removes_stored_cover(
        self,
        service: PostService,
        session: AsyncSession,
        storage: LocalStorage,
        author: UserDB,
        admin: UserDB,
        make_image: Callable[..., bytes],
    ) -> None:
        upload = SetUpload(data=make_image(), filename="c.jpg", content_type="image/jpeg")
        created = await service.create(author, _create(), upload)
        path = created["coverUrl"].removeprefix("/uploads/")

        await service.destroy(author, _id(created))

        assert not await storage.exists(path)
        assert await CoverRepository(session).get_for_post(_id(created)) is None
        shown = await service.show(admin, _id(created))
        assert shown["deletedAt"] is not None
        assert (await service.list_public())["meta"]["total"] == 0

    @pytest.mark.asyncio
    async def test_restore_requires_update_permission(
        self,
        service: PostService,
        author: UserDB,
        editor: UserDB,
    ) -> None:
        created = await service.create(author, _create())
        await service.destroy(author, _id(created))

        with pytest.raises(PostAuthorizationError):
            await service.restore(author, _id(created))

        restored = await service.restore(editor, _id(created))
        assert restored["deletedAt"] is None

    @pytest.mark.asyncio
    async def test_restore_of_active_post_conflicts(
        self,
        service: PostService,
        author: UserDB,
        admin: UserDB,
    ) -> None:
        created = await service.create(author, _create())

        with pytest.raises(InvalidTransitionError):
            await service.restore(admin, _id(created))

    @pytest.mark.asyncio
    async def test_force_delete_purges_everything(
        self,
        service: PostService,
        session: AsyncSession,
        author: UserDB,
        admin: UserDB,
    ) -> None:
        created = await service.create(author, _create(), SetUrl("https://cdn.example.com/c.jpg"))
        session.add(CommentDB(commentable_id=_id(created), body="nice"))
        await session.commit()

        await service.force_delete(admin, _id(created))

        assert await PostRepository(session).get(_id(created), with_trashed=True) is None
        with pytest.raises(PostNotFoundError):
            await service.show(admin, _id(created))

    @pytest.mark.asyncio
    async def test_owner_cannot_force_delete(self, service: PostService, author: UserDB) -> None:
        created = await service.create(author, _create())

        with pytest.raises(PostAuthorizationError):
            await service.force_delete(author, _id(created))


class TestReads:
    @pytest.mark.asyncio
    async def test_admin_listing_shape_and_cache_invalidation(
        self,
        service: PostService,
        author: UserDB,
        admin: UserDB,
    ) -> None:
        await service.create(author, _create(title="First"))
        first = await service.list_admin(admin)
        assert first["meta"]["total"] == 1

        await service.create(author, _create(title="Second", publish="draft"))
        second = await service.list_admin(admin)

        assert second["meta"]["total"] == 2
        assert {p["title"] for p in second["data"]} == {"First", "Second"}
        drafts = await service.list_admin(admin, publish=PublishState.DRAFT)
        assert [p["title"] for p in drafts["data"]] == ["Second"]

    @pytest.mark.asyncio
    async def test_admin_listing_requires_view(
        self,
        service: PostService,
        make_user: Callable[..., Awaitable[UserDB]],
    ) -> None:
        nobody = await make_user()
        with pytest.raises(PostAuthorizationError):
            await service.list_admin(nobody)

    @pytest.mark.asyncio
    async def test_pagination_meta(
        self,
        service: PostService,
        author: UserDB,
        make_post: PostFactory,
    ) -> None:
        now = utcnow()
        for i in range(12):
            await make_post(author, title=f"Post {i}", created_at=now - timedelta(minutes=i))

        page = await service.list_public(2)

        assert page["meta"] == {
            "currentPage": 2,
            "perPage": 10,
            "total": 12,
            "lastPage": 2,
            "from": 11,
            "to": 12,
        }
        assert [p["title"] for p in page["data"]] == ["Post 10", "Post 11"]

    @pytest.mark.asyncio
    async def test_show_by_slug_only_published(
        self,
        service: PostService,
        author: UserDB,
        make_post: PostFactory,
    ) -> None:
        live = await make_post(author, title="Live One")
        draft = await make_post(author, title="Draft One", publish=PublishState.DRAFT)

        assert (await service.show_by_slug(live.slug))["id"] == str(live.id)
        with pytest.raises(PostNotFoundError):
            await service.show_by_slug(draft.slug)

    @pytest.mark.asyncio
    async def test_featured_omits_content(
        self,
        service: PostService,
        author: UserDB,
        make_post: PostFactory,
    ) -> None:
        await make_post(author, featured=True)

        featured = await service.featured()

        assert len(featured) == 1
        assert featured[0]["content"] is None

    @pytest.mark.asyncio
    async def test_featured_and_latest_refresh_after_write(
        self,
        service: PostService,
        author: UserDB,
    ) -> None:
        assert await service.latest() == []

        await service.create(author, _create(featured=True))

        assert len(await service.latest()) == 1
        assert len(await service.featured()) == 1

    @pytest.mark.asyncio
    async def test_search(
        self,
        service: PostService,
        author: UserDB,
        make_post: PostFactory,
    ) -> None:
        await make_post(author, title="Async Python Tricks")
        await make_post(author, title="Gardening")

        assert [p["title"] for p in await service.search("python")] == ["Async Python Tricks"]
        assert await service.search("   ") == []

    @pytest.mark.asyncio
    async def test_list_tags(self, service: PostService, author: UserDB) -> None:
        await service.create(author, _create(tags=["b", "a"]))

        tags = await service.list_tags()

        assert [t["name"] for t in tags] == ["b", "a"]
        assert set(tags[0]) == {"id", "name", "slug"}
