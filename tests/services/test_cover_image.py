# tests/services/test_cover_image.py
"""Tests for cover image reconciliation."""

from collections.abc import Awaitable, Callable
from io import BytesIO
from unittest.mock import AsyncMock, patch

import pytest
from PIL import Image
from sqlmodel.ext.asyncio.session import AsyncSession

from blog.errors import (
    ImageTooLargeError,
    InvalidCoverUrlError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
)
from blog.models import CoverImageDB, PostDB, UserDB
from blog.repositories import CoverRepository
from blog.services import CoverImageService, NoChange, SetUpload, SetUrl
from blog.services.storage import LocalStorage

PostFactory = Callable[..., Awaitable[PostDB]]


@pytest.fixture
def covers(session: AsyncSession, storage: LocalStorage) -> CoverImageService:
    return CoverImageService(storage, CoverRepository(session))


@pytest.fixture
async def post(author: UserDB, make_post: PostFactory) -> PostDB:
    return await make_post(author)


def _upload(
    data: bytes,
    content_type: str = "image/jpeg",
    filename: str = "My Photo.jpg",
) -> SetUpload:
    return SetUpload(data=data, filename=filename, content_type=content_type)


@pytest.mark.asyncio
async def test_no_change_keeps_current(covers: CoverImageService, post: PostDB) -> None:
    assert await covers.reconcile(post.id, NoChange()) is None

    await covers.reconcile(post.id, SetUrl("https://cdn.example.com/a.jpg"))
    kept = await covers.reconcile(post.id, NoChange())

    assert kept is not None
    assert kept.path == "https://cdn.example.com/a.jpg"


@pytest.mark.asyncio
async def test_set_url_creates_then_updates_single_record(
    covers: CoverImageService,
    post: PostDB,
) -> None:
    first = await covers.reconcile(post.id, SetUrl("https://cdn.example.com/a.jpg"))
    second = await covers.reconcile(post.id, SetUrl("https://cdn.example.com/b.jpg"))

    assert first is not None and second is not None
    assert second.id == first.id
    assert second.path == "https://cdn.example.com/b.jpg"
    assert await covers.covers.count() == 1


@pytest.mark.asyncio
async def test_same_url_is_a_no_op(covers: CoverImageService, post: PostDB) -> None:
    cover = await covers.reconcile(post.id, SetUrl("https://cdn.example.com/a.jpg"))

    with patch.object(covers.covers, "upsert", new_callable=AsyncMock) as upsert:
        again = await covers.reconcile(post.id, SetUrl("https://cdn.example.com/a.jpg"))

    upsert.assert_not_awaited()
    assert again is cover


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["../escape.jpg", "post/cover/pic_0a1b.jpg", "/etc/passwd"])
async def test_non_http_url_is_rejected(covers: CoverImageService, post: PostDB, url: str) -> None:
    with pytest.raises(InvalidCoverUrlError) as exc_info:
        await covers.reconcile(post.id, SetUrl(url))

    assert exc_info.value.status_code == 422
    assert await covers.covers.get_for_post(post.id) is None


@pytest.mark.asyncio
async def test_upload_stores_resized_file(
    covers: CoverImageService,
    storage: LocalStorage,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    cover = await covers.reconcile(post.id, _upload(make_image((1200, 900))))

    assert cover is not None
    assert cover.path.startswith("post/cover/my-photo_")
    assert cover.path.endswith(".jpg")
    stored = (storage.root / cover.path).read_bytes()
    with Image.open(BytesIO(stored)) as img:
        assert img.height == 300
        assert img.width == 400
    assert covers.url_for(cover) == f"/uploads/{cover.path}"


@pytest.mark.asyncio
async def test_small_upload_is_not_upscaled(
    covers: CoverImageService,
    storage: LocalStorage,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    cover = await covers.reconcile(post.id, _upload(make_image((120, 80), "PNG"), "image/png"))

    assert cover is not None
    assert cover.path.endswith(".png")
    with Image.open(BytesIO((storage.root / cover.path).read_bytes())) as img:
        assert img.size == (120, 80)


@pytest.mark.asyncio
async def test_replacing_upload_deletes_previous_file(
    covers: CoverImageService,
    storage: LocalStorage,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    first = await covers.reconcile(post.id, _upload(make_image()))
    assert first is not None
    old_path = first.path

    second = await covers.reconcile(post.id, _upload(make_image(), filename="other.jpg"))

    assert second is not None
    assert second.path != old_path
    assert not await storage.exists(old_path)
    assert await storage.exists(second.path)


@pytest.mark.asyncio
async def test_switching_to_url_deletes_stored_file(
    covers: CoverImageService,
    storage: LocalStorage,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    uploaded = await covers.reconcile(post.id, _upload(make_image()))
    assert uploaded is not None
    old_path = uploaded.path

    cover = await covers.reconcile(post.id, SetUrl("https://cdn.example.com/x.png"))

    assert cover is not None
    assert cover.path == "https://cdn.example.com/x.png"
    assert not await storage.exists(old_path)


@pytest.mark.asyncio
async def test_rejects_unsupported_type(covers: CoverImageService, post: PostDB) -> None:
    with pytest.raises(UnsupportedImageTypeError):
        await covers.reconcile(post.id, _upload(b"GIF89a", "image/gif"))


@pytest.mark.asyncio
async def test_rejects_oversized_upload(covers: CoverImageService, post: PostDB) -> None:
    covers.max_size_bytes = 10
    with pytest.raises(ImageTooLargeError) as exc_info:
        await covers.reconcile(post.id, _upload(b"x" * 11))
    assert exc_info.value.status_code == 413


@pytest.mark.asyncio
async def test_rejects_corrupted_image(covers: CoverImageService, post: PostDB) -> None:
    with pytest.raises(InvalidImageError):
        await covers.reconcile(post.id, _upload(b"definitely not a jpeg"))


@pytest.mark.asyncio
async def test_storage_failure_becomes_storage_error(
    covers: CoverImageService,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    with (
        patch.object(covers.storage, "put", new_callable=AsyncMock, side_effect=OSError("disk")),
        pytest.raises(StorageError),
    ):
        await covers.reconcile(post.id, _upload(make_image()))


@pytest.mark.asyncio
async def test_invalid_upload_leaves_current_cover_untouched(
    covers: CoverImageService,
    storage: LocalStorage,
    post: PostDB,
    make_image: Callable[..., bytes],
) -> None:
    current = await covers.reconcile(post.id, _upload(make_image()))
    assert current is not None

    with pytest.raises(InvalidImageError):
        await covers.reconcile(post.id, _upload(b"broken"))

    assert await storage.exists(current.path)


class TestRemove:
    @pytest.mark.asyncio
    async def test_removes_stored_file_and_record(
        self,
        covers: CoverImageService,
        storage: LocalStorage,
        post: PostDB,
        make_image: Callable[..., bytes],
    ) -> None:
        cover = await covers.reconcile(post.id, _upload(make_image()))
        assert cover is not None

        assert await covers.remove(post.id) is True
        assert not await storage.exists(cover.path)
        assert await covers.covers.get_for_post(post.id) is None

    @pytest.mark.asyncio
    async def test_external_url_cover_is_kept(self, covers: CoverImageService, post: PostDB) -> None:
        await covers.reconcile(post.id, SetUrl("https://cdn.example.com/a.jpg"))

        assert await covers.remove(post.id) is False
        assert await covers.covers.get_for_post(post.id) is not None

    @pytest.mark.asyncio
    async def test_no_cover(self, covers: CoverImageService, post: PostDB) -> None:
        assert await covers.remove(post.id) is False

    @pytest.mark.asyncio
    async def test_path_outside_cover_dir_is_not_deleted(
        self,
        covers: CoverImageService,
        session: AsyncSession,
        storage: LocalStorage,
        post: PostDB,
    ) -> None:
        await storage.put("avatars/someone.jpg", b"avatar", "image/jpeg")
        session.add(CoverImageDB(post_id=post.id, path="avatars/someone.jpg"))
        await session.flush()

        assert await covers.remove(post.id) is False
        assert await storage.exists("avatars/someone.jpg")

    @pytest.mark.asyncio
    async def test_escaping_path_is_not_touched(
        self,
        covers: CoverImageService,
        session: AsyncSession,
        post: PostDB,
    ) -> None:
        session.add(CoverImageDB(post_id=post.id, path="post/cover/../../../escape.jpg"))
        await session.flush()

        assert await covers.remove(post.id) is False
        assert await covers.covers.get_for_post(post.id) is not None

    @pytest.mark.asyncio
    async def test_file_of_another_post_is_kept(
        self,
        covers: CoverImageService,
        session: AsyncSession,
        storage: LocalStorage,
        post: PostDB,
        other_author: UserDB,
        make_post: PostFactory,
        make_image: Callable[..., bytes],
    ) -> None:
        theirs = await covers.reconcile(post.id, _upload(make_image()))
        assert theirs is not None
        mine = await make_post(other_author)
        session.add(CoverImageDB(post_id=mine.id, path=theirs.path))
        await session.flush()

        assert await covers.remove(mine.id) is False
        assert await storage.exists(theirs.path)
        assert await covers.covers.get_for_post(post.id) is not None
