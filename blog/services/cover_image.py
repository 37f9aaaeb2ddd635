"""
Cover image reconciliation.

The incoming cover value of a create/update request is decided once at the
HTTP boundary as a ``CoverInput``; ``CoverImageService.reconcile`` then turns
it into the post's single cover record.
"""

from dataclasses import dataclass
from io import BytesIO
from logging import getLogger
from pathlib import PurePosixPath
from uuid import UUID, uuid4

from PIL import Image

from blog.configs import file_logger, settings
from blog.errors.upload import (
    ImageProcessingError,
    ImageTooLargeError,
    InvalidCoverUrlError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
)
from blog.models import CoverImageDB
from blog.repositories.cover import CoverRepository
from blog.services.storage import StorageService, is_external_url
from blog.utils.text import slugify

logger = file_logger(getLogger(__name__))

EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}
PIL_FORMATS = {"image/jpeg": "JPEG", "image/png": "PNG", "image/webp": "WEBP"}


@dataclass(frozen=True, slots=True)
class NoChange:
    """The request carried no cover; the current one is kept."""


@dataclass(frozen=True, slots=True)
class SetUrl:
    url: str


@dataclass(frozen=True, slots=True)
class SetUpload:
    data: bytes
    filename: str
    content_type: str


type CoverInput = NoChange | SetUrl | SetUpload


class CoverImageService:
    """
    Keeps a post's cover record and its stored file in step.

    Storage operations are not transactional with the database: a failure
    after a file was deleted leaves the record pointing at a missing file.
    """

    def __init__(self, storage: StorageService, covers: CoverRepository) -> None:
        self.storage = storage
        self.covers = covers
        self.max_size_bytes = settings.COVER_MAX_SIZE_MB * 1024 * 1024
        self.allowed_types = settings.COVER_ALLOWED_TYPES

    def url_for(self, cover: CoverImageDB | None) -> str | None:
        """Public URL of ``cover``, or None when the post has no cover."""
        return self.storage.url(cover.path) if cover else None

    async def reconcile(self, post_id: UUID, cover_input: CoverInput) -> CoverImageDB | None:
        """
        Apply ``cover_input`` to the cover of ``post_id``.

        Args:
            post_id: Owning post
            cover_input: What the request asked for

        Returns:
            CoverImageDB | None: The resulting cover record
        """
        current = await self.covers.get_for_post(post_id)

        match cover_input:
            case NoChange():
                return current

            case SetUrl(url=url) if current is not None and current.path == url:
                return current

            case SetUrl(url=url) if not is_external_url(url):
                raise InvalidCoverUrlError(url)

            case SetUrl(url=url):
                await self._discard_file(current)
                return await self.covers.upsert(post_id, url)

            case SetUpload(data=data, filename=filename, content_type=content_type):
                processed = self._prepare(data, content_type)
                await self._discard_file(current)
                path = await self._store(processed, filename, content_type)
                return await self.covers.upsert(post_id, path)

    async def remove(self, post_id: UUID) -> bool:
        """
        Delete the stored cover file, then the cover record.

        Nothing happens when the post has no cover, its path was not written
        by an upload (external URLs included) or the file is gone.

        Returns:
            bool: True if the file and record were removed
        """
        cover = await self.covers.get_for_post(post_id)
        if cover is None or not await self._owns_file(cover):
            return False
        await self.storage.delete(cover.path)
        await self.covers.remove(cover)
        logger.info(f"Removed cover {cover.path} of post {post_id}")
        return True

    async def _owns_file(self, cover: CoverImageDB) -> bool:
        """Whether ``cover`` points at a stored upload of its own post."""
        path = cover.path
        if not path.startswith(f"{settings.COVER_UPLOAD_DIR}/") or ".." in PurePosixPath(path).parts:
            return False
        if await self.covers.shared_with_other_post(cover):
            return False
        return await self.storage.exists(path)

    async def _discard_file(self, cover: CoverImageDB | None) -> None:
        if cover is not None and await self._owns_file(cover):
            await self.storage.delete(cover.path)
            logger.info(f"Deleted previous cover file {cover.path}")

    def _validate(self, data: bytes, content_type: str) -> None:
        if content_type not in self.allowed_types:
            raise UnsupportedImageTypeError(
                content_type=content_type or "unknown",
                allowed_types=self.allowed_types,
            )
        if len(data) > self.max_size_bytes:
            raise ImageTooLargeError(
                max_size_mb=settings.COVER_MAX_SIZE_MB,
                actual_size_mb=len(data) / (1024 * 1024),
            )

    def _open(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            img.verify()
            return Image.open(BytesIO(data))
        except Exception as e:
            mssg = f"Invalid or corrupted image file: {e!s}"
            raise InvalidImageError(mssg) from e

    def _prepare(self, data: bytes, content_type: str) -> bytes:
        """Validate the upload and downscale it to the configured height."""
        self._validate(data, content_type)
        img = self._open(data)
        if not settings.COVER_RESIZE_ENABLED:
            return data

        try:
            # thumbnail keeps the aspect ratio and never upscales
            img.thumbnail((img.width, settings.COVER_MAX_HEIGHT))
            pil_format = PIL_FORMATS[content_type]
            if pil_format == "JPEG" and img.mode in ("RGBA", "P", "LA"):
                img = img.convert("RGB")

            buffer = BytesIO()
            img.save(buffer, format=pil_format, quality=settings.COVER_QUALITY, optimize=True)
            return buffer.getvalue()
        except Exception as e:
            mssg = f"Failed to process image: {e!s}"
            raise ImageProcessingError(mssg) from e

    @staticmethod
    def _file_name(filename: str, content_type: str) -> str:
        stem = slugify(PurePosixPath(filename or "cover").stem, 100)
        return f"{stem}_{uuid4().hex}.{EXTENSIONS[content_type]}"

    async def _store(self, data: bytes, filename: str, content_type: str) -> str:
        path = f"{settings.COVER_UPLOAD_DIR}/{self._file_name(filename, content_type)}"
        try:
            return await self.storage.put(path, data, content_type)
        except Exception as e:
            logger.exception(f"Failed to store cover {path}")
            raise StorageError from e
