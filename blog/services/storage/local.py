"""
Local filesystem storage implementation.

Files live under the configured uploads directory and are served as static
files under ``UPLOADS_URL_PREFIX``.
"""

from pathlib import Path

import aiofiles
import aiofiles.os

from blog.configs.settings import settings
from blog.errors.upload import StorageError
from blog.services.storage.base import is_external_url


class LocalStorage:
    """
    Local filesystem storage implementation.

    Suitable for development, single-node deployments and tests.
    """

    def __init__(self, root: Path | None = None, url_prefix: str | None = None) -> None:
        self.root = root or settings.UPLOADS_DIR
        self.url_prefix = (url_prefix or settings.UPLOADS_URL_PREFIX).rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        """Map a storage path to a file under ``root``, refusing escapes."""
        root = self.root.resolve()
        target = (root / path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise StorageError(detail=f"Storage path escapes the uploads directory: {path}")
        return target

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        return path

    async def delete(self, path: str) -> bool:
        if not await self.exists(path):
            return False
        await aiofiles.os.remove(self._resolve(path))
        return True

    async def exists(self, path: str) -> bool:
        if not path or is_external_url(path):
            return False
        return await aiofiles.os.path.isfile(self._resolve(path))

    def url(self, path: str) -> str:
        if is_external_url(path):
            return path
        return f"{self.url_prefix}/{path.lstrip('/')}"
