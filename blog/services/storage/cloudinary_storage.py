"""
Cloudinary storage implementation.

This module provides a Cloudinary-based storage backend for production
use, with CDN delivery of cover images.
"""

import asyncio
from functools import partial
from pathlib import PurePosixPath

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils

from blog.configs.settings import settings
from blog.services.storage.base import is_external_url


class CloudinaryStorage:
    """
    Cloudinary storage implementation.

    The storage path minus its extension, under ``CLOUDINARY_FOLDER``, is
    the Cloudinary public ID.
    """

    def __init__(self) -> None:
        """Initialize Cloudinary with configured credentials."""
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET.get_secret_value(),
            secure=True,
        )
        self.folder = settings.CLOUDINARY_FOLDER

    def _get_public_id(self, path: str) -> str:
        return f"{self.folder}/{PurePosixPath(path).with_suffix('')}"

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload ``data`` to Cloudinary.

        Args:
            path: Relative storage path
            data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            str: ``path``, unchanged; URLs are derived on read
        """
        # Run blocking Cloudinary upload in thread pool
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(
            None,
            partial(
                cloudinary.uploader.upload,
                data,
                public_id=self._get_public_id(path),
                overwrite=True,
                resource_type="image",
                transformation=[{"quality": "auto:good", "fetch_format": "auto"}],
            ),
        )
        return path

    async def delete(self, path: str) -> bool:
        if is_external_url(path):
            return False
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(
            None,
            partial(cloudinary.uploader.destroy, self._get_public_id(path)),
        )
        return result.get("result") == "ok"

    async def exists(self, path: str) -> bool:
        if not path or is_external_url(path):
            return False
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(
                None,
                partial(cloudinary.api.resource, self._get_public_id(path)),
            )
        except cloudinary.exceptions.NotFound:
            return False
        return True

    def url(self, path: str) -> str:
        if is_external_url(path):
            return path
        url, _ = cloudinary.utils.cloudinary_url(self._get_public_id(path), secure=True)
        return url
