"""
Storage services package.

This package provides storage backends for cover images,
with support for local filesystem and Cloudinary.
"""

from blog.configs.settings import settings
from blog.services.storage.base import StorageService, is_external_url
from blog.services.storage.cloudinary_storage import CloudinaryStorage
from blog.services.storage.local import LocalStorage


def get_storage_service() -> StorageService:
    """
    Get the configured storage service.

    Returns the appropriate storage implementation based on
    the STORAGE_PROVIDER setting.

    Returns:
        StorageService: Configured storage service instance
    """
    if settings.STORAGE_PROVIDER == "cloudinary":
        return CloudinaryStorage()
    return LocalStorage()


__all__ = [
    "CloudinaryStorage",
    "LocalStorage",
    "StorageService",
    "get_storage_service",
    "is_external_url",
]
