"""
Base storage protocol for file storage operations.

This module defines the abstract interface for storage backends,
allowing for different implementations (local, cloudinary, S3, etc.).
Paths handed to a backend are relative storage paths such as
``post/cover/photo_ab12.jpg``; absolute ``http(s)`` URLs are never treated
as stored files.
"""

from abc import abstractmethod
from typing import Protocol


def is_external_url(path: str) -> bool:
    """Whether ``path`` is an absolute URL rather than a storage path."""
    return path.startswith(("http://", "https://"))


class StorageService(Protocol):
    """
    Protocol defining the interface for storage services.

    All storage implementations must implement these methods
    to ensure consistent behavior across different backends.
    """

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store ``data`` at ``path``.

        Args:
            path: Relative storage path
            data: Raw file bytes
            content_type: MIME type of the file

        Returns:
            str: The storage path to persist on the owning record
        """
        ...

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at ``path``.

        Returns:
            bool: True if a file was removed, False otherwise
        """
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Whether a stored file exists at ``path``."""
        ...

    @abstractmethod
    def url(self, path: str) -> str:
        """Public URL for ``path``; external URLs are returned unchanged."""
        ...
