from blog.errors.auth import AuthorizationError, PostAuthorizationError, auth_exception_handler
from blog.errors.base import (
    BASE_EXCEPTION,
    BaseAppError,
    create_exception_handler,
    error_envelope,
    http_exception_handler,
)
from blog.errors.cache import (
    CacheCompressionError,
    CacheDecompressionError,
    CacheDeserializationError,
    CacheExceptionError,
    CacheKeyError,
    CacheSerializationError,
    cache_exception_handler,
)
from blog.errors.database import (
    DatabaseError,
    DuplicateEntryError,
    database_exception_handler,
)
from blog.errors.posts import (
    InvalidTransitionError,
    PostError,
    PostNotFoundError,
    PostOperationError,
    operation_boundary,
    post_exception_handler,
)
from blog.errors.upload import (
    ImageProcessingError,
    ImageTooLargeError,
    InvalidCoverUrlError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
    UploadError,
    upload_exception_handler,
)
from blog.errors.validation import validation_exception_handler

__all__ = [
    "BASE_EXCEPTION",
    "AuthorizationError",
    "BaseAppError",
    "CacheCompressionError",
    "CacheDecompressionError",
    "CacheDeserializationError",
    "CacheExceptionError",
    "CacheKeyError",
    "CacheSerializationError",
    "DatabaseError",
    "DuplicateEntryError",
    "ImageProcessingError",
    "ImageTooLargeError",
    "InvalidCoverUrlError",
    "InvalidImageError",
    "InvalidTransitionError",
    "PostAuthorizationError",
    "PostError",
    "PostNotFoundError",
    "PostOperationError",
    "StorageError",
    "UnsupportedImageTypeError",
    "UploadError",
    "auth_exception_handler",
    "cache_exception_handler",
    "create_exception_handler",
    "database_exception_handler",
    "error_envelope",
    "http_exception_handler",
    "operation_boundary",
    "post_exception_handler",
    "upload_exception_handler",
    "validation_exception_handler",
]
