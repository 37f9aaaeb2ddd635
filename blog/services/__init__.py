from blog.services.cover_image import CoverImageService, CoverInput, NoChange, SetUpload, SetUrl
from blog.services.post_cache import PostCache
from blog.services.post_service import PostService

__all__ = [
    "CoverImageService",
    "CoverInput",
    "NoChange",
    "PostCache",
    "PostService",
    "SetUpload",
    "SetUrl",
]
