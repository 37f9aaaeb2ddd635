from blog.configs.logger import file_logger
from blog.configs.settings import (
    POSTS_CACHE_NAMESPACE,
    CacheConfig,
    LimiterConfig,
    RedisCacheConfig,
    pool_kwargs,
    settings,
)

__all__ = [
    "POSTS_CACHE_NAMESPACE",
    "CacheConfig",
    "LimiterConfig",
    "RedisCacheConfig",
    "file_logger",
    "pool_kwargs",
    "settings",
]
