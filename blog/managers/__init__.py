from blog.managers.cache_manager import CacheManager
from blog.managers.rate_limiter import limiter, rate_limit_exceeded_handler, tiered

__all__ = ["CacheManager", "limiter", "rate_limit_exceeded_handler", "tiered"]
