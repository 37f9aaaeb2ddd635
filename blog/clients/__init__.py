from blog.clients.memory_client import MemoryClient
from blog.clients.protocols import CacheClientProtocol
from blog.clients.redis_client import RedisClient

__all__ = ["CacheClientProtocol", "MemoryClient", "RedisClient"]
