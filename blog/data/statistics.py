"""Cache statistics tracking."""

from dataclasses import dataclass, field
from threading import Lock

from blog.utils.helpers import today_str


@dataclass
class CacheStatistics:
    """Counters for cache traffic, updated by ``CacheManager``."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    increments: int = 0
    errors: int = 0
    total_bytes_written: int = 0
    total_bytes_read: int = 0
    created_at: str = field(default_factory=today_str)
    last_updated_at: str = field(default_factory=today_str)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def _bump(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)
            self.last_updated_at = today_str()

    def record_hit(self, bytes_read: int = 0) -> None:
        self._bump("hits")
        if bytes_read:
            self._bump("total_bytes_read", bytes_read)

    def record_miss(self) -> None:
        self._bump("misses")

    def record_set(self, bytes_written: int = 0) -> None:
        self._bump("sets")
        if bytes_written:
            self._bump("total_bytes_written", bytes_written)

    def record_delete(self) -> None:
        self._bump("deletes")

    def record_increment(self) -> None:
        self._bump("increments")

    def record_error(self) -> None:
        self._bump("errors")

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage (0-100)."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def to_dict(self) -> dict[str, int | str]:
        """
        Convert statistics to dictionary.

        Returns:
            Dictionary representation of statistics.
        """
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "sets": self.sets,
                "deletes": self.deletes,
                "increments": self.increments,
                "errors": self.errors,
                "total_bytes_written": self.total_bytes_written,
                "total_bytes_read": self.total_bytes_read,
                "hit_rate": f"{self.hit_rate:.2f}%",
                "total_requests": self.hits + self.misses,
                "created_at": self.created_at,
                "last_updated_at": self.last_updated_at,
            }
