from threading import RLock
from time import monotonic
from typing import Callable
from typing import NamedTuple
from typing import Protocol

from loguru import logger

from contributions_api.models import AggregatedResponse


class CacheEntry(NamedTuple):
    value: AggregatedResponse
    expires_at: float


class ResultCache(Protocol):
    """Storage for aggregated results keyed by username and resolved query."""

    def get(self, key: str) -> AggregatedResponse | None: ...

    def put(self, key: str, value: AggregatedResponse) -> None: ...


class TTLCache:
    """In-memory cache whose entries expire after a fixed time-to-live.

    Expired entries are not swept; they are treated as absent and replaced
    on the next `put` for the same key.
    """

    def __init__(
        self, ttl_seconds: float = 3600, clock: Callable[[], float] = monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = RLock()

    def get(self, key: str) -> AggregatedResponse | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry.expires_at <= self._clock():
            logger.debug("Cache miss: {}", key)
            return None

        logger.debug("Cache hit: {}", key)
        return entry.value

    def put(self, key: str, value: AggregatedResponse) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: str) -> AggregatedResponse | None:
        return None

    def put(self, key: str, value: AggregatedResponse) -> None:
        return None
