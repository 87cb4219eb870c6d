"""Process-local TTL cache owned by whoever constructs it."""

import time
from collections.abc import Callable
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Map with read-time expiry.

    Entries are never evicted in the background: a stale entry is dropped
    when it is read. Writes overwrite unconditionally (last write wins),
    so concurrent coroutines need no lock.
    """

    def __init__(
        self, ttl_sec: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._ttl = ttl_sec
        self._clock = clock
        self._entries: dict[K, tuple[float, V]] = {}  # key → (stored_at, value)

    @property
    def ttl_sec(self) -> float:
        return self._ttl

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (self._clock(), value)

    def delete(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]
