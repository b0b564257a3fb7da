"""In-memory TTL cache shared by the story, comment and article fetch paths."""

from __future__ import annotations

import copy
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, Hashable, Iterator, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class RWLock:
    """Readers/writer lock. Waiting writers block new readers.

    If an exception escapes a write section the lock is marked poisoned;
    it stays usable, callers decide what poisoned means for them.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        self.poisoned = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        except BaseException:
            self.poisoned = True
            raise
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class _Store(Generic[K, V]):
    """The state every handle on one cache shares."""

    def __init__(self) -> None:
        self.entries: dict[K, CacheEntry[V]] = {}
        self.lock = RWLock()
        self.sweeper: threading.Thread | None = None
        self.sweeper_stop = threading.Event()


class Cache(Generic[K, V]):
    """Thread-safe key/value store whose entries expire ``ttl`` seconds after ``set``.

    Expired entries read as misses but stay in the store until
    ``cleanup_expired``, ``invalidate`` or ``clear`` removes them. Values are
    copied on the way in and on the way out, so an entry never changes after
    ``set`` whatever callers do with their objects.

    ``clone()`` returns another handle on the same store; it does not copy
    the data.

    The cache is best effort and never raises: an exception while an entry
    is being written is logged and poisons the lock, after which reads
    behave as misses and writes are dropped.
    """

    def __init__(self, ttl: float | timedelta, enable_metrics: bool = False) -> None:
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()
        self.ttl = float(ttl)
        self.enable_metrics = enable_metrics
        self._store: _Store[K, V] = _Store()

    @classmethod
    def with_metrics(cls, ttl: float | timedelta, enable_metrics: bool) -> Cache[K, V]:
        """Create a cache that logs per-operation timings when ``enable_metrics`` is set."""
        return cls(ttl, enable_metrics=enable_metrics)

    def clone(self) -> Cache[K, V]:
        """Return a new handle sharing this cache's store."""
        other = object.__new__(type(self))
        other.ttl = self.ttl
        other.enable_metrics = self.enable_metrics
        other._store = self._store
        return other

    __copy__ = clone

    @property
    def is_poisoned(self) -> bool:
        return self._store.lock.poisoned

    def __len__(self) -> int:
        """Number of stored entries, expired ones included."""
        return len(self._store.entries)

    @contextmanager
    def _writing(self, op: str) -> Iterator[None]:
        try:
            with self._store.lock.write():
                yield
        except Exception:
            logger.error("%s faulted; cache disabled", op, exc_info=True)

    def _metric(self, op: str, start: float, **fields) -> None:
        if not self.enable_metrics:
            return
        elapsed_ms = (time.monotonic() - start) * 1000
        extra = " ".join(f"{k}={v}" for k, v in fields.items())
        logger.debug("%s elapsed=%.3fms %s", op, elapsed_ms, extra)

    def get(self, key: K) -> V | None:
        """Return a copy of the value for ``key`` if present and unexpired."""
        start = time.monotonic()
        store = self._store
        if store.lock.poisoned:
            self._metric("cache.get failed (lock poisoned)", start)
            return None
        with store.lock.read():
            entry = store.entries.get(key)
            if entry is not None and entry.is_valid(time.monotonic()):
                value = copy.deepcopy(entry.value)
                self._metric("cache.get", start, hit=True)
                return value
        self._metric("cache.get", start, hit=False)
        return None

    def get_stale(self, key: K) -> V | None:
        """Return a copy of the value for ``key`` even if it has expired."""
        store = self._store
        if store.lock.poisoned:
            return None
        with store.lock.read():
            entry = store.entries.get(key)
            if entry is None:
                return None
            return copy.deepcopy(entry.value)

    def set(self, key: K, value: V) -> None:
        """Insert or overwrite ``key``; the entry expires ``ttl`` seconds from now."""
        start = time.monotonic()
        store = self._store
        if store.lock.poisoned:
            self._metric("cache.set failed (lock poisoned)", start)
            return
        with self._writing("cache.set"):
            store.entries[key] = CacheEntry(copy.deepcopy(value), time.monotonic() + self.ttl)
        self._metric("cache.set", start)

    def invalidate(self, key: K) -> None:
        """Remove ``key`` if present."""
        start = time.monotonic()
        store = self._store
        if store.lock.poisoned:
            self._metric("cache.invalidate failed (lock poisoned)", start)
            return
        with self._writing("cache.invalidate"):
            store.entries.pop(key, None)
        self._metric("cache.invalidate", start)

    def clear(self) -> None:
        """Remove every entry."""
        start = time.monotonic()
        store = self._store
        if store.lock.poisoned:
            self._metric("cache.clear failed (lock poisoned)", start)
            return
        with self._writing("cache.clear"):
            store.entries.clear()
        self._metric("cache.clear", start)

    def cleanup_expired(self) -> int:
        """Drop entries whose deadline has passed. Returns how many were removed."""
        start = time.monotonic()
        store = self._store
        if store.lock.poisoned:
            self._metric("cache.cleanup_expired failed (lock poisoned)", start)
            return 0
        expired: list[K] = []
        remaining = len(store.entries)
        with self._writing("cache.cleanup_expired"):
            now = time.monotonic()
            expired = [k for k, e in store.entries.items() if not e.is_valid(now)]
            for k in expired:
                del store.entries[k]
            remaining = len(store.entries)
        self._metric(
            "cache.cleanup_expired", start, removed=len(expired), remaining=remaining
        )
        return len(expired)

    # Background sweep

    def start_sweeper(self, interval: float) -> None:
        """Run ``cleanup_expired`` every ``interval`` seconds on a daemon thread."""
        store = self._store
        if store.sweeper is not None and store.sweeper.is_alive():
            return
        store.sweeper_stop.clear()
        store.sweeper = threading.Thread(
            target=self._sweep, args=(interval,), name="cache-sweeper", daemon=True
        )
        store.sweeper.start()

    def stop_sweeper(self, timeout: float | None = None) -> None:
        store = self._store
        store.sweeper_stop.set()
        if store.sweeper is not None:
            store.sweeper.join(timeout)
            store.sweeper = None

    def _sweep(self, interval: float) -> None:
        stop = self._store.sweeper_stop
        while not stop.wait(interval):
            removed = self.cleanup_expired()
            if removed:
                logger.debug("Sweeper removed %d expired entries", removed)
