"""Application layer - Constructor-keyed instance cache."""

import heapq
import itertools
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from parcel_di.application.lifetime_parser import is_bounded
from parcel_di.domain import CacheEntry, IInstanceCache, LifetimeMs

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)


def same_value(left: Any, right: Any) -> bool:
    """Compare two key positions by identity.

    Immutable scalars of the same type are compared by value, since equal
    scalars are interchangeable even when they are distinct objects.
    Everything else, including lists, tuples and dicts, only matches itself.
    """
    if left is right:
        return not (isinstance(left, float) and left != left)
    if type(left) is not type(right) or not isinstance(left, _SCALAR_TYPES):
        return False
    return left == right


def keys_match(left: Tuple[Any, ...], right: Tuple[Any, ...]) -> bool:
    """Tell whether two argument sequences have the same length and positions."""
    if len(left) != len(right):
        return False
    return all(same_value(a, b) for a, b in zip(left, right))


def keywords_match(left: Dict[str, Any], right: Dict[str, Any]) -> bool:
    """Tell whether two keyword mappings name the same keys with the same values."""
    if left.keys() != right.keys():
        return False
    return all(same_value(value, right[name]) for name, value in left.items())


class InstanceCache(IInstanceCache):
    """Stores cached instances in buckets keyed by source constructor.

    Buckets are keyed by the identity of the source, so any callable can be a
    source, hashable or not, and two distinct sources never share a bucket
    even when they compare equal.

    Every entry carries its own deadline, so eviction of one argument
    combination never affects another combination of the same constructor.
    Deadlines are kept in a heap; every lookup and store first evicts all
    expired entries across all buckets, and ``purge_expired`` does the same
    on demand.

    Attributes:
        _clock: Monotonic clock returning seconds.
        _buckets: Mapping of ``id(source)`` to the source and its entries.
        _deadlines: Heap of ``(expires_at, sequence, id(source), entry)`` records.
    """

    _shared: Optional["InstanceCache"] = None

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache.

        Args:
            clock: Monotonic clock returning seconds, ``time.monotonic`` by default.
        """
        self._clock = clock
        self._buckets: Dict[int, Tuple[Any, List[CacheEntry]]] = {}
        self._deadlines: List[Tuple[float, int, int, CacheEntry]] = []
        self._sequence = itertools.count()

    @classmethod
    def shared(cls) -> "InstanceCache":
        """Return the process-wide cache, creating it on first use.

        Cached deliveries fall back to this instance when none is passed to them.
        """
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    def ensure_bucket(self, source: Any) -> None:
        """Create the bucket for ``source`` unless it already exists."""
        self._bucket(source)

    def has_bucket(self, source: Any) -> bool:
        """Tell whether a bucket exists for ``source``."""
        return id(source) in self._buckets

    def lookup(
        self,
        source: Any,
        key: Tuple[Any, ...],
        keywords: Dict[str, Any],
        lifetime: LifetimeMs,
    ) -> Optional[CacheEntry]:
        """Return the live entry matching ``key``, refreshing it when ``lifetime`` is bounded.

        Args:
            source: The constructor whose bucket is searched.
            key: Resolved positional argument sequence.
            keywords: Resolved keyword arguments.
            lifetime: Lifetime of the requesting delivery, in milliseconds.

        Returns:
            The matching entry, or None on a miss.
        """
        now = self._clock()
        self._evict_expired(now)

        for entry in self._bucket(source):
            if keys_match(entry.key, key) and keywords_match(entry.keywords, keywords):
                entry.hits += 1
                if is_bounded(lifetime):
                    entry.lifetime = lifetime
                    self._schedule(source, entry, now + lifetime / 1000)
                logger.debug("Cache hit for %r (hits=%d)", source, entry.hits)
                return entry

        logger.debug("Cache miss for %r", source)
        return None

    def store(
        self,
        source: Any,
        key: Tuple[Any, ...],
        keywords: Dict[str, Any],
        instance: Any,
        lifetime: LifetimeMs,
    ) -> CacheEntry:
        """Store a freshly constructed instance under ``key``.

        Args:
            source: The constructor the instance was built from.
            key: Resolved positional argument sequence.
            keywords: Resolved keyword arguments.
            instance: The constructed instance.
            lifetime: Milliseconds until expiry without access, or UNBOUNDED.

        Returns:
            The new cache entry.
        """
        now = self._clock()
        self._evict_expired(now)

        entry = CacheEntry(
            key=key,
            keywords=keywords,
            instance=instance,
            lifetime=lifetime,
        )
        self._bucket(source).append(entry)
        if is_bounded(lifetime):
            self._schedule(source, entry, now + lifetime / 1000)
        return entry

    def entries(self, source: Any) -> List[CacheEntry]:
        """Return a snapshot of the live entries for ``source``."""
        self._evict_expired(self._clock())
        return list(self._bucket(source))

    def purge_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        return self._evict_expired(self._clock())

    def clear(self, source: Optional[Any] = None) -> None:
        """Drop cached entries, for one source or for all of them.

        Buckets themselves are kept, only their entries are removed.
        """
        if source is None:
            for _, bucket in self._buckets.values():
                bucket.clear()
            self._deadlines.clear()
            return

        if id(source) not in self._buckets:
            return
        self._bucket(source).clear()
        self._deadlines = [record for record in self._deadlines if record[2] != id(source)]
        heapq.heapify(self._deadlines)

    def _bucket(self, source: Any) -> List[CacheEntry]:
        """Return the entries of ``source``, creating its bucket if needed."""
        found = self._buckets.get(id(source))
        if found is None:
            found = self._buckets[id(source)] = (source, [])
        return found[1]

    def _schedule(self, source: Any, entry: CacheEntry, expires_at: float) -> None:
        """Set the deadline of ``entry``; records left for older deadlines become stale."""
        entry.expires_at = expires_at
        heapq.heappush(self._deadlines, (expires_at, next(self._sequence), id(source), entry))

    def _evict_expired(self, now: float) -> int:
        """Drop every entry whose deadline has passed and return how many were dropped."""
        removed = 0
        while self._deadlines and self._deadlines[0][0] <= now:
            expires_at, _, source_id, entry = heapq.heappop(self._deadlines)
            if entry.expires_at != expires_at:
                continue
            source, bucket = self._buckets[source_id]
            remaining = [item for item in bucket if item is not entry]
            if len(remaining) != len(bucket):
                bucket[:] = remaining
                removed += 1
                logger.debug("Evicted expired entry for %r", source)
        return removed
