"""
Result cache for the HPP Pricing Engine.

A thread-safe TTL cache of BatchCostResult instances. The cache owns the
hit, miss and total-calculation counters; every counter update happens under
the same lock as the lookup or store it belongs to, so concurrent callers
never lose an update.

The computation itself runs outside the lock: two threads missing the same
key at the same time may both compute, and the later store wins. Results are
deterministic for a key, so either value is correct.
"""

import dataclasses
import hashlib
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from src.models.batch_request import BatchRequest
from src.utils.constants import CACHE_KEY_PREFIX, DEFAULT_CACHE_TTL_MINUTES
from src.utils.decimal_utils import cost_to_string

T = TypeVar("T")

_KEY_FIELDS = (
    "batch_multiplier",
    "oil_price_per_liter",
    "energy_rate_per_kwh",
    "markup",
    "waste_percent",
    "price_volatility_percent",
    "risk_appetite_percent",
    "market_pressure_percent",
    "target_profit_per_batch",
    "monthly_fixed_cost",
)


def _canonical(value: Any) -> Any:
    """Hashable form of a request value; Decimals lose trailing zeros so 1 and 1.00 match."""
    if isinstance(value, Decimal):
        return str(value.normalize())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return (type(value).__name__,) + tuple(
            (field.name, _canonical(getattr(value, field.name)))
            for field in dataclasses.fields(value)
        )
    if isinstance(value, (tuple, list)):
        return tuple(_canonical(item) for item in value)
    return value


def build_cache_key(request: BatchRequest, strategy: Any = None) -> str:
    """
    Build the cache key for a request priced with a strategy.

    The key carries the headline scalar fields formatted to two decimals,
    followed by a SHA-256 digest of the whole request and the strategy, so
    requests that differ only in ingredient lines or labor get distinct keys.
    Numerically equal values (1 and 1.00) produce the same digest.

    Args:
        request: Batch request
        strategy: Strategy the request is priced with

    Returns:
        Key string starting with "batch_cost_"
    """
    scalars = "_".join(cost_to_string(getattr(request, name)) for name in _KEY_FIELDS)
    canonical = f"{_canonical(request)!r}|{strategy!r}"
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{scalars}_{digest}"


@dataclass(frozen=True)
class CacheStatistics:
    """Snapshot of cache counters."""

    hits: int
    misses: int
    total_calculations: int
    size: int
    ttl_seconds: float

    @property
    def hit_rate(self) -> float:
        """hits / (hits + misses), 0.0 before any lookup."""
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return self.hits / lookups


class ResultCache:
    """
    Thread-safe cache for calculation results with TTL (Time To Live).

    A ttl_seconds <= 0 disables retention: every lookup misses and nothing
    is stored, while the counters keep working.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_MINUTES * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._total_calculations = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _lookup(self, key: str) -> Tuple[bool, Any]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        value, timestamp = entry
        if self._clock() - timestamp < self._ttl:
            return True, value
        # Expired, remove from cache
        del self._entries[key]
        return False, None

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if not expired. Does not touch the counters."""
        with self._lock:
            found, value = self._lookup(key)
            return value if found else None

    def put(self, key: str, value: Any) -> None:
        """Store value in cache with current timestamp."""
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """
        Return the cached value for key, computing and storing it on a miss.

        A compute() that raises stores nothing and does not count as a
        calculation; the exception propagates.
        """
        with self._lock:
            found, value = self._lookup(key)
            if found:
                self._hits += 1
                return value
            self._misses += 1

        value = compute()

        with self._lock:
            if self.enabled:
                self._entries[key] = (value, self._clock())
            self._total_calculations += 1
        return value

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def size(self) -> int:
        """Get current cache size, dropping expired entries first."""
        with self._lock:
            now = self._clock()
            expired_keys = [
                k for k, (_, timestamp) in self._entries.items() if now - timestamp >= self._ttl
            ]
            for key in expired_keys:
                del self._entries[key]
            return len(self._entries)

    def reset_statistics(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._total_calculations = 0

    def statistics(self) -> CacheStatistics:
        with self._lock:
            return CacheStatistics(
                hits=self._hits,
                misses=self._misses,
                total_calculations=self._total_calculations,
                size=self.size(),
                ttl_seconds=self._ttl,
            )
