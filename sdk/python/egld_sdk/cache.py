"""
Time-bounded cache for the network configuration
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

import cachetools

from .exceptions import InvalidCacheDurationError
from .models import NetworkConfig

logger = logging.getLogger(__name__)

MINIMUM_CACHING_INTERVAL = 1.0


class ReadWriteLock:
    """Many concurrent readers or a single writer"""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer:
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
    def write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class NetworkConfigCache:
    """
    Caches the network configuration for a fixed expiration.

    The value lives in a single-slot cachetools.TTLCache. Fresh reads only
    take the shared lock. On a miss the exclusive lock is taken and the slot
    checked again, so callers that queued behind a refresh reuse its result
    and at most one fetch is in flight.
    """

    _KEY = 'network_config'

    def __init__(
        self,
        fetch: Callable[[Optional[float]], NetworkConfig],
        expiration: float,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            fetch: Loads the configuration from the network; receives the
                request timeout of the caller that triggered the refresh
            expiration: Seconds a fetched configuration stays valid (>= 1)
            clock: Monotonic time source (default: time.monotonic)
        """
        if expiration < MINIMUM_CACHING_INTERVAL:
            raise InvalidCacheDurationError(
                f"invalid caching duration, provided: {expiration}s, "
                f"minimum: {MINIMUM_CACHING_INTERVAL}s"
            )

        self._fetch = fetch
        self._lock = ReadWriteLock()
        self._store = cachetools.TTLCache(maxsize=1, ttl=expiration, timer=clock or time.monotonic)

    def get(self, timeout: Optional[float] = None) -> NetworkConfig:
        with self._lock.read():
            cached = self._get_cached()
        if cached is not None:
            return cached

        with self._lock.write():
            # another caller may have refreshed while we waited
            cached = self._get_cached()
            if cached is not None:
                return cached

            logger.debug("Network config not cached. caching...")
            config = self._fetch(timeout)
            self._store[self._KEY] = config
            return config

    def invalidate(self):
        with self._lock.write():
            self._store.clear()

    def _get_cached(self) -> Optional[NetworkConfig]:
        try:
            return self._store[self._KEY]
        except KeyError:
            return None
