import logging
import threading
from typing import Any, Dict, Generic, Optional, TypeVar

# Type variable for our cache generic
T = TypeVar('T')


class ReadWriteLock:
    """
    Many readers or one writer.

    Writers announce themselves before waiting, which stops new readers from
    entering, so a stream of scrapes cannot starve a write.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class StaleCache(Generic[T]):
    """
    Last known good snapshot per collector domain and target.

    Provides:
    - Fallback data for collectors when the proxy fails
    - Last-write-wins updates, no merging and no expiry
    - Safe sharing between concurrent scrapes of any target
    """

    def __init__(self):
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._lock = ReadWriteLock()
        self.logger = logging.getLogger(__name__)

    def read(self, domain: str, target: str) -> Optional[T]:
        """
        Retrieve the last snapshot written for a target

        Args:
            domain: Collector name owning the snapshot (e.g., 'drives')
            target: Target name

        Returns:
            The cached snapshot or None if nothing was ever written
        """
        self._lock.acquire_read()
        try:
            return self._cache.get(domain, {}).get(target)
        finally:
            self._lock.release_read()

    def write(self, domain: str, target: str, snapshot: T) -> None:
        """Replace the snapshot for a target"""
        self._lock.acquire_write()
        try:
            self._cache.setdefault(domain, {})[target] = snapshot
        finally:
            self._lock.release_write()
        self.logger.debug(f"Cached {domain} snapshot for target {target}")

    def clear(self, domain: Optional[str] = None) -> None:
        """
        Clear cache entries

        Args:
            domain: Domain to clear or None for all
        """
        self._lock.acquire_write()
        try:
            if domain is None:
                self._cache = {}
            else:
                self._cache.pop(domain, None)
        finally:
            self._lock.release_write()
