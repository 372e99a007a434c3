"""
InstanceCache

Thread-safe store of singleton bean instances.

Each id gets its own lock, so singletons that do not depend on each other
can be built in parallel, while a given id is built at most once: the first
caller builds it, concurrent callers wait for it and get the same instance.
"""

import threading
from typing import Any, Callable, Dict, List, Tuple

_MISSING = object()


class InstanceCache:
    """Singleton instances keyed by bean id, in creation order."""

    def __init__(self):
        self._instances: Dict[str, Any] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, bean_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(bean_id)
            if lock is None:
                lock = self._locks[bean_id] = threading.RLock()
            return lock

    def get_or_create(self, bean_id: str, factory: Callable[[], Any]) -> Any:
        """Return the cached instance, or build it with ``factory`` exactly once.

        If ``factory`` raises, nothing is cached and the next caller tries again.
        """
        instance = self._instances.get(bean_id, _MISSING)
        if instance is not _MISSING:
            return instance

        with self._lock_for(bean_id):
            # Double-checked: another thread may have finished meanwhile
            instance = self._instances.get(bean_id, _MISSING)
            if instance is not _MISSING:
                return instance

            instance = factory()
            with self._guard:
                self._instances[bean_id] = instance
            return instance

    def get(self, bean_id: str, default: Any = None) -> Any:
        return self._instances.get(bean_id, default)

    def drain(self) -> List[Tuple[str, Any]]:
        """Empty the cache.

        Returns:
            (id, instance) pairs in reverse creation order, ready for teardown
        """
        with self._guard:
            items = list(self._instances.items())
            self._instances.clear()
            self._locks.clear()
        items.reverse()
        return items

    def __contains__(self, bean_id: object) -> bool:
        return bean_id in self._instances

    def __len__(self) -> int:
        return len(self._instances)
