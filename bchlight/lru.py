"""A size-aware, thread-safe least-recently-used cache."""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Hashable, Protocol


class ElementNotFoundError(LookupError):
    """The requested key is not in the cache."""

    def __init__(self, message: str = "unable to find element") -> None:
        super().__init__(message)


class _Value(Protocol):
    def size(self) -> int: ...


@dataclass(frozen=True)
class FilterCacheKey:
    """Key under which a filter is cached."""

    block_hash: bytes
    filter_type: int


@dataclass
class CacheableBlock:
    """A block whose cache size is the length of its serialized form."""

    block: Any

    def size(self) -> int:
        """Size of the serialized block in bytes."""
        return len(bytes(self.block))


@dataclass
class CacheableFilter:
    """A filter whose cache size is the length of its serialized form."""

    filter: Any

    def size(self) -> int:
        """Size of the serialized filter in bytes."""
        return len(bytes(self.filter))


_MISSING = object()


class LRUCache:
    """LRU cache bounded by the summed ``size()`` of its values."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative: {capacity}")
        self.capacity = capacity
        self._size = 0
        self._entries: "OrderedDict[Hashable, _Value]" = OrderedDict()
        self._lock = threading.Lock()

    def _evict(self, needed: int) -> bool:
        evicted = False
        while self.capacity - self._size < needed:
            if not self._entries:
                raise RuntimeError(
                    "all elements got evicted, yet still need to evict "
                    f"{needed - (self.capacity - self._size)}"
                )
            _, oldest = self._entries.popitem(last=False)
            self._size -= oldest.size()
            evicted = True
        return evicted

    def put(self, key: Hashable, value: _Value) -> bool:
        """Store ``value`` under ``key``; return whether anything was evicted."""
        value_size = value.size()
        if value_size > self.capacity:
            raise ValueError(
                f"can't insert entry of size {value_size} into cache "
                f"with capacity {self.capacity}"
            )

        with self._lock:
            old = self._entries.pop(key, _MISSING)
            if old is not _MISSING:
                self._size -= old.size()

            evicted = self._evict(value_size)
            self._entries[key] = value
            self._size += value_size
            return evicted

    def get(self, key: Hashable) -> _Value:
        """Return the value for ``key`` and mark it most recently used."""
        with self._lock:
            try:
                self._entries.move_to_end(key)
            except KeyError:
                raise ElementNotFoundError() from None
            return self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)