"""Fixed-capacity lookup cache with insertion-order eviction"""

from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional


class BoundedLookupCache:
    """FIFO cache for externally sourced facts (prices, decimals).

    Eviction is strictly by insertion order: writing to a key that is
    already present updates the value but keeps its original position.
    A stored ``None`` means "looked up and found nothing" and is a valid
    entry; use ``has`` to tell it apart from a key that was never cached.
    Entries never expire.
    """

    def __init__(self, capacity: int, name: str = "cache"):
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> Optional[Any]:
        """Get cached value, None when absent"""
        if key in self._entries:
            self.hits += 1
            return self._entries[key]
        self.misses += 1
        return None

    def has(self, key: Hashable) -> bool:
        return key in self._entries

    def set(self, key: Hashable, value: Any):
        """Store value, evicting the oldest entry when a new key overflows"""
        if key in self._entries:
            # OrderedDict assignment to an existing key keeps its slot
            self._entries[key] = value
            return

        if len(self._entries) >= self.capacity:
            self._entries.popitem(last=False)
            self.evictions += 1

        self._entries[key] = value

    def clear(self):
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'size': len(self._entries),
            'capacity': self.capacity,
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries
