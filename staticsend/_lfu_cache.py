from collections import OrderedDict
from typing import DefaultDict, Dict, Generic, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")

__all__ = ["LFUCache"]


class LFUCache(Generic[K, V]):
    """
    Fixed-capacity mapping that evicts the least frequently used key.

    Ties between equally used keys go to the one that reached that frequency first.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Capacity must be positive")

        self.capacity = capacity
        self.cache: Dict[K, Tuple[V, int]] = {}
        self.freq_count: DefaultDict[int, "OrderedDict[K, V]"] = DefaultDict(OrderedDict)
        self.min_freq = 0

    def _touch(self, key: K, value: V) -> None:
        _, freq = self.cache[key]
        self.freq_count[freq].pop(key)
        if not self.freq_count[freq]:
            del self.freq_count[freq]
            if freq == self.min_freq:
                self.min_freq += 1
        freq += 1
        self.freq_count[freq][key] = value
        self.cache[key] = (value, freq)

    def get(self, key: K) -> V:
        if key in self.cache:
            value, _ = self.cache[key]
            self._touch(key, value)
            return value
        raise KeyError(f"Key {key} not found")

    def put(self, key: K, value: V) -> None:
        if key in self.cache:
            self._touch(key, value)
            return

        if len(self.cache) == self.capacity:
            evicted_key, _ = self.freq_count[self.min_freq].popitem(last=False)
            if not self.freq_count[self.min_freq]:
                del self.freq_count[self.min_freq]
            del self.cache[evicted_key]

        self.cache[key] = (value, 1)
        self.freq_count[1][key] = value
        self.min_freq = 1

    def clear(self) -> None:
        self.cache.clear()
        self.freq_count.clear()
        self.min_freq = 0

    def __contains__(self, key: object) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)
