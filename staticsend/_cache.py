from __future__ import annotations

import logging
import os
import typing as tp
from dataclasses import dataclass, field

from staticsend._exceptions import ConfigurationError
from staticsend._files import AsyncBaseFileManager, AsyncFileManager
from staticsend._lfu_cache import LFUCache
from staticsend._policies import CachePolicy, as_policy

logger = logging.getLogger("staticsend.cache")

__all__ = ("CacheEntry", "MetadataCache")


@dataclass
class CacheEntry:
    encodings: tp.Dict[str, bool] = field(default_factory=dict)
    """Precompressed suffix ("br", "gz") -> whether the sibling file exists."""

    exists: tp.Dict[str, bool] = field(default_factory=dict)
    """Candidate full path -> whether it exists."""

    stats: tp.Dict[str, os.stat_result] = field(default_factory=dict)
    """Resolved path -> stat result."""

    bodies: tp.Dict[str, bytes] = field(default_factory=dict)
    """Resolved path -> fully read body."""

    persistent: bool = False
    """Whether the entry is stored in a cache, as opposed to being thrown away after the request."""


class MetadataCache:
    """
    Per-path store of existence, stat and body results.

    Entries are keyed by the decoded request path and created only for paths
    the policy matches. Other requests get a throwaway entry. Population is
    not synchronized: concurrent first requests for the same path may probe
    the filesystem more than once, each writing the same result.

    :param policy: Decides which request paths are cached, defaults to caching nothing
    :type policy: tp.Optional[CachePolicy]
    :param max_entries: Evict the least frequently used entry past this many,
        defaults to None (grow without bound)
    :type max_entries: tp.Optional[int]
    :param file_manager: Performs the filesystem probes and reads, defaults to AsyncFileManager
    :type file_manager: tp.Optional[AsyncBaseFileManager]
    """

    def __init__(
        self,
        policy: tp.Optional[tp.Union[CachePolicy, tp.Any]] = None,
        max_entries: tp.Optional[int] = None,
        file_manager: tp.Optional[AsyncBaseFileManager] = None,
    ) -> None:
        if max_entries is not None and (
            isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries <= 0
        ):
            raise ConfigurationError("max_entries must be a positive integer")

        self.policy = as_policy(policy)
        self.file_manager = file_manager if file_manager is not None else AsyncFileManager()
        self._entries: tp.Union[tp.Dict[str, CacheEntry], LFUCache[str, CacheEntry]] = (
            LFUCache(max_entries) if max_entries is not None else {}
        )

    def get(self, key: str) -> tp.Optional[CacheEntry]:
        if key not in self._entries:
            return None
        return self._entries.get(key)

    def ensure(self, key: str) -> CacheEntry:
        entry = self.get(key)
        if entry is not None:
            return entry

        if not self.policy.matches(key):
            return CacheEntry()

        entry = CacheEntry(persistent=True)
        if isinstance(self._entries, LFUCache):
            self._entries.put(key, entry)
        else:
            self._entries[key] = entry
        logger.debug("Created cache entry: key=%s entries=%d", key, len(self._entries))
        return entry

    async def exists_cached(
        self,
        cached: tp.Dict[str, bool],
        key: str,
        path: str,
        *,
        refresh: bool = False,
    ) -> bool:
        """
        Return whether ``path`` exists, probing only when ``key`` is not yet recorded in ``cached``.

        With ``refresh`` the filesystem is always probed and the result recorded.
        """
        if not refresh and key in cached:
            return cached[key]
        result = cached[key] = await self.file_manager.exists(path)
        return result

    async def stat_cached(self, entry: CacheEntry, path: str) -> os.stat_result:
        stats = entry.stats.get(path)
        if stats is None:
            stats = entry.stats[path] = await self.file_manager.stat(path)
        return stats

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
