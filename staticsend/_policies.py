from __future__ import annotations

import abc
import re
import typing as t
from dataclasses import dataclass

from staticsend._exceptions import ConfigurationError

__all__ = (
    "CachePolicy",
    "NoCachePolicy",
    "AlwaysCachePolicy",
    "PatternPolicy",
    "PredicatePolicy",
    "as_policy",
)


class CachePolicy(abc.ABC):
    """
    Decides, once per request, whether the decoded request path may use the shared metadata cache.
    """

    @abc.abstractmethod
    def matches(self, path: str) -> bool:
        pass


@dataclass(frozen=True)
class NoCachePolicy(CachePolicy):
    def matches(self, path: str) -> bool:
        return False


@dataclass(frozen=True)
class AlwaysCachePolicy(CachePolicy):
    def matches(self, path: str) -> bool:
        return True


@dataclass(frozen=True)
class PatternPolicy(CachePolicy):
    """
    Caches paths in which the regular expression matches anywhere.
    """

    pattern: t.Pattern[str]

    def __init__(self, pattern: str | t.Pattern[str]) -> None:
        object.__setattr__(self, "pattern", re.compile(pattern) if isinstance(pattern, str) else pattern)

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


@dataclass(frozen=True)
class PredicatePolicy(CachePolicy):
    predicate: t.Callable[[str], bool]

    def matches(self, path: str) -> bool:
        return bool(self.predicate(path))


def as_policy(value: t.Any) -> CachePolicy:
    """
    Normalize the accepted spellings of a cache option into a policy.

    ``None`` and ``False`` disable caching, ``True`` caches every path,
    strings and compiled patterns become a PatternPolicy and callables a
    PredicatePolicy.
    """
    if isinstance(value, CachePolicy):
        return value
    if value is None or value is False:
        return NoCachePolicy()
    if value is True:
        return AlwaysCachePolicy()
    if isinstance(value, (str, re.Pattern)):
        return PatternPolicy(value)
    if callable(value):
        return PredicatePolicy(value)
    raise ConfigurationError(f"option cache must be a policy, pattern or callable, got {type(value).__name__!r}")
