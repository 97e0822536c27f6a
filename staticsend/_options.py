from __future__ import annotations

import os
import typing as t
from dataclasses import dataclass, field, fields

from staticsend._core.models import Response
from staticsend._exceptions import ConfigurationError
from staticsend._policies import CachePolicy, NoCachePolicy, as_policy

__all__ = ("Options", "SetHeaders")

SetHeaders = t.Callable[[Response, str, os.stat_result], None]

_ALIASES = {
    "maxage": "max_age",
    "maxAge": "max_age",
    "setHeaders": "set_headers",
}


@dataclass(frozen=True)
class Options:
    """
    Immutable configuration for a send call.

    Args:
        root: Directory files are served from. Empty means the current working directory.
        index: File served for directory requests, e.g. "index.html".
        max_age: Cache-Control max-age in milliseconds.
        immutable: Add the "immutable" Cache-Control directive.
        hidden: Allow serving paths with a segment that starts with a dot.
        format: Serve ``index`` for directory requests without a trailing slash.
        extensions: Extensions tried, in order, when the requested file has none.
        brotli: Serve a ".br" sibling when the client accepts brotli.
        gzip: Serve a ".gz" sibling when the client accepts gzip.
        set_headers: Called with (response, path, stat) before the default headers are set.
        cache: Which request paths may use the shared metadata cache.
    """

    root: str = ""
    index: t.Optional[str] = None
    max_age: t.Union[int, float] = 0
    immutable: bool = False
    hidden: bool = False
    format: bool = True
    extensions: t.Optional[t.Tuple[str, ...]] = None
    brotli: bool = True
    gzip: bool = True
    set_headers: t.Optional[SetHeaders] = None
    cache: CachePolicy = field(default_factory=NoCachePolicy)

    def __post_init__(self) -> None:
        if isinstance(self.root, os.PathLike):
            object.__setattr__(self, "root", os.fspath(self.root))
        if not isinstance(self.root, str):
            raise ConfigurationError("option root must be a string")

        if self.index is not None and not isinstance(self.index, str):
            raise ConfigurationError("option index must be a string")

        if isinstance(self.max_age, bool) or not isinstance(self.max_age, (int, float)) or self.max_age < 0:
            raise ConfigurationError("option max_age must be a non-negative number of milliseconds")

        if self.set_headers is not None and not callable(self.set_headers):
            raise ConfigurationError("option set_headers must be function")

        object.__setattr__(self, "extensions", _normalize_extensions(self.extensions))
        object.__setattr__(self, "cache", as_policy(self.cache))

    @classmethod
    def from_mapping(cls, mapping: t.Mapping[str, t.Any]) -> "Options":
        """
        Build options from a plain mapping, accepting ``maxage``/``maxAge`` and ``setHeaders`` spellings.
        """
        known = {f.name for f in fields(cls)}
        kwargs: t.Dict[str, t.Any] = {}
        for key, value in mapping.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"unknown option {key!r}")
            if kwargs.get(name):
                # the first truthy spelling wins
                continue
            kwargs[name] = value
        return cls(**kwargs)


def _normalize_extensions(extensions: t.Any) -> t.Optional[t.Tuple[str, ...]]:
    if extensions is None or extensions is False:
        return None
    if isinstance(extensions, (str, bytes)) or not isinstance(extensions, (list, tuple)):
        raise ConfigurationError("option extensions must be array of strings or false")
    for extension in extensions:
        if not isinstance(extension, str):
            raise ConfigurationError("option extensions must be array of strings or false")
    return tuple(extension if extension.startswith(".") else f".{extension}" for extension in extensions)
