from __future__ import annotations

import logging
import types
import typing as t

from typing_extensions import Self

from staticsend._cache import MetadataCache
from staticsend._core.models import SendContext
from staticsend._options import Options
from staticsend._send import send

logger = logging.getLogger("staticsend.sender")

__all__ = ("AsyncStaticSender",)


class AsyncStaticSender:
    """
    Serves files for many requests with one shared metadata cache.

    The cache lives as long as the sender: it is created here (from
    ``options.cache`` unless one is passed in) and emptied by ``aclose``.

    Args:
        options: Send options used for every request. Defaults to Options().
        cache: Metadata cache to use. Defaults to a MetadataCache built from ``options.cache``.

    Example:
        ```python
        from staticsend import AsyncStaticSender, Options, SendContext

        async with AsyncStaticSender(Options(root="public", index="index.html", cache=r"\\.css$")) as sender:
            served = await sender.send(SendContext(), "/")
        ```
    """

    def __init__(
        self,
        options: t.Optional[Options] = None,
        cache: t.Optional[MetadataCache] = None,
    ) -> None:
        self.options = options if options is not None else Options()
        self.cache = cache if cache is not None else MetadataCache(policy=self.options.cache)

    async def send(self, ctx: SendContext, path: str) -> t.Optional[str]:
        return await send(ctx, path, self.options, cache=self.cache)

    async def aclose(self) -> None:
        logger.debug("Closing sender, dropping %d cache entries", len(self.cache))
        self.cache.clear()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: t.Optional[t.Type[BaseException]] = None,
        exc_value: t.Optional[BaseException] = None,
        traceback: t.Optional[types.TracebackType] = None,
    ) -> None:
        await self.aclose()
