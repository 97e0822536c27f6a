from __future__ import annotations

import os
from typing import AsyncGenerator

import anyio

CHUNK_SIZE = 64 * 1024


class AsyncBaseFileManager:
    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    async def exists(self, path: str) -> bool:
        raise NotImplementedError()

    async def stat(self, path: str) -> os.stat_result:
        raise NotImplementedError()

    def iter_from(self, path: str) -> AsyncGenerator[bytes, None]:
        raise NotImplementedError()


class AsyncFileManager(AsyncBaseFileManager):
    async def exists(self, path: str) -> bool:
        try:
            return await anyio.Path(path).exists()
        except (OSError, ValueError):
            return False

    async def stat(self, path: str) -> os.stat_result:
        return await anyio.Path(path).stat()

    async def iter_from(self, path: str) -> AsyncGenerator[bytes, None]:
        async with await anyio.open_file(path, "rb") as f:
            while True:
                chunk = await f.read(self.chunk_size)
                if not chunk:
                    return
                yield chunk
