from __future__ import annotations

import gzip
import os
import typing as t
from pathlib import Path

import pytest

from staticsend import Headers, Request, SendContext
from staticsend._files import AsyncFileManager

INDEX_HTML = b"<!doctype html><title>home</title>"
STYLE_CSS = b"body { color: red; }"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def site(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html
        style.css, style.css.br, style.css.gz
        about.html
        docs/                (no index file)
        blog/index.html
        .secret
        .git/config
    """
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "style.css").write_bytes(STYLE_CSS)
    (tmp_path / "style.css.br").write_bytes(b"brotli-bytes")
    (tmp_path / "style.css.gz").write_bytes(gzip.compress(STYLE_CSS))
    (tmp_path / "about.html").write_bytes(b"about")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "readme.txt").write_bytes(b"readme")
    (tmp_path / "blog").mkdir()
    (tmp_path / "blog" / "index.html").write_bytes(b"blog")
    (tmp_path / ".secret").write_bytes(b"secret")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_bytes(b"[core]")
    # fixed mtime so Last-Modified is predictable
    for path in tmp_path.rglob("*"):
        os.utime(path, (784111777, 784111777))
    return tmp_path


@pytest.fixture()
def make_context() -> t.Callable[..., SendContext]:
    def factory(accept_encoding: str | None = None) -> SendContext:
        headers = Headers({})
        if accept_encoding is not None:
            headers["Accept-Encoding"] = accept_encoding
        return SendContext(request=Request(headers=headers))

    return factory


class CountingFileManager(AsyncFileManager):
    """Records every filesystem probe made through it."""

    def __init__(self, chunk_size: int = 4) -> None:
        super().__init__(chunk_size=chunk_size)
        self.calls: list[tuple[str, str]] = []

    async def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        return await super().exists(path)

    async def stat(self, path: str) -> os.stat_result:
        self.calls.append(("stat", path))
        return await super().stat(path)

    def count(self, kind: str, path: str | Path) -> int:
        return self.calls.count((kind, str(path)))


@pytest.fixture()
def file_manager() -> CountingFileManager:
    return CountingFileManager()
