from __future__ import annotations

import errno
import logging
import mimetypes
import os
import stat
import typing as t
from typing import AsyncGenerator

from staticsend._cache import CacheEntry, MetadataCache
from staticsend._core.models import SendContext
from staticsend._exceptions import InternalError, MaliciousPathError, NotFoundError
from staticsend._files import AsyncBaseFileManager
from staticsend._options import Options
from staticsend._resolve_path import resolve_path
from staticsend._utils import decode_path, format_http_date, is_hidden, strip_root

logger = logging.getLogger("staticsend.send")

__all__ = ("send",)

NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENAMETOOLONG, errno.ENOTDIR})

# (Accept-Encoding token, file suffix, option name), in order of preference
PRECOMPRESSED_VARIANTS = (
    ("br", "br", "brotli"),
    ("gzip", "gz", "gzip"),
)

# media types of files that are themselves compressed, keyed by mimetypes encoding
COMPRESSED_FILE_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
}


async def send(
    ctx: SendContext,
    path: str,
    options: t.Optional[Options] = None,
    *,
    cache: t.Optional[MetadataCache] = None,
) -> t.Optional[str]:
    """
    Serve the file at the request ``path`` into ``ctx.response``.

    The path is resolved under ``options.root``. A precompressed sibling is
    picked when the client accepts it, a configured extension is appended
    when the file name has none, and a directory is swapped for its index
    file.

    :param ctx: Request/response handle
    :type ctx: SendContext
    :param path: Raw, percent-encoded request path
    :type path: str
    :param options: Send options, defaults to Options()
    :type options: t.Optional[Options]
    :param cache: Metadata cache shared between requests, defaults to a cache that stores nothing
    :type cache: t.Optional[MetadataCache]
    :raises MaliciousPathError: The path cannot be decoded, holds a NUL byte or is absolute
    :raises ForbiddenPathError: The path climbs above the root
    :raises NotFoundError: Nothing exists at the final path
    :raises InternalError: Any other stat failure
    :return: The served filesystem path, or None when the request is not handled
        (a hidden path, or a directory without index support)
    :rtype: t.Optional[str]
    """
    if not path:
        raise ValueError("path is required")

    options = options if options is not None else Options()
    cache = cache if cache is not None else MetadataCache()

    trailing_slash = path.endswith("/")
    decoded = decode_path(strip_root(path))
    if decoded is None:
        raise MaliciousPathError("Failed to decode", path=path)

    entry = cache.ensure(decoded)

    if options.index and trailing_slash:
        decoded += options.index

    resolved = resolve_path(options.root, decoded)
    logger.debug("Resolved request path: path=%s resolved=%s", path, resolved)

    if not options.hidden and is_hidden(options.root, resolved):
        logger.debug("Skipping hidden path: %s", resolved)
        return None

    resolved, suffix = await _negotiate_encoding(ctx, cache, entry, resolved, options)

    if options.extensions and "." not in os.path.basename(resolved):
        resolved = await _resolve_extension(cache, entry, resolved, options.extensions)

    try:
        stats = await cache.stat_cached(entry, resolved)

        # directories are served through their index file, with or without a trailing slash
        if stat.S_ISDIR(stats.st_mode):
            if not (options.format and options.index):
                logger.debug("Directory without index support: %s", resolved)
                return None
            resolved = f"{resolved}{os.sep}{options.index}"
            stats = await cache.stat_cached(entry, resolved)
    except OSError as exc:
        if exc.errno in NOT_FOUND_ERRNOS:
            raise NotFoundError(path=resolved) from exc
        raise InternalError(str(exc), path=resolved) from exc

    _set_response_headers(ctx, resolved, suffix, stats, options)

    buffered = entry.bodies.get(resolved)
    if buffered is not None:
        logger.debug("Serving buffered body: path=%s size=%d", resolved, len(buffered))
        ctx.response.body = buffered
    else:
        ctx.response.body = _stream_body(cache.file_manager, entry, resolved)

    return resolved


async def _negotiate_encoding(
    ctx: SendContext,
    cache: MetadataCache,
    entry: CacheEntry,
    path: str,
    options: Options,
) -> t.Tuple[str, str]:
    for coding, suffix, option_name in PRECOMPRESSED_VARIANTS:
        if (
            ctx.accepts_encodings(coding, "identity") == coding
            and getattr(options, option_name)
            and await cache.exists_cached(entry.encodings, suffix, f"{path}.{suffix}")
        ):
            ctx.response.headers["Content-Encoding"] = coding
            ctx.response.headers.pop("Content-Length", None)
            logger.debug("Selected precompressed variant: path=%s encoding=%s", path, coding)
            return f"{path}.{suffix}", f".{suffix}"
    return path, ""


async def _resolve_extension(
    cache: MetadataCache,
    entry: CacheEntry,
    path: str,
    extensions: t.Sequence[str],
) -> str:
    for extension in extensions:
        candidate = f"{path}{extension}"
        # candidates are always probed again; the recorded result is informational
        if await cache.exists_cached(entry.exists, candidate, candidate, refresh=True):
            logger.debug("Resolved extension: path=%s candidate=%s", path, candidate)
            return candidate
    return path


def _set_response_headers(
    ctx: SendContext,
    path: str,
    suffix: str,
    stats: os.stat_result,
    options: Options,
) -> None:
    response = ctx.response

    if options.set_headers is not None:
        options.set_headers(response, path, stats)

    response.headers["Content-Length"] = str(stats.st_size)

    if "Last-Modified" not in response.headers:
        response.headers["Last-Modified"] = format_http_date(stats.st_mtime)

    if "Cache-Control" not in response.headers:
        directives = [f"max-age={int(options.max_age // 1000)}"]
        if options.immutable:
            directives.append("immutable")
        response.headers["Cache-Control"] = ",".join(directives)

    if "Content-Type" not in response.headers:
        content_type = guess_content_type(path, suffix)
        if content_type is not None:
            response.headers["Content-Type"] = content_type


def guess_content_type(path: str, suffix: str = "") -> t.Optional[str]:
    """
    Guess the media type from the file name, ignoring a precompressed ``suffix``.

    A compressed file served as-is is typed by its outer extension, not by
    the file it wraps.

    Examples:
        >>> guess_content_type("/srv/index.html.br", ".br")
        'text/html'
        >>> guess_content_type("/srv/index.html.gz")
        'application/gzip'
        >>> guess_content_type("/srv/README") is None
        True
    """
    name = os.path.basename(path)
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    content_type, encoding = mimetypes.guess_type(name)
    if encoding is not None:
        return COMPRESSED_FILE_TYPES.get(encoding)
    return content_type


async def _stream_body(
    file_manager: AsyncBaseFileManager,
    entry: CacheEntry,
    path: str,
) -> AsyncGenerator[bytes, None]:
    # the buffer is committed only once the whole file has been read
    chunks: t.Optional[t.List[bytes]] = [] if entry.persistent else None
    stream = file_manager.iter_from(path)
    try:
        async for chunk in stream:
            if chunks is not None:
                chunks.append(chunk)
            yield chunk
    finally:
        await stream.aclose()
    if chunks is not None:
        entry.bodies[path] = b"".join(chunks)
        logger.debug("Buffered body: path=%s size=%d", path, len(entry.bodies[path]))
