from __future__ import annotations

import os
import re
import typing as tp
from email.utils import formatdate
from urllib.parse import unquote

_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def strip_root(path: str) -> str:
    """
    Drop the leading root of a request path so it can be joined onto a filesystem root.

    Examples:
        >>> strip_root("/docs/index.html")
        'docs/index.html'
        >>> strip_root("//etc/passwd")
        '/etc/passwd'
    """
    if path.startswith(("/", os.sep)):
        return path[1:]
    return path


def decode_path(path: str) -> tp.Optional[str]:
    """
    Percent-decode a request path.

    Returns None when the path holds a malformed escape or decodes to invalid UTF-8.
    """
    if _INVALID_ESCAPE.search(path):
        return None
    try:
        return unquote(path, errors="strict")
    except UnicodeDecodeError:
        return None


def is_hidden(root: str, path: str) -> bool:
    """
    Check whether any segment of ``path`` below ``root`` starts with a dot.

    ``path`` must be a resolved path nested under the absolute form of ``root``.
    """
    relative = path[len(os.path.abspath(root)) :]
    return any(segment.startswith(".") for segment in relative.split(os.sep))


def format_http_date(timestamp: float) -> str:
    """
    Format a POSIX timestamp as an HTTP date (RFC 1123).

    Example output: 'Sun, 26 Oct 2025 12:34:56 GMT'
    """
    return formatdate(timeval=timestamp, localtime=False, usegmt=True)

