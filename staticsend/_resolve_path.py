from __future__ import annotations

import os
import re
import typing as tp

from staticsend._exceptions import ForbiddenPathError, MaliciousPathError

__all__ = ("resolve_path",)

UP_PATH_REGEXP = re.compile(r"(?:^|[\\/])\.\.(?:[\\/]|$)")


def resolve_path(root: tp.Any, relative_path: tp.Any = None) -> str:
    """
    Resolve an untrusted relative path against a trusted root.

    With a single argument the argument is the relative path and the root is
    the current working directory.

    :param root: The trusted root directory
    :type root: str
    :param relative_path: The untrusted path, relative to ``root``
    :type relative_path: str
    :raises MaliciousPathError: The path holds a NUL byte or is absolute
    :raises ForbiddenPathError: The path climbs above ``root``
    :return: An absolute, normalized path equal to ``root`` or nested under it
    :rtype: str
    """
    if relative_path is None:
        if root is None:
            raise TypeError("argument relative_path is required")
        root, relative_path = os.getcwd(), root

    if not isinstance(root, str):
        raise TypeError("argument root must be a string")

    if not isinstance(relative_path, str):
        raise TypeError("argument relative_path must be a string")

    # containing NUL bytes is malicious
    if "\0" in relative_path:
        raise MaliciousPathError(path=relative_path)

    # path should never be absolute
    if os.path.isabs(relative_path):
        raise MaliciousPathError(path=relative_path)

    # path outside root
    if UP_PATH_REGEXP.search(os.path.normpath("." + os.sep + relative_path)):
        raise ForbiddenPathError(path=relative_path)

    return os.path.normpath(os.path.join(os.path.abspath(root), relative_path))
