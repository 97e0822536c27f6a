from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Union,
)

"""
HTTP token helpers and Accept-Encoding negotiation.

Token rules follow RFC 7230, Section 3.2.6.
"""


def is_char(c: str) -> bool:
    """
    Check if character is a valid ASCII character (0-127).

    Per RFC 7230: CHAR = any US-ASCII character (octets 0 - 127)
    """
    if not c:
        return False
    return ord(c) <= 127


def is_ctl(c: str) -> bool:
    """
    Check if character is a control character.

    Per RFC 7230: CTL = control characters (0-31 and 127)
    """
    if not c:
        return False
    b = ord(c)
    return b <= 31 or b == 127


def is_separator(c: str) -> bool:
    if not c:
        return False
    return c in '()<>@,;:\\"/[]?={} \t'


def is_token(c: str) -> bool:
    """
    Check if character is valid in an HTTP token.

    Examples:
        >>> is_token('a')
        True
        >>> is_token('-')
        True
        >>> is_token(' ')
        False
        >>> is_token('=')
        False
    """
    return is_char(c) and not is_ctl(c) and not is_separator(c)


class Headers(MutableMapping[str, str]):
    """
    Case-insensitive header mapping.

    Assigning a key replaces every previous value for that key, reading a key
    joins repeated values with ", ".
    """

    def __init__(self, headers: Mapping[str, Union[str, List[str]]] | None = None) -> None:
        self._headers = {k.lower(): ([v] if isinstance(v, str) else v[:]) for k, v in (headers or {}).items()}

    def get_list(self, key: str) -> Optional[List[str]]:
        return self._headers.get(key.lower(), None)

    def add(self, key: str, value: str) -> None:
        self._headers.setdefault(key.lower(), []).append(value)

    def __getitem__(self, key: str) -> str:
        return ", ".join(self._headers[key.lower()])

    def __setitem__(self, key: str, value: str) -> None:
        self._headers[key.lower()] = [value]

    def __delitem__(self, key: str) -> None:
        del self._headers[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return repr(self._headers)

    def __str__(self) -> str:
        return str(self._headers)

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._headers == other_headers._headers  # type: ignore


@dataclass
class AcceptedEncoding:
    coding: str
    quality: float
    order: int


def parse_quality(value: str) -> float:
    try:
        quality = float(value)
    except ValueError:
        return 0.0
    if quality != quality:  # NaN
        return 0.0
    return quality


def parse_accept_encoding(value: str | None) -> List[AcceptedEncoding]:
    """
    Parse an Accept-Encoding field value.

    A missing or empty value yields only ``identity``. Unless ``identity`` (or
    ``*``) is listed explicitly, it is appended with the lowest quality seen
    in the header.

    Example:
        ```
        >>> [(e.coding, e.quality) for e in parse_accept_encoding("gzip;q=0.5, br")]
        [('gzip', 0.5), ('br', 1.0), ('identity', 0.5)]
        ```
    """
    accepted: List[AcceptedEncoding] = []
    has_identity = False
    min_quality = 1.0

    for item in (value or "").split(","):
        coding, _, params = item.strip().partition(";")
        coding = coding.strip().lower()
        if not coding or not all(is_token(c) for c in coding):
            continue

        quality = 1.0
        for param in params.split(";"):
            name, _, raw = param.strip().partition("=")
            if name.strip().lower() == "q":
                quality = parse_quality(raw.strip())
                break

        has_identity = has_identity or coding in ("identity", "*")
        # a zero quality does not lower the implicit identity quality
        min_quality = min(min_quality, quality or 1.0)
        accepted.append(AcceptedEncoding(coding=coding, quality=quality, order=len(accepted)))

    if not has_identity:
        accepted.append(AcceptedEncoding(coding="identity", quality=min_quality, order=len(accepted)))

    return accepted


def _encoding_priority(coding: str, accepted: Sequence[AcceptedEncoding]) -> tuple[int, float, int] | None:
    # (specificity, quality, order); exact matches outrank "*"
    best: tuple[int, float, int] | None = None
    for candidate in accepted:
        if candidate.coding == coding.lower():
            specificity = 1
        elif candidate.coding == "*":
            specificity = 0
        else:
            continue
        priority = (specificity, candidate.quality, candidate.order)
        if best is None or priority > best:
            best = priority
    return best


def preferred_encoding(accept_encoding: str | None, offered: Sequence[str]) -> str | None:
    """
    Pick the offered encoding the client prefers, or ``None`` if it accepts none of them.
    """
    accepted = parse_accept_encoding(accept_encoding)
    ranked = []
    for index, coding in enumerate(offered):
        priority = _encoding_priority(coding, accepted)
        if priority is None or priority[1] <= 0:
            continue
        specificity, quality, order = priority
        ranked.append((-quality, -specificity, order, index, coding))

    if not ranked:
        return None
    return min(ranked)[-1]
