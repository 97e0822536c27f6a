from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Optional, Union

from staticsend._core._headers import Headers, preferred_encoding

Body = Union[bytes, AsyncIterator[bytes]]


@dataclass
class Request:
    method: str = "GET"
    path: str = "/"
    headers: Headers = field(default_factory=lambda: Headers({}))


@dataclass
class Response:
    status_code: int = 200
    headers: Headers = field(default_factory=lambda: Headers({}))
    body: Optional[Body] = None

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire response body, replacing a streamed body with the collected bytes.
        """
        if self.body is None:
            return b""
        if isinstance(self.body, bytes):
            return self.body

        collected = b"".join([chunk async for chunk in self.body])
        self.body = collected
        return collected


@dataclass
class SendContext:
    """
    Per-request handle passed through the send pipeline.

    The pipeline reads request headers from ``request`` and writes headers and
    the body into ``response``.
    """

    request: Request = field(default_factory=Request)
    response: Response = field(default_factory=Response)

    def accepts_encodings(self, *encodings: str) -> str | None:
        return preferred_encoding(self.request.headers.get("Accept-Encoding"), encodings)
