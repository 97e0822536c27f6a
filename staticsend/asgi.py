from __future__ import annotations

import logging
import typing as t
from http import HTTPStatus
from urllib.parse import quote

from staticsend._core._headers import Headers
from staticsend._core.models import Request, Response, SendContext
from staticsend._exceptions import SendError
from staticsend._options import Options
from staticsend._sender import AsyncStaticSender

# Configure logger for this module
logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "HEAD")

# characters left unescaped when re-quoting a raw request path
PATH_SAFE = "/%:@!$&'()*+,;=~"


class _ASGIScope(t.TypedDict, total=False):
    """ASGI HTTP scope type."""

    type: str
    asgi: dict[str, str]
    http_version: str
    method: str
    scheme: str
    path: str
    raw_path: bytes
    query_string: bytes
    root_path: str
    headers: list[tuple[bytes, bytes]]
    server: tuple[str, int | None] | None
    client: tuple[str, int] | None
    state: dict[str, t.Any]
    extensions: dict[str, t.Any]


_Scope = _ASGIScope
_Receive = t.Callable[[], t.Awaitable[dict[str, t.Any]]]
_Send = t.Callable[[dict[str, t.Any]], t.Awaitable[None]]
_ASGIApp = t.Callable[[_Scope, _Receive, _Send], t.Awaitable[None]]


class StaticFiles:
    """
    ASGI application that serves files from a directory.

    Requests the sender does not handle (hidden paths, directories without an
    index, methods other than GET and HEAD) are passed to ``app`` when one is
    given, otherwise answered with 404 or 405. Send errors are rendered as
    plain-text responses carrying their status code.

    Args:
        options: Send options. Ignored when ``sender`` is given.
        app: ASGI application to fall through to.
        sender: Sender to use, defaults to AsyncStaticSender(options).

    Example:
        ```python
        from staticsend import Options
        from staticsend.asgi import StaticFiles

        app = StaticFiles(Options(root="public", index="index.html", max_age=3_600_000))
        ```
    """

    def __init__(
        self,
        options: Options | None = None,
        app: _ASGIApp | None = None,
        sender: AsyncStaticSender | None = None,
    ) -> None:
        self.app = app
        self.sender = sender if sender is not None else AsyncStaticSender(options)

        logger.info(
            "Initialized StaticFiles with root=%r, fallback app=%s",
            self.sender.options.root,
            type(app).__name__ if app else "None",
        )

    async def __call__(self, scope: _Scope, receive: _Receive, send: _Send) -> None:
        if scope["type"] != "http":
            logger.debug("Skipping non-HTTP request: type=%s", scope["type"])
            if self.app is not None:
                await self.app(scope, receive, send)
            return

        request = self._asgi_to_internal_request(scope)

        if request.method not in ALLOWED_METHODS:
            logger.debug("Method not served: method=%s path=%s", request.method, request.path)
            await self._fall_through(
                scope,
                receive,
                send,
                HTTPStatus.METHOD_NOT_ALLOWED,
                {"Allow": ", ".join(ALLOWED_METHODS)},
            )
            return

        ctx = SendContext(request=request, response=Response())
        include_body = request.method != "HEAD"

        try:
            served = await self.sender.send(ctx, request.path)
        except SendError as e:
            logger.debug("Send failed: path=%s status=%d error=%s", request.path, e.status_code, e)
            await self._send_status(send, e.status_code, include_body=include_body)
            return
        except Exception as e:
            logger.error(
                "Error serving request: method=%s path=%s error=%s",
                request.method,
                request.path,
                str(e),
                exc_info=True,
            )
            raise

        if served is None:
            logger.debug("Request not handled: path=%s", request.path)
            await self._fall_through(scope, receive, send, HTTPStatus.NOT_FOUND, include_body=include_body)
            return

        logger.info("Serving file: path=%s file=%s", request.path, served)
        await self._send_internal_response(ctx.response, send, include_body=include_body)

    def _asgi_to_internal_request(self, scope: _Scope) -> Request:
        raw_path = scope.get("raw_path")
        root_path = scope.get("root_path", "")
        if raw_path:
            # non-ASCII bytes are escaped so the path stays UTF-8 once decoded
            path = quote(raw_path.split(b"?", 1)[0], safe=PATH_SAFE)
            prefix = quote(root_path, safe=PATH_SAFE)
        else:
            path = quote(scope.get("path", "/"))
            prefix = quote(root_path)

        # a mounted app sees paths relative to its mount point
        if prefix and path.startswith(prefix) and path[len(prefix) : len(prefix) + 1] in ("", "/"):
            path = path[len(prefix) :] or "/"

        headers = Headers({})
        for key, value in scope.get("headers", []):
            headers.add(key.decode("latin1"), value.decode("latin1"))

        return Request(method=scope.get("method", "GET"), path=path, headers=headers)

    async def _fall_through(
        self,
        scope: _Scope,
        receive: _Receive,
        send: _Send,
        status_code: int,
        headers: dict[str, str] | None = None,
        include_body: bool = True,
    ) -> None:
        if self.app is not None:
            await self.app(scope, receive, send)
            return
        await self._send_status(send, status_code, headers, include_body=include_body)

    async def _send_status(
        self,
        send: _Send,
        status_code: int,
        headers: dict[str, str] | None = None,
        include_body: bool = True,
    ) -> None:
        body = HTTPStatus(status_code).phrase.encode("latin1")
        response = Response(
            status_code=status_code,
            headers=Headers(
                {
                    "Content-Type": "text/plain; charset=utf-8",
                    "Content-Length": str(len(body)),
                    **(headers or {}),
                }
            ),
            body=body,
        )
        await self._send_internal_response(response, send, include_body=include_body)

    async def _send_internal_response(self, response: Response, send: _Send, include_body: bool = True) -> None:
        headers: list[tuple[bytes, bytes]] = [
            (key.encode("latin1"), value.encode("latin1"))
            for key in response.headers
            for value in response.headers.get_list(key) or []
        ]

        await send(
            {
                "type": "http.response.start",
                "status": response.status_code,
                "headers": headers,
            }
        )

        body = response.body
        if body is None or isinstance(body, bytes):
            await send(
                {
                    "type": "http.response.body",
                    "body": body if body is not None and include_body else b"",
                    "more_body": False,
                }
            )
            return

        bytes_sent = 0
        try:
            if include_body:
                async for chunk in body:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
                    bytes_sent += len(chunk)
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        finally:
            aclose = getattr(body, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.debug("Response sent: status=%d total_bytes=%d", response.status_code, bytes_sent)

    async def aclose(self) -> None:
        """Drop the sender's cached metadata."""
        logger.info("Closing StaticFiles")
        await self.sender.aclose()
