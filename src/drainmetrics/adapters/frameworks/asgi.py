"""ASGI generic adapter for the log-drain ingestion endpoint.

This adapter provides a framework-agnostic ASGI application that can be used
with any ASGI server (uvicorn, hypercorn, daphne) without requiring FastAPI
as a dependency.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any
from urllib.parse import parse_qs

from drainmetrics.adapters.frameworks.ingest import (
    AUTH_REALM,
    authenticate,
    enqueue_lines,
)
from drainmetrics.adapters.frameworks.query_params import (
    _parse_prefix_param,
    _parse_tags_param,
)
from drainmetrics.core.models import LogData

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _parse_query_params(scope: Scope) -> dict[str, list[str]]:
    """Parse query string from ASGI scope into parameter dictionary.

    Args:
        scope: ASGI scope dictionary containing request metadata.

    Returns:
        Dictionary mapping parameter names to lists of values.
        Returns empty dict if query_string is missing or empty.
    """
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return parse_qs(query_string)


def _get_header(scope: Scope, header_name: str) -> str | None:
    """Return the first value of a header (case-insensitive), or None."""
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return value.decode("latin-1")
    return None


async def _read_body(receive: Receive) -> bytes:
    """Read the complete request body from the ASGI receive channel."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def _send_response(
    send: Send,
    status: int,
    content_type: str,
    body: str,
    extra_headers: list[tuple[bytes, bytes]] | None = None,
) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
        extra_headers: Additional raw headers.
    """
    headers = [(b"content-type", content_type.encode())]
    headers.extend(extra_headers or [])
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_lifespan(
    receive: Receive,
    send: Send,
    on_startup: Callable[[], Awaitable[None]] | None,
    on_shutdown: Callable[[], Awaitable[None]] | None,
) -> None:
    """Answer ASGI lifespan messages, running the optional hooks."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            if on_startup is not None:
                await on_startup()
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            if on_shutdown is not None:
                await on_shutdown()
            await send({"type": "lifespan.shutdown.complete"})
            return


def create_asgi_app(
    inbox: asyncio.Queue[LogData],
    credentials: dict[str, str],
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> ASGIApp:
    """Create an ASGI app with the log-drain ``/`` and ``/status`` endpoints.

    Args:
        inbox: Queue the received lines are put on.
        credentials: Mapping of app name to basic-auth password.
        on_startup: Coroutine function run on lifespan startup.
        on_shutdown: Coroutine function run on lifespan shutdown.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send, on_startup, on_shutdown)
            return
        if scope["type"] != "http":
            return

        path = scope["path"]
        method = scope["method"]

        if path == "/status" and method == "GET":
            await _send_response(send, 200, "text/plain", "OK")
        elif path == "/":
            if method != "POST":
                await _send_response(
                    send,
                    405,
                    "text/plain",
                    "Method Not Allowed",
                    [(b"allow", b"POST")],
                )
                return
            drain_app = authenticate(_get_header(scope, "authorization"), credentials)
            if drain_app is None:
                await _send_response(
                    send,
                    401,
                    "text/plain",
                    "Unauthorized",
                    [(b"www-authenticate", AUTH_REALM.encode())],
                )
                return
            params = _parse_query_params(scope)
            body = await _read_body(receive)
            count = await enqueue_lines(
                inbox,
                body,
                drain_app,
                tags=_parse_tags_param(params),
                prefix=_parse_prefix_param(params),
            )
            logger.debug("Queued %d lines", count, extra={"app": drain_app})
            await _send_response(send, 200, "text/plain", "OK")
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
