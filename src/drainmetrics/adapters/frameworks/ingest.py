"""Shared ingestion helpers for framework adapters.

Authentication of drain requests and splitting of their payloads into
LogData lines for the pipeline inbox.
"""

import asyncio
import base64
import binascii
import hmac

from drainmetrics.core.models import LogData

AUTH_REALM = 'Basic realm="Authorization Required"'


def _parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """Extract (username, password) from a Basic Authorization header value.

    Returns:
        The credentials, or None if the header is missing or malformed.
    """
    if not header:
        return None
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def authenticate(header: str | None, credentials: dict[str, str]) -> str | None:
    """Check a Basic Authorization header against app credentials.

    Args:
        header: Value of the Authorization header, if any.
        credentials: Mapping of app name to password.

    Returns:
        The authenticated app name, or None.
    """
    parsed = _parse_basic_auth(header)
    if parsed is None:
        return None
    app, password = parsed
    expected = credentials.get(app)
    if expected is None:
        return None
    if not hmac.compare_digest(password.encode(), expected.encode()):
        return None
    return app


async def enqueue_lines(
    inbox: asyncio.Queue[LogData],
    body: bytes,
    app: str,
    tags: tuple[str, ...] = (),
    prefix: str = "",
) -> int:
    """Put one LogData per non-blank line of a drain payload on inbox.

    Waits for room when inbox is full. Invalid UTF-8 is replaced.

    Returns:
        Number of lines queued.
    """
    count = 0
    for line in body.decode("utf-8", errors="replace").split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        await inbox.put(LogData(line=line, app=app, tags=tags, prefix=prefix))
        count += 1
    return count
