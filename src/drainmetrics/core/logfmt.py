"""Decoder for space-delimited key=value (logfmt) message bodies."""

import re

from drainmetrics.core.models import MetricValue

_SPACE_RE = re.compile(r"\s*")
_PAIR_RE = re.compile(
    r"""
    (?P<key>[^\s="]+)
    (?:=
        (?:"(?P<quoted>(?:[^"\\]|\\.)*)"
        |(?P<bare>[^\s"]*))
    )?
    (?=\s|$)
    """,
    re.VERBOSE,
)
_ESCAPE_RE = re.compile(r"\\(.)")


class LogfmtError(ValueError):
    """Raised when a message body cannot be decoded as key=value pairs."""


def decode(body: str) -> list[tuple[str, str]]:
    """Decode a logfmt body into (key, value) pairs in order of appearance.

    Double-quoted values may contain spaces and backslash-escaped quotes.
    Backslashes in unquoted values are kept as-is. A bare ``key`` decodes
    to an empty value.

    Args:
        body: Message body, e.g. ``at=info path="/users" connect=1ms``.

    Returns:
        List of (key, value) tuples. Duplicate keys are kept in order.

    Raises:
        LogfmtError: If a quote is left open or a token has an empty key.
    """
    pairs: list[tuple[str, str]] = []
    pos = _SPACE_RE.match(body).end()
    while pos < len(body):
        match = _PAIR_RE.match(body, pos)
        if match is None:
            token = body[pos:].split(None, 1)[0]
            if token.startswith("="):
                raise LogfmtError(f"empty key in token {token!r}")
            raise LogfmtError(f"malformed token at offset {pos}: {body!r}")
        quoted = match.group("quoted")
        if quoted is not None:
            value = _ESCAPE_RE.sub(r"\1", quoted)
        else:
            value = match.group("bare") or ""
        pairs.append((match.group("key"), value))
        pos = _SPACE_RE.match(body, match.end()).end()
    return pairs

def split_value(value: str) -> MetricValue:
    """Split a value at its rightmost ASCII digit into magnitude and unit.

    Examples:
        ``"233092kB"`` -> ``MetricValue("233092", "kB")``
        ``"0.315"`` -> ``MetricValue("0.315", "")``
        ``"info"`` -> ``MetricValue("info", "")``
    """
    for i in range(len(value) - 1, -1, -1):
        # str.isdigit() would also accept non-ASCII digits
        if "0" <= value[i] <= "9":
            return MetricValue(magnitude=value[: i + 1], unit=value[i + 1 :])
    return MetricValue(magnitude=value, unit="")
