"""Classification of syslog-framed log-drain lines by originating subsystem."""

from drainmetrics.core.models import MessageKind

HEADER_DELIMITER = " - "

# Header tokens: length, priority, timestamp, host, app name, process id
_MIN_HEADER_TOKENS = 6


def split_line(line: str) -> tuple[list[str], str] | None:
    """Split a raw line into its header tokens and message body.

    The body is the text between the first and second delimiter; anything
    after a second ``" - "`` is dropped. Header tokens are separated by ASCII
    spaces only.

    Returns:
        (headers, body), or None when the delimiter is missing or the
        header has fewer than six tokens.
    """
    parts = line.split(HEADER_DELIMITER)
    if len(parts) < 2:
        return None
    headers = [token for token in parts[0].strip().split(" ") if token]
    if len(headers) < _MIN_HEADER_TOKENS:
        return None
    return headers, parts[1]


def route(app_name: str, proc_id: str, body: str) -> MessageKind | None:
    """Select the message kind for an (app name, process id) pair.

    Lines from ``app/api`` that do not announce a release are routed as
    scaling messages; whether they really are is decided when parsing.
    """
    if app_name == "heroku":
        if proc_id == "router":
            return MessageKind.ROUTER
        return MessageKind.DYNO_SAMPLE
    if app_name == "app":
        if proc_id == "api":
            if body.startswith("Release"):
                return MessageKind.RELEASE
            return MessageKind.SCALING
        if proc_id == "heroku-postgres":
            return MessageKind.PG_SAMPLE
        if proc_id == "heroku-redis":
            return MessageKind.REDIS_SAMPLE
    return None


def classify(line: str) -> tuple[MessageKind, str] | None:
    """Classify a raw log-drain line.

    Args:
        line: One syslog-framed line, e.g.
            ``255 <158>1 2015-04-02T11:52:34+00:00 host heroku router - at=info``.

    Returns:
        (kind, body) for a routable line, None for anything else.
    """
    split = split_line(line)
    if split is None:
        return None
    headers, body = split
    _host, app_name, proc_id = headers[3:6]
    kind = route(app_name, proc_id, body)
    if kind is None:
        return None
    return kind, body
