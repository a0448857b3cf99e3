"""Shared test fixtures for all test modules."""

import base64
from collections.abc import Callable
from typing import Any

import pytest

try:
    import httpx
except ImportError:
    httpx = None

from drainmetrics.core.models import LogData

ROUTER_LINE = (
    '255 <158>1 2015-04-02T11:52:34.520012+00:00 host heroku router - at=info '
    'method=POST path="/users" host=myapp.com '
    "request_id=c1806361-2081-42e7-a8aa-92b6808eac8e "
    'fwd="24.76.242.18" dyno=web.1 connect=1ms service=37ms status=201 bytes=828'
)
DYNO_LINE = (
    "229 <45>1 2015-04-02T11:48:16.839257+00:00 host heroku web.1 - source=web.1 "
    "dyno=heroku.35930502.b9de5fce-44b7-4287-99a7-504519070cba "
    "sample#load_avg_1m=0.01 sample#load_avg_5m=0.02 sample#load_avg_15m=0.03"
)
POSTGRES_LINE = (
    "542 <134>1 2015-04-02T11:47:55+00:00 host app heroku-postgres - "
    "source=HEROKU_POSTGRESQL_TEAL addon=foo sample#current_transaction=6709 "
    "sample#db_size=18032824bytes sample#tables=16 sample#active-connections=4 "
    "sample#load-avg-1m=0.315 sample#memory-free=233092kB"
)
REDIS_LINE = (
    "542 <134>1 2015-04-02T11:47:55+00:00 host app heroku-redis - source=REDIS "
    "addon=foo sample#active-connections=73 sample#load-avg-5m=0 "
    "sample#memory-redis=176289040bytes sample#hit-rate=0.85243"
)
SCALING_LINE = (
    "222 <134>1 2017-05-13T15:35:33.787162+00:00 host app api - "
    "Scaled to mailer@3:Performance-L web@5:Standard-2X by user someuser@gmail.com"
)
BROKEN_LINE = (
    '222 <134>1 2015-04-07T16:01:43.517062+00:00 host heroku api - this_is="broken'
)
RELEASE_LINE = (
    "222 <134>1 2015-04-07T16:01:43.517062+00:00 host app api - "
    "Release v138 created by user foo@bar"
)


@pytest.fixture
def sample_lines() -> dict[str, str]:
    """Sample log-drain lines keyed by origin."""
    return {
        "router": ROUTER_LINE,
        "dyno": DYNO_LINE,
        "postgres": POSTGRES_LINE,
        "redis": REDIS_LINE,
        "scaling": SCALING_LINE,
        "broken": BROKEN_LINE,
        "release": RELEASE_LINE,
    }


@pytest.fixture
def canonical_lines() -> list[str]:
    """The six routable sample lines, one per message kind, in order."""
    return [
        ROUTER_LINE,
        DYNO_LINE,
        POSTGRES_LINE,
        REDIS_LINE,
        SCALING_LINE,
        RELEASE_LINE,
    ]


@pytest.fixture
def make_log_data() -> Callable[..., LogData]:
    """Factory fixture building LogData with test request context."""

    def _make(
        line: str,
        app: str = "test",
        tags: tuple[str, ...] = ("tag1", "tag2"),
        prefix: str = "prefix.",
    ) -> LogData:
        return LogData(line=line, app=app, tags=tags, prefix=prefix)

    return _make


class RecordingLogger:
    """DiagnosticLoggerPort implementation that keeps every call."""

    def __init__(self) -> None:
        self.debugs: list[str] = []
        self.warnings: list[str] = []

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.debugs.append(str(msg) % args if args else str(msg))

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.warnings.append(str(msg) % args if args else str(msg))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Fresh RecordingLogger for each test."""
    return RecordingLogger()


class RecordingSink:
    """MetricsSinkPort implementation that keeps every datagram."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.datagrams: list[str] = []
        self._fail_on = fail_on

    async def send(self, datagram: str) -> None:
        if self._fail_on is not None and self._fail_on in datagram:
            raise OSError("network unreachable")
        self.datagrams.append(datagram)


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Fresh RecordingSink for each test."""
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    """RecordingSink that fails on every router datagram."""
    return RecordingSink(fail_on="heroku.router")


@pytest.fixture
def basic_auth_header() -> Callable[[str, str], dict[str, str]]:
    """Factory fixture returning an Authorization header dict."""

    def _header(username: str, password: str) -> dict[str, str]:
        token = base64.b64encode(f"{username}:{password}".encode()).decode()
        return {"Authorization": f"Basic {token}"}

    return _header


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(inbox, {"test": "pass"})
            async with asgi_test_client(app) as client:
                response = await client.post("/", content=b"...")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
