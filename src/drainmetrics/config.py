"""Environment-driven settings for the drain service."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a usable service."""


DEFAULT_STATSD_URL = "127.0.0.1:8125"


def _password_var(app: str) -> str:
    """Name of the environment variable holding an app's password."""
    return f"{app.upper().replace('-', '_')}_PASSWORD"


def _parse_statsd_url(url: str) -> tuple[str, int]:
    host, sep, port = url.rpartition(":")
    if not sep or not host:
        raise ConfigurationError(f"STATSD_URL must be host:port, got {url!r}")
    try:
        return host, int(port)
    except ValueError as e:
        raise ConfigurationError(f"Invalid STATSD_URL port: {port!r}") from e


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Service settings.

    Attributes:
        credentials: Mapping of allowed app name to basic-auth password.
        statsd_host: Hostname of the StatsD agent.
        statsd_port: UDP port of the StatsD agent.
        queue_size: Bound of the pipeline queues; 0 means unbounded.
        log_level: Level name for the drainmetrics package loggers.
    """

    credentials: dict[str, str] = field(default_factory=dict)
    statsd_host: str = "127.0.0.1"
    statsd_port: int = 8125
    queue_size: int = 100
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Reads ALLOWED_APPS, <APP>_PASSWORD, STATSD_URL, QUEUE_SIZE and
        LOG_LEVEL.

        Args:
            environ: Variables to read (default: os.environ).

        Raises:
            ConfigurationError: If an allowed app has no password or a
                value is malformed.
        """
        environ = os.environ if environ is None else environ
        apps = [a.strip() for a in environ.get("ALLOWED_APPS", "").split(",")]
        credentials: dict[str, str] = {}
        for app in filter(None, apps):
            password = environ.get(_password_var(app))
            if not password:
                raise ConfigurationError(
                    f"No password for app {app!r}: set {_password_var(app)}"
                )
            credentials[app] = password

        host, port = _parse_statsd_url(environ.get("STATSD_URL", DEFAULT_STATSD_URL))
        return cls(
            credentials=credentials,
            statsd_host=host,
            statsd_port=port,
            queue_size=_parse_int(environ, "QUEUE_SIZE", 100),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )
