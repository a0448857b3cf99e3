"""Core domain models for log-drain metric extraction."""

from dataclasses import dataclass, field
from enum import Enum


class MessageKind(Enum):
    """Originating subsystem of a classified log-drain line."""

    ROUTER = "router"
    DYNO_SAMPLE = "dyno_sample"
    PG_SAMPLE = "pg_sample"
    REDIS_SAMPLE = "redis_sample"
    SCALING = "scaling"
    RELEASE = "release"


@dataclass(frozen=True)
class LogData:
    """One inbound log-drain line plus the context of its request.

    Attributes:
        line: The raw syslog-framed line.
        app: Name of the app (tenant) that sent the line.
        tags: Tags supplied with the request, shared by all of its lines.
        prefix: Metric name prefix supplied with the request.
    """

    line: str
    app: str
    tags: tuple[str, ...] = ()
    prefix: str = ""


@dataclass(frozen=True)
class MetricValue:
    """A decoded value split into its numeral and unit.

    Attributes:
        magnitude: Leading numeral, kept in its original textual form.
        unit: Trailing suffix after the last digit (e.g., ms, kB), may be empty.
    """

    magnitude: str
    unit: str = ""

    def __str__(self) -> str:
        return self.magnitude + self.unit


@dataclass(frozen=True)
class MetricRecord:
    """A structured record extracted from one log-drain line.

    Attributes:
        kind: Subsystem the line came from.
        app: App name, borrowed from the originating LogData.
        tags: Tags, borrowed from the originating LogData unless extended.
        prefix: Metric name prefix, borrowed from the originating LogData.
        metrics: Decoded values keyed by name.
        events: Raw free-text payloads (scaling and release messages only).
    """

    kind: MessageKind
    app: str
    tags: tuple[str, ...] = ()
    prefix: str = ""
    metrics: dict[str, MetricValue] = field(default_factory=dict)
    events: list[str] = field(default_factory=list)
