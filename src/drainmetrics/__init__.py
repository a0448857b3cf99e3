"""drainmetrics: metrics extraction from platform log-drain lines."""

from drainmetrics.adapters.frameworks.asgi import create_asgi_app
from drainmetrics.adapters.transport.statsd import StatsdClient, forward_metrics
from drainmetrics.config import ConfigurationError, Settings
from drainmetrics.core.encoding.dogstatsd import encode_record
from drainmetrics.core.logfmt import LogfmtError, split_value
from drainmetrics.core.models import LogData, MessageKind, MetricRecord, MetricValue
from drainmetrics.core.pipeline import process_line, process_logs
from drainmetrics.runtime.service import DrainRuntime

__all__ = [
    "ConfigurationError",
    "DrainRuntime",
    "LogData",
    "LogfmtError",
    "MessageKind",
    "MetricRecord",
    "MetricValue",
    "Settings",
    "StatsdClient",
    "create_asgi_app",
    "encode_record",
    "forward_metrics",
    "process_line",
    "process_logs",
    "split_value",
]
