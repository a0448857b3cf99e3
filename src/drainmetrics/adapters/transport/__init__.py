"""Transport adapters implementing MetricsSinkPort."""

from drainmetrics.adapters.transport.statsd import StatsdClient, forward_metrics

__all__ = [
    "StatsdClient",
    "forward_metrics",
]
