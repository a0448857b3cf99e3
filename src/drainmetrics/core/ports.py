"""Port interfaces for the pipeline's collaborators.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DiagnosticLoggerPort(Protocol):
    """Port for leveled diagnostic output.

    Any ``logging.Logger`` or ``logging.LoggerAdapter`` satisfies it.
    """

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Record a debug message."""
        ...

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Record a warning message."""
        ...


@runtime_checkable
class MetricsSinkPort(Protocol):
    """Port for delivering encoded datagrams to a metrics aggregator.

    Examples: StatsdClient.
    """

    async def send(self, datagram: str) -> None:
        """Send one encoded datagram."""
        ...
