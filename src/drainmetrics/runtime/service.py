"""Runtime owning the pipeline queues and background tasks."""

import asyncio
import logging

from drainmetrics.adapters.transport.statsd import forward_metrics
from drainmetrics.core.models import LogData, MetricRecord
from drainmetrics.core.pipeline import process_logs
from drainmetrics.core.ports import DiagnosticLoggerPort, MetricsSinkPort

logger = logging.getLogger(__name__)


class DrainRuntime:
    """Runs the pipeline worker and the metrics forwarder.

    The ingestion layer puts LogData on ``inbox``; the worker fills
    ``outbox``; the forwarder encodes and sends what it finds there.

    Example:
        ```python
        runtime = DrainRuntime(StatsdClient("127.0.0.1", 8125), queue_size=100)
        await runtime.start()
        await runtime.inbox.put(LogData(line=line, app="myapp"))
        await runtime.stop()
        ```
    """

    def __init__(
        self,
        sink: MetricsSinkPort,
        queue_size: int = 0,
        log: DiagnosticLoggerPort | None = None,
    ) -> None:
        """Initialize the runtime.

        Args:
            sink: Destination for encoded datagrams.
            queue_size: Bound of both queues; 0 means unbounded.
            log: Diagnostic logger passed to both tasks.
        """
        self.sink = sink
        self.log = log or logger
        self.inbox: asyncio.Queue[LogData] = asyncio.Queue(maxsize=queue_size)
        self.outbox: asyncio.Queue[MetricRecord] = asyncio.Queue(maxsize=queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._forwarder: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """Return True while the worker task is alive."""
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Start the worker and forwarder tasks. No-op if already running."""
        if self.running:
            return
        self._worker = asyncio.create_task(
            process_logs(self.inbox, self.outbox, self.log)
        )
        self._forwarder = asyncio.create_task(
            forward_metrics(self.outbox, self.sink, self.log)
        )
        logger.info("Drain runtime started")

    async def stop(self) -> None:
        """Drain both queues and wait for the tasks to finish.

        The inbox is shut down first so the worker processes every queued
        line; the outbox is shut down only after the worker has exited.
        """
        self.inbox.shutdown()
        if self._worker is not None:
            await self._worker
            self._worker = None
        self.outbox.shutdown()
        if self._forwarder is not None:
            await self._forwarder
            self._forwarder = None
        logger.info("Drain runtime stopped")
