"""UDP transmitter delivering encoded records to a StatsD agent.

This adapter is the consumer side of the pipeline: it drains the outbox,
encodes each MetricRecord with the DogStatsD encoder and sends every
datagram over UDP.
"""

import asyncio
import logging

from drainmetrics.core.encoding.dogstatsd import encode_record
from drainmetrics.core.models import MetricRecord
from drainmetrics.core.ports import DiagnosticLoggerPort, MetricsSinkPort

logger = logging.getLogger(__name__)


class _StatsdProtocol(asyncio.DatagramProtocol):
    """Datagram protocol that only reports delivery errors."""

    def error_received(self, exc: Exception) -> None:
        logger.warning("StatsD transport error: %s", exc, extra={"err": str(exc)})


class StatsdClient:
    """StatsD client implementing MetricsSinkPort over UDP.

    Example:
        ```python
        client = StatsdClient("127.0.0.1", 8125)
        await client.connect()
        await client.send("heroku.dyno.web:3.000000|g")
        await client.close()
        ```
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8125) -> None:
        """Initialize the client.

        Args:
            host: Hostname or address of the StatsD agent.
            port: UDP port of the StatsD agent.
        """
        self.host = host
        self.port = port
        self._transport: asyncio.DatagramTransport | None = None

    async def connect(self) -> asyncio.DatagramTransport:
        """Open the UDP endpoint and return its transport.

        Calling it again returns the already open transport.
        """
        if self._transport is None:
            loop = asyncio.get_running_loop()
            self._transport, _ = await loop.create_datagram_endpoint(
                _StatsdProtocol, remote_addr=(self.host, self.port)
            )
        return self._transport

    async def send(self, datagram: str) -> None:
        """Send one datagram, connecting first if needed."""
        transport = self._transport or await self.connect()
        transport.sendto(datagram.encode())

    async def close(self) -> None:
        """Close the UDP endpoint."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None


async def forward_metrics(
    outbox: asyncio.Queue[MetricRecord],
    sink: MetricsSinkPort,
    log: DiagnosticLoggerPort | None = None,
) -> None:
    """Encode records from outbox and send them to sink until shut down.

    A datagram that cannot be sent is logged and skipped.

    Args:
        outbox: Queue filled by the pipeline worker.
        sink: Destination for encoded datagrams.
        log: Diagnostic logger (default: module logger).
    """
    log = log or logger
    while True:
        try:
            record = await outbox.get()
        except asyncio.QueueShutDown:
            return
        try:
            for datagram in encode_record(record):
                try:
                    await sink.send(datagram)
                except OSError as e:
                    log.warning(
                        "Unable to send datagram: %s",
                        e,
                        extra={"err": str(e), "datagram": datagram},
                    )
                else:
                    log.debug("Sent %s", datagram)
        finally:
            outbox.task_done()
