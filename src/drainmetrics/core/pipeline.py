"""Pipeline worker turning LogData lines into MetricRecords."""

import asyncio
import logging

from drainmetrics.core.classify import classify
from drainmetrics.core.models import LogData, MessageKind, MetricRecord
from drainmetrics.core.ports import DiagnosticLoggerPort
from drainmetrics.core.transform import (
    parse_metrics,
    parse_scaling_message,
    release_record,
)

logger = logging.getLogger(__name__)


def process_line(
    data: LogData, log: DiagnosticLoggerPort | None = None
) -> MetricRecord | None:
    """Classify and transform a single line.

    Args:
        data: The line and its request context.
        log: Diagnostic logger (default: module logger).

    Returns:
        The extracted MetricRecord, or None when the line is unroutable
        or could not be parsed.
    """
    log = log or logger
    log.debug("%s", data.line)
    classified = classify(data.line)
    if classified is None:
        return None
    kind, body = classified
    log.debug("Line classified as %s", kind.name, extra={"kind": kind.value})

    if kind is MessageKind.RELEASE:
        return release_record(data, body)
    if kind is MessageKind.SCALING:
        return parse_scaling_message(data, body, log)
    return parse_metrics(kind, data, body, log)


async def process_logs(
    inbox: asyncio.Queue[LogData],
    outbox: asyncio.Queue[MetricRecord],
    log: DiagnosticLoggerPort | None = None,
) -> None:
    """Consume lines from inbox and put extracted records on outbox.

    Records are emitted in the order their lines were received. Returns once
    inbox has been shut down and drained; outbox is left open for its
    consumer.

    Args:
        inbox: Queue of lines produced by the ingestion layer.
        outbox: Queue of records consumed by the encoder/transmitter.
        log: Diagnostic logger (default: module logger).
    """
    log = log or logger
    while True:
        try:
            data = await inbox.get()
        except asyncio.QueueShutDown:
            return
        try:
            record = process_line(data, log)
            if record is not None:
                await outbox.put(record)
        finally:
            inbox.task_done()
