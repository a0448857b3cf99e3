"""Kind-specific transformation of message bodies into MetricRecords."""

import logging
import re

from drainmetrics.core.logfmt import LogfmtError, decode, split_value
from drainmetrics.core.models import LogData, MessageKind, MetricRecord, MetricValue
from drainmetrics.core.ports import DiagnosticLoggerPort

logger = logging.getLogger(__name__)

DYNO_NUMBER_RE = re.compile(r"\.[0-9]+$")
SCALING_RE = re.compile(r"Scaled to (.*) by user .*")
SCALED_DYNO_RE = re.compile(r"([^@ ]*)@([^: ]*):([^ ]*)")


def decode_metrics(
    body: str, log: DiagnosticLoggerPort | None = None
) -> dict[str, MetricValue]:
    """Decode a key=value body into split metric values.

    Raises:
        LogfmtError: If the body cannot be decoded.
    """
    log = log or logger
    metrics: dict[str, MetricValue] = {}
    for key, raw in decode(body):
        value = split_value(raw)
        # Last write wins on duplicate keys
        metrics[key] = value
        log.debug(
            "logMetric %s=%s",
            key,
            raw,
            extra={"key": key, "val": value.magnitude, "unit": value.unit},
        )
    return metrics


def rename_dyno_source(
    metrics: dict[str, MetricValue], tags: tuple[str, ...]
) -> tuple[dict[str, MetricValue], tuple[str, ...]]:
    """Replace ``source`` with ``dyno`` and derive a ``dynotype:`` tag.

    Returns new mapping and tag objects; the arguments are left untouched.
    """
    source = metrics.get("source")
    if source is None:
        return metrics, tags
    renamed = {k: v for k, v in metrics.items() if k != "source"}
    renamed["dyno"] = source
    dyno_type = DYNO_NUMBER_RE.sub("", source.magnitude)
    return renamed, (*tags, f"dynotype:{dyno_type}")


def parse_metrics(
    kind: MessageKind,
    data: LogData,
    body: str,
    log: DiagnosticLoggerPort | None = None,
) -> MetricRecord | None:
    """Build a record for a key=value message (router and sample kinds).

    Args:
        kind: One of ROUTER, DYNO_SAMPLE, PG_SAMPLE, REDIS_SAMPLE.
        data: The originating line and its request context.
        body: Message body following the syslog header.
        log: Diagnostic logger (default: module logger).

    Returns:
        MetricRecord, or None if the body could not be decoded.
    """
    log = log or logger
    try:
        metrics = decode_metrics(body, log)
    except LogfmtError as e:
        log.warning(
            "Unable to decode message body: %s",
            e,
            extra={"err": str(e), "app": data.app},
        )
        return None

    tags = data.tags
    if kind is MessageKind.DYNO_SAMPLE:
        metrics, tags = rename_dyno_source(metrics, tags)

    return MetricRecord(
        kind=kind,
        app=data.app,
        tags=tags,
        prefix=data.prefix,
        metrics=metrics,
    )


def parse_scaling_message(
    data: LogData, body: str, log: DiagnosticLoggerPort | None = None
) -> MetricRecord | None:
    """Build a record from ``Scaled to <name>@<count>:<type> ... by user <who>``.

    Returns:
        SCALING MetricRecord with one metric per scaled process type,
        or None if the text does not have the expected shape.
    """
    log = log or logger
    match = SCALING_RE.search(body)
    if match is None:
        log.warning(
            "Scaling message not matched: %s",
            body,
            extra={"err": "Scaling message not matched", "message_text": body},
        )
        return None

    metrics: dict[str, MetricValue] = {}
    for name, count, dyno_type in SCALED_DYNO_RE.findall(match.group(1)):
        log.debug(
            "Scaled %s to %s:%s",
            name,
            count,
            dyno_type,
            extra={"dynoName": name, "count": count, "dynoType": dyno_type},
        )
        metrics[name] = MetricValue(magnitude=count, unit=dyno_type)

    return MetricRecord(
        kind=MessageKind.SCALING,
        app=data.app,
        tags=data.tags,
        prefix=data.prefix,
        metrics=metrics,
        events=[body],
    )


def release_record(data: LogData, body: str) -> MetricRecord:
    """Build a RELEASE record carrying the message text as its only event."""
    return MetricRecord(
        kind=MessageKind.RELEASE,
        app=data.app,
        tags=data.tags,
        prefix=data.prefix,
        events=[body],
    )
