"""DogStatsD encoder for metric records.

Turns a MetricRecord into the datagrams understood by a StatsD agent with
DogStatsD extensions (tags and events).
"""

import math

from drainmetrics.core.models import MessageKind, MetricRecord, MetricValue

HISTOGRAM = "h"
GAUGE = "g"

SAMPLE_PREFIX = "sample#"

ROUTER_TAG_KEYS = ("at", "dyno", "host", "method", "status")
ROUTER_HISTOGRAMS = {
    "connect": "heroku.router.request.connect",
    "service": "heroku.router.request.service",
    "bytes": "heroku.router.response.bytes",
}

SAMPLE_NAMESPACES = {
    MessageKind.DYNO_SAMPLE: "heroku.dyno",
    MessageKind.PG_SAMPLE: "heroku.postgres",
    MessageKind.REDIS_SAMPLE: "heroku.redis",
}

EVENT_TITLES = {
    MessageKind.SCALING: "heroku/api",
    MessageKind.RELEASE: "app/api",
}


def _to_float(value: MetricValue) -> float | None:
    """Parse a magnitude as a float, returning None if it is not a finite number."""
    try:
        number = float(value.magnitude)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _with_tags(datagram: str, tags: list[str]) -> str:
    if not tags:
        return datagram
    return f"{datagram}|#{','.join(tags)}"


def encode_metric(name: str, value: float, metric_type: str, tags: list[str]) -> str:
    """Encode a single metric datagram, e.g. ``name:1.000000|g|#tag``."""
    return _with_tags(f"{name}:{value:f}|{metric_type}", tags)


def encode_event(title: str, text: str, tags: list[str]) -> str:
    """Encode an event datagram, e.g. ``_e{5,4}:title|text``.

    Lengths are counted in UTF-8 bytes.
    """
    header = f"_e{{{len(title.encode())},{len(text.encode())}}}"
    return _with_tags(f"{header}:{title}|{text}", tags)


def _encode_router(record: MetricRecord) -> list[str]:
    metrics = record.metrics
    tags = [f"{key}:{metrics[key]}" for key in ROUTER_TAG_KEYS if key in metrics]
    if "status" in metrics and metrics["status"].magnitude:
        tags.append(f"statusFamily:{metrics['status'].magnitude[0]}xx")
    tags.extend(record.tags)

    datagrams = []
    for key, name in ROUTER_HISTOGRAMS.items():
        if key not in metrics:
            continue
        value = _to_float(metrics[key])
        if value is not None:
            datagrams.append(
                encode_metric(record.prefix + name, value, HISTOGRAM, tags)
            )
    return datagrams


def _encode_samples(record: MetricRecord) -> list[str]:
    metrics = record.metrics
    namespace = SAMPLE_NAMESPACES[record.kind]
    tag_key = "dyno" if record.kind is MessageKind.DYNO_SAMPLE else "source"
    tags = [f"{tag_key}:{metrics[tag_key]}"] if tag_key in metrics else []
    tags.extend(record.tags)

    datagrams = []
    for key, metric in metrics.items():
        if not key.startswith(SAMPLE_PREFIX):
            continue
        value = _to_float(metric)
        if value is None:
            continue
        name = key[len(SAMPLE_PREFIX) :].replace("-", "_")
        datagrams.append(
            encode_metric(f"{record.prefix}{namespace}.{name}", value, GAUGE, tags)
        )
    return datagrams


def _encode_events(record: MetricRecord) -> list[str]:
    title = f"{EVENT_TITLES[record.kind]}: {record.app}"
    tags = list(record.tags)
    datagrams = [encode_event(title, text, tags) for text in record.events]

    # Scaled process counts become gauges
    for name, metric in record.metrics.items():
        value = _to_float(metric)
        if value is not None:
            datagrams.append(
                encode_metric(f"{record.prefix}heroku.dyno.{name}", value, GAUGE, tags)
            )
    return datagrams


def encode_record(record: MetricRecord) -> list[str]:
    """Encode a metric record to DogStatsD datagrams.

    Args:
        record: A record produced by the pipeline.

    Returns:
        List of datagrams, one per metric or event. Values whose magnitude
        is not numeric are left out.
    """
    if record.kind is MessageKind.ROUTER:
        return _encode_router(record)
    if record.kind in SAMPLE_NAMESPACES:
        return _encode_samples(record)
    return _encode_events(record)
