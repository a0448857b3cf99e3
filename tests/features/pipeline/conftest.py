"""BDD step definitions for the log-drain pipeline feature.

Each scenario drives process_logs() in its own event loop through a
PipelineScenarioContext that holds the queues, the worker task and the
collected records.
"""

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from drainmetrics.core.models import LogData, MessageKind, MetricRecord, MetricValue
from drainmetrics.core.pipeline import process_logs

CANONICAL_LINES = [
    '255 <158>1 2015-04-02T11:52:34.520012+00:00 host heroku router - at=info '
    'method=POST path="/users" host=myapp.com fwd="24.76.242.18" dyno=web.1 '
    "connect=1ms service=37ms status=201 bytes=828",
    "229 <45>1 2015-04-02T11:48:16.839257+00:00 host heroku web.1 - source=web.1 "
    "dyno=heroku.35930502.b9de5fce-44b7-4287-99a7-504519070cba "
    "sample#load_avg_1m=0.01",
    "542 <134>1 2015-04-02T11:47:55+00:00 host app heroku-postgres - "
    "source=HEROKU_POSTGRESQL_TEAL sample#memory-free=233092kB",
    "542 <134>1 2015-04-02T11:47:55+00:00 host app heroku-redis - source=REDIS "
    "sample#memory-redis=176289040bytes",
    "222 <134>1 2017-05-13T15:35:33.787162+00:00 host app api - "
    "Scaled to mailer@3:Performance-L web@5:Standard-2X by user someuser@gmail.com",
    "222 <134>1 2015-04-07T16:01:43.517062+00:00 host app api - "
    "Release v138 created by user foo@bar",
]


class _CountingLogger:
    """Logger that counts warnings and ignores debug output."""

    def __init__(self) -> None:
        self.warnings = 0

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        pass

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.warnings += 1


@dataclass
class PipelineScenarioContext:
    """Shared state between steps in a pipeline scenario."""

    loop: asyncio.AbstractEventLoop = field(default_factory=asyncio.new_event_loop)
    inbox: asyncio.Queue[LogData] | None = None
    outbox: asyncio.Queue[MetricRecord] | None = None
    worker: asyncio.Task[None] | None = None
    log: _CountingLogger = field(default_factory=_CountingLogger)
    app: str = "test"
    tags: tuple[str, ...] = ()
    prefix: str = ""
    records: list[MetricRecord] = field(default_factory=list)

    def run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Run a coroutine on the scenario's event loop."""
        return self.loop.run_until_complete(coro)


@pytest.fixture
def ctx():
    """Fresh scenario context for each test; closes its loop afterwards."""
    context = PipelineScenarioContext()
    yield context
    if context.worker is not None and not context.worker.done():
        context.worker.cancel()
        context.loop.run_until_complete(asyncio.sleep(0))
    context.loop.close()


def _record(ctx: PipelineScenarioContext, index: int) -> MetricRecord:
    return ctx.records[index - 1]


# === Background Steps ===
@given("a running pipeline worker")
def step_running_worker(ctx: PipelineScenarioContext) -> None:
    async def _start() -> None:
        ctx.inbox = asyncio.Queue()
        ctx.outbox = asyncio.Queue()
        ctx.worker = asyncio.create_task(process_logs(ctx.inbox, ctx.outbox, ctx.log))

    ctx.run(_start())


@given(
    parsers.parse(
        'request context app "{app}" with tags "{tags}" and prefix "{prefix}"'
    )
)
def step_request_context(
    ctx: PipelineScenarioContext, app: str, tags: str, prefix: str
) -> None:
    ctx.app = app
    ctx.tags = tuple(tags.split(","))
    ctx.prefix = prefix


# === Input Steps ===
def _send(ctx: PipelineScenarioContext, line: str) -> None:
    assert ctx.inbox is not None
    data = LogData(line=line, app=ctx.app, tags=ctx.tags, prefix=ctx.prefix)
    ctx.run(ctx.inbox.put(data))


@when("the canonical sample lines are sent")
def step_send_canonical(ctx: PipelineScenarioContext) -> None:
    for line in CANONICAL_LINES:
        _send(ctx, line)


@when(parsers.re(r'the line "(?P<line>.*)" is sent'))
def step_send_line(ctx: PipelineScenarioContext, line: str) -> None:
    _send(ctx, line)


@when("the inbox is shut down")
def step_shutdown_inbox(ctx: PipelineScenarioContext) -> None:
    assert ctx.inbox is not None
    ctx.inbox.shutdown()


# === Outcome Steps ===
@then("the worker stops")
def step_worker_stops(ctx: PipelineScenarioContext) -> None:
    assert ctx.worker is not None and ctx.outbox is not None
    ctx.run(asyncio.wait_for(ctx.worker, timeout=5))
    while not ctx.outbox.empty():
        ctx.records.append(ctx.outbox.get_nowait())


@then("the records have kinds:")
def step_record_kinds(
    ctx: PipelineScenarioContext, datatable: list[list[str]]
) -> None:
    expected = [MessageKind[row[0]] for row in datatable[1:]]
    assert [r.kind for r in ctx.records] == expected


@then(
    parsers.re(
        r'record (?P<index>\d+) has metric "(?P<name>[^"]*)" '
        r'with magnitude "(?P<magnitude>[^"]*)" and unit "(?P<unit>[^"]*)"'
    ),
    converters={"index": int},
)
def step_record_metric(
    ctx: PipelineScenarioContext, index: int, name: str, magnitude: str, unit: str
) -> None:
    assert _record(ctx, index).metrics[name] == MetricValue(magnitude, unit)


@then(parsers.parse('record {index:d} has no metric "{name}"'))
def step_record_no_metric(
    ctx: PipelineScenarioContext, index: int, name: str
) -> None:
    assert name not in _record(ctx, index).metrics


@then(parsers.parse('record {index:d} has tag "{tag}"'))
def step_record_tag(ctx: PipelineScenarioContext, index: int, tag: str) -> None:
    record = _record(ctx, index)
    assert tag in record.tags
    assert ctx.tags == ("tag1", "tag2")


@then(parsers.parse('record {index:d} has event "{text}"'))
def step_record_event(ctx: PipelineScenarioContext, index: int, text: str) -> None:
    assert _record(ctx, index).events == [text]


@then(parsers.parse("{count:d} warnings were logged"))
def step_warning_count(ctx: PipelineScenarioContext, count: int) -> None:
    assert ctx.log.warnings == count
