"""FastAPI adapter for the log-drain ingestion endpoint."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, Response

from drainmetrics.adapters.frameworks.ingest import (
    AUTH_REALM,
    authenticate,
    enqueue_lines,
)
from drainmetrics.adapters.frameworks.query_params import _parse_tags_param
from drainmetrics.adapters.transport.statsd import StatsdClient
from drainmetrics.config import Settings
from drainmetrics.core.models import LogData
from drainmetrics.runtime.service import DrainRuntime

logger = logging.getLogger(__name__)


def create_drain_router(
    inbox: asyncio.Queue[LogData],
    credentials: dict[str, str],
) -> APIRouter:
    """Create a FastAPI router with the ``/`` drain and ``/status`` endpoints.

    Args:
        inbox: Queue the received lines are put on.
        credentials: Mapping of app name to basic-auth password.

    Returns:
        APIRouter with the drain endpoints configured.
    """
    router = APIRouter()

    @router.get("/status")
    async def get_status() -> Response:
        """Return a plain OK for health checks."""
        return Response(content="OK", media_type="text/plain")

    @router.post("/")
    async def post_logs(
        request: Request,
        tags: list[str] = Query(default=[]),
        prefix: str = Query(default=""),
    ) -> Response:
        """Queue every line of a log-drain payload.

        Args:
            tags: Comma-separated tags attached to every line.
            prefix: Metric name prefix attached to every line.
        """
        app = authenticate(request.headers.get("authorization"), credentials)
        if app is None:
            raise HTTPException(
                status_code=401,
                detail="Unauthorized",
                headers={"WWW-Authenticate": AUTH_REALM},
            )
        body = await request.body()
        count = await enqueue_lines(
            inbox, body, app, tags=_parse_tags_param({"tags": tags}), prefix=prefix
        )
        logger.debug("Queued %d lines", count, extra={"app": app})
        return Response(content="OK", media_type="text/plain")

    return router


def create_drain_app(settings: Settings | None = None) -> FastAPI:
    """Create the drain service as a FastAPI application.

    The lifespan starts a DrainRuntime forwarding to the configured StatsD
    agent and drains it on shutdown.

    Args:
        settings: Service settings (default: read from the environment).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    logging.getLogger("drainmetrics").setLevel(settings.log_level)

    client = StatsdClient(settings.statsd_host, settings.statsd_port)
    runtime = DrainRuntime(client, queue_size=settings.queue_size)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        """Start the runtime on startup, drain it on shutdown."""
        await client.connect()
        await runtime.start()
        yield
        await runtime.stop()
        await client.close()

    app = FastAPI(title="drainmetrics", lifespan=lifespan)
    app.include_router(create_drain_router(runtime.inbox, settings.credentials))
    app.state.runtime = runtime
    return app
