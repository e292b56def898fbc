"""Starlette middleware sending per-request StatsD metrics.

For every request the middleware times the downstream handler and, once the
last body chunk has been sent (or the handler raised), fires two detached jobs
on the event loop's executor:

* a timing sample under ``<prefix>.<path with / replaced by .>`` (when the
  path filter says so) and ``<prefix>.<label>.timing``;
* a counter increment under ``<prefix>.request.<status>`` and
  ``<prefix>.<label>.count``.

Neither job is awaited, so a slow or missing statsd daemon never delays or
fails the response.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
from starlette.types import ASGIApp

from starlette_statsd.core.client import SAMPLE_RATE, StatsEmitter, connect
from starlette_statsd.core.filters import PathFilter, filter_url
from starlette_statsd.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GLOBAL_LABEL = "request"


@dataclass(frozen=True)
class MetricsConfig:
    """Immutable snapshot of everything a request needs to name its metrics.

    The middleware swaps the whole snapshot on reconfiguration, so the global
    names always match the label they were built from.
    """

    prefix: str
    path_filter: PathFilter = filter_url
    global_metrics: bool = True
    global_timing: str = ""
    global_count: str = ""

    @classmethod
    def create(
        cls,
        prefix: str,
        path_filter: PathFilter = filter_url,
        global_label: str = DEFAULT_GLOBAL_LABEL,
        global_metrics: bool = True,
    ) -> "MetricsConfig":
        return cls(prefix=prefix, path_filter=path_filter).with_global_metrics(global_label, global_metrics)

    def with_filter(self, path_filter: PathFilter) -> "MetricsConfig":
        return replace(self, path_filter=path_filter)

    def with_global_metrics(self, label: str, enabled: bool) -> "MetricsConfig":
        return replace(
            self,
            global_metrics=enabled,
            global_timing=f"{self.prefix}.{label}.timing",
            global_count=f"{self.prefix}.{label}.count",
        )

    def timing_name(self, path: str) -> str:
        # "/orders/42" -> ".orders.42"; the leading slash supplies the separator.
        dotted = path.replace("/", ".")
        if not dotted.startswith("."):
            dotted = "." + dotted
        return self.prefix + dotted

    def counter_name(self, status_code: int) -> str:
        return f"{self.prefix}.request.{status_code:d}"


def request_target(request: Request) -> str:
    """Return the path as sent by the client, query string included."""

    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path


class StatsdMiddleware(BaseHTTPMiddleware):
    """Middleware that times every request and counts responses by status.

    Emission jobs are handed to the running asyncio loop's default executor,
    so the app must be served on the asyncio backend (not trio).
    """

    def __init__(
        self,
        app: ASGIApp,
        address: str = "localhost:8125",
        prefix: str = "",
        path_filter: Optional[PathFilter] = None,
        global_label: str = DEFAULT_GLOBAL_LABEL,
        global_metrics: bool = True,
        client: Optional[StatsEmitter] = None,
    ) -> None:
        super().__init__(app)
        self.client: StatsEmitter = client if client is not None else connect(address)
        self._config = MetricsConfig.create(
            prefix,
            path_filter=path_filter or filter_url,
            global_label=global_label,
            global_metrics=global_metrics,
        )
        logger.debug("StatsdMiddleware ready with prefix '%s' (client=%r)", prefix, self.client)

    @property
    def config(self) -> MetricsConfig:
        return self._config

    def set_filter(self, path_filter: PathFilter) -> None:
        """Filter what should be sent as per-path timing metrics."""
        self._config = self._config.with_filter(path_filter)

    def set_global_metrics(self, label: str, enabled: bool) -> None:
        """Rename the global metrics to ``<prefix>.<label>.*`` and toggle them."""
        self._config = self._config.with_global_metrics(label, enabled)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]):  # type: ignore[override]
        loop = asyncio.get_running_loop()
        target = request_target(request)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The server error middleware above us answers with a 500.
            self._emit(loop, target, start, HTTP_500_INTERNAL_SERVER_ERROR)
            raise

        body = getattr(response, "body_iterator", None)
        if body is None:
            self._emit(loop, target, start, response.status_code)
        else:
            response.body_iterator = self._emit_after_body(body, loop, target, start, response.status_code)
        return response

    async def _emit_after_body(
        self,
        body: AsyncIterator[Any],
        loop: asyncio.AbstractEventLoop,
        target: str,
        start: float,
        status_code: int,
    ) -> AsyncIterator[Any]:
        # call_next returns once headers are sent; streamed bodies finish here.
        try:
            async for chunk in body:
                yield chunk
        finally:
            self._emit(loop, target, start, status_code)

    def _emit(self, loop: asyncio.AbstractEventLoop, target: str, start: float, status_code: int) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if loop.is_closed():
            return
        config = self._config
        loop.run_in_executor(None, self._time_request, config, target, elapsed_ms)
        loop.run_in_executor(None, self._count_response, config, status_code)

    # ------------------------------------------------------------------
    # Emission jobs (run on the executor, never awaited)
    # ------------------------------------------------------------------

    def _time_request(self, config: MetricsConfig, target: str, elapsed_ms: float) -> None:
        try:
            record, path = config.path_filter(target)
            if record:
                self.client.timing(config.timing_name(path), elapsed_ms, rate=SAMPLE_RATE)
            if config.global_metrics:
                self.client.timing(config.global_timing, elapsed_ms, rate=SAMPLE_RATE)
        except Exception as exc:
            logger.warning("Failed to send timing for %s: %s", target, exc)

    def _count_response(self, config: MetricsConfig, status_code: int) -> None:
        try:
            self.client.incr(config.counter_name(status_code), 1, rate=SAMPLE_RATE)
            if config.global_metrics:
                self.client.incr(config.global_count, 1, rate=SAMPLE_RATE)
        except Exception as exc:
            logger.warning("Failed to send counter for status %s: %s", status_code, exc)
