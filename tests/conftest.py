"""Shared fixtures for the middleware tests."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse, StreamingResponse


class RecordingClient:
    """Emitter that remembers every call so tests can inspect emitted metrics.

    Emission happens on executor threads, so readers wait on a condition
    until the expected number of calls has arrived.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls: list[tuple[str, str, Any, float]] = []
        self._cond = threading.Condition()

    def _record(self, kind: str, stat: str, value: Any, rate: float) -> None:
        if self.delay:
            threading.Event().wait(self.delay)
        with self._cond:
            self.calls.append((kind, stat, value, rate))
            self._cond.notify_all()

    def timing(self, stat: str, delta: float, rate: float = 1) -> None:
        self._record("timing", stat, delta, rate)

    def incr(self, stat: str, count: int = 1, rate: float = 1) -> None:
        self._record("incr", stat, count, rate)

    def wait_for(self, count: int, timeout: float = 2.0) -> list[tuple[str, str, Any, float]]:
        with self._cond:
            self._cond.wait_for(lambda: len(self.calls) >= count, timeout=timeout)
            return list(self.calls)

    def names(self, kind: str) -> list[str]:
        with self._cond:
            return sorted(stat for k, stat, _, _ in self.calls if k == kind)


def build_app() -> FastAPI:
    """Small app with a few routes returning different status codes."""

    app = FastAPI()

    @app.get("/orders/{order_id}")
    def get_order(order_id: int) -> dict[str, int]:
        return {"id": order_id}

    @app.get("/missing")
    def missing() -> None:
        raise HTTPException(status_code=404, detail="nope")

    @app.get("/health")
    def health() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.get("/stream")
    def stream() -> StreamingResponse:
        async def chunks():
            yield b"a"
            await asyncio.sleep(0.3)
            yield b"b"

        return StreamingResponse(chunks(), media_type="text/plain")

    return app


@pytest.fixture
def recorder() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def slow_recorder() -> RecordingClient:
    return RecordingClient(delay=0.5)


@pytest.fixture
def make_app():
    return build_app
