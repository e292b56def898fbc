"""StatsD client helpers shared by the middleware.

This module owns the connection to the metrics backend. ``connect`` dials a
UDP ``statsd.StatsClient`` and, when the address cannot be resolved, hands
back a ``NoopStatsClient`` so the application keeps serving with metrics
silently disabled.
"""
from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

from statsd import StatsClient

from starlette_statsd.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 8125

# Every event is reported, no statistical sampling.
SAMPLE_RATE = 1.0


@runtime_checkable
class StatsEmitter(Protocol):
    """Anything that can send timings and counters to a metrics backend."""

    def timing(self, stat: str, delta: float, rate: float = 1) -> None: ...

    def incr(self, stat: str, count: int = 1, rate: float = 1) -> None: ...


class NoopStatsClient:
    """Stand-in emitter that accepts every call and performs no network I/O."""

    def timing(self, stat: str, delta: float, rate: float = 1) -> None:
        return None

    def incr(self, stat: str, count: int = 1, rate: float = 1) -> None:
        return None

    def __repr__(self) -> str:
        return "NoopStatsClient()"


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts; the port defaults to 8125.

    Raises ``ValueError`` for an empty host or a port that is not a number.
    """

    host, sep, port = address.strip().rpartition(":")
    if not sep:
        host, port = port, ""
    # [::1]:8125
    host = host.strip("[]")
    if not host:
        raise ValueError(f"missing host in statsd address '{address}'")
    if not port:
        return host, DEFAULT_PORT
    number = int(port)
    if not 0 < number < 65536:
        raise ValueError(f"port out of range in statsd address '{address}'")
    return host, number


def connect(address: str) -> StatsEmitter:
    """Dial the StatsD backend at *address*, degrading to a no-op client."""

    try:
        host, port = parse_address(address)
        client = StatsClient(host=host, port=port, ipv6=":" in host)
    except (OSError, ValueError) as exc:
        logger.warning("No statsd server on %s (%s), metrics disabled", address, exc)
        return NoopStatsClient()

    logger.debug("Sending metrics to statsd at %s:%d", host, port)
    return client
