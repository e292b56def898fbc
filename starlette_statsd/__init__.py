"""
starlette-statsd - StatsD request timing and status counting for Starlette/FastAPI.
"""

from .core.client import NoopStatsClient, StatsEmitter, connect
from .core.filters import filter_url, nop_filter
from .middleware.statsd import MetricsConfig, StatsdMiddleware

__version__ = "0.1.0"
__all__ = [
    "StatsdMiddleware",
    "MetricsConfig",
    "StatsEmitter",
    "NoopStatsClient",
    "connect",
    "filter_url",
    "nop_filter",
]
