from .statsd import StatsdMiddleware

__all__ = ["StatsdMiddleware"]
