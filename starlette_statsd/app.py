from typing import Dict, Optional

from fastapi import FastAPI
from starlette.applications import Starlette

from starlette_statsd.config import Settings, get_settings
from starlette_statsd.middleware.statsd import StatsdMiddleware

# Centralised logging
from starlette_statsd.utils.logger import configure_logging, get_logger

# Ensure root logger configured once
logger = get_logger(__name__)


def add_statsd_middleware(app: Starlette, settings: Optional[Settings] = None) -> None:
    """Install :class:`StatsdMiddleware` on *app* using the given (or cached) settings."""

    settings = settings or get_settings()
    app.add_middleware(
        StatsdMiddleware,
        address=settings.statsd_address,
        prefix=settings.statsd_prefix,
        global_label=settings.statsd_global_label,
        global_metrics=settings.statsd_global_metrics,
    )
    logger.info(
        "StatsD metrics for prefix '%s' sent to %s",
        settings.statsd_prefix,
        settings.statsd_address,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="starlette-statsd demo", version="0.1.0")

    add_statsd_middleware(app, settings)

    # ----- health check ------------------------------------------------------
    @app.get("/health", tags=["system"])
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app
