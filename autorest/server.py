"""Uvicorn launcher for the Autorest application (console script ``autorest``)."""

import os

import uvicorn
from loguru import logger

from autorest.core.config import get_settings
from autorest.core.logging import setup_logging

APP_IMPORT_PATH = "autorest.api.main:app"


def main() -> None:
    """Start uvicorn with the application and route its logs through Loguru."""
    settings = get_settings()
    setup_logging(settings)

    # Container platforms pass the listening port through PORT
    port = int(os.environ.get("PORT", settings.api_port))

    handler = {"handlers": ["default"], "level": "INFO", "propagate": False}
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {"default": {"class": "autorest.core.logging.InterceptHandler"}},
        "loggers": {
            "uvicorn": handler,
            "uvicorn.error": handler,
            "uvicorn.access": handler,
        },
    }

    mode = "development mode with auto-reload" if settings.debug else "production mode"
    logger.info(
        "Starting Uvicorn on http://{}:{} ({}), profile: {}",
        settings.api_host,
        port,
        mode,
        settings.active_profile or "embedded",
    )
    uvicorn.run(
        APP_IMPORT_PATH,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=log_config,
    )

