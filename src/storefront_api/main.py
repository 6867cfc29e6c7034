"""Storefront API - Main Entry Point."""

import os

from storefront_api.config.settings import settings
from storefront_api.server.app import create_app

# Create FastAPI application
app = create_app()

if __name__ == "__main__":
    import uvicorn

    reload = os.getenv("RELOAD", "false").lower() == "true"

    # timeout_graceful_shutdown bounds how long uvicorn waits for the
    # shutdown handler; access logging is left to the JSON logger
    uvicorn.run(
        "storefront_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=30,
        timeout_keep_alive=5,
        access_log=False,
    )
