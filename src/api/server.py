"""API server: runs uvicorn inside the existing asyncio event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server() -> None:
    """Serve the FastAPI app until uvicorn is told to exit."""
    from src.api.app import create_app

    app = create_app()
    config = uvicorn.Config(
        app=app,
        host="0.0.0.0",
        port=settings.api_port,
        log_level="warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"Ledger API starting on http://0.0.0.0:{settings.api_port}")
    await server.serve()
