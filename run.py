"""Entry point for the Business Directory API.

Launches the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Host and port are read from ``API_HOST`` and ``API_PORT``; the rest of
the configuration (``DATABASE_URL``, ``SECRET_KEY``, ``ADMIN_EMAILS``
and so on) is read by ``business_directory_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import os
from uvicorn import Config, Server

from business_directory_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted.

    Defaults are ``0.0.0.0`` and ``8000``.
    """
    api_host = os.getenv("API_HOST", "0.0.0.0")
    api_port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=api_host, port=api_port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_api()
    except Exception:
        logging.exception("Exception in API server")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
