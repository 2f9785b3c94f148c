"""FastAPI application serving pool state and quotes."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI

from cpamm import __version__
from cpamm.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("CPAMM_LOG_LEVEL", "INFO").upper()

app = FastAPI(
    title="CPAMM",
    description="Constant-product automated market maker",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(level: str = LOG_LEVEL) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level, logging.INFO)
        ),
    )


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    - CPAMM_LOG_LEVEL: structlog level filter (default: INFO)
    """
    configure_logging()
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
