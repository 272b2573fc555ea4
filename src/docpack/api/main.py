"""FastAPI application main entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .middleware import register_error_handlers
from .routes import docpacks
from ..config import configure_logging, get_settings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Docpack API",
    description="Docpack content extraction and code-graph visualization",
    version="0.1.0",
)

register_error_handlers(app)

app.include_router(docpacks.router, tags=["docpacks"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run_server() -> None:
    """Run the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    logger.info(f"Starting docpack API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run_server()
