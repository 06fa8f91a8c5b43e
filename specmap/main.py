from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from specmap import __version__
from specmap.services.ingestion_pipeline import PipelineContext, build_pipeline_context


def _validate_env() -> None:
    """
    Validate optional environment overrides at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle. Unset variables fall back to
    defaults and are never an error.
    """

    from specmap.config import load_env_files

    load_env_files()

    errors: list[str] = []

    base_url = os.getenv("GEOCODE_BASE_URL", "").strip()
    if base_url:
        parsed = urlparse(base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            errors.append(f"GEOCODE_BASE_URL='{base_url}' is not an absolute http(s) URL.")

    user_agent = os.getenv("GEOCODE_USER_AGENT")
    if user_agent is not None and not user_agent.strip():
        errors.append("GEOCODE_USER_AGENT is set but empty; the geocoding service requires one.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Release the geocoding HTTP session on shutdown."""
    logging.getLogger(__name__).info("Pipeline ready")
    try:
        yield
    finally:
        application.state.pipeline.close()
        logging.getLogger(__name__).info("Pipeline closed")


def create_app(pipeline: PipelineContext | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="specmap API",
        version=__version__,
        lifespan=_lifespan,
    )
    application.state.pipeline = pipeline or build_pipeline_context()

    from specmap.api.routers import dashboard_router, ingestion_router

    application.include_router(ingestion_router)
    application.include_router(dashboard_router)

    @application.get("/health")
    def healthcheck() -> dict[str, object]:
        current = application.state.pipeline
        return {
            "status": "ok",
            "records": len(current.records),
            "ingestion_running": current.is_running,
        }

    return application


app = create_app()
