"""
Image Bundler Main Application
==============================

Transport adapters for the bundle pipeline.

Each invocation builds a fresh pipeline from settings, runs it for
exactly one item, and returns ``{"result": ..., "message": ...}``.

Endpoints:
    GET  /        - Service information
    GET  /health  - Liveness probe
    POST /invoke  - Bundle one item

Function-style hosting:
    handler(event, context) -> {"result", "message"[, "error_type"]}
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from image_bundler.config import settings
from image_bundler.models.outcome import BundleOutcome
from image_bundler.pipeline import create_pipeline, invoke


logger = logging.getLogger(__name__)

ERROR_KIND_HEADER = "X-Bundle-Error-Kind"

_startup_time: float = 0.0


# =============================================================================
# Invocation
# =============================================================================

async def run_invocation(payload: Any) -> BundleOutcome:
    """Build a pipeline for this invocation and run it."""
    pipeline = create_pipeline(settings)
    try:
        return await invoke(payload, pipeline)
    finally:
        pipeline.close()


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Function-style entry point.

    Args:
        event: Decoded invocation payload
        context: Hosting runtime context (unused)

    Returns:
        {"result", "message"} plus "error_type" on failure
    """
    outcome = asyncio.run(run_invocation(event))
    response = outcome.to_response().model_dump()
    if not outcome.ok:
        response["error_type"] = outcome.error_kind.value
    return response


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")
    logger.info(
        f"Storage backend: {settings.storage.backend}, "
        f"render strategy: {settings.render.strategy}, "
        f"staging: {settings.archive.staging}"
    )

    yield

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="ImageBundler",
    description="Per-item photo bundle assembly",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "ImageBundler",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "storage_backend": settings.storage.backend,
        "render_strategy": settings.render.strategy,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.post("/invoke")
async def invoke_bundle(request: Request) -> JSONResponse:
    """
    Bundle one item.

    Returns 200 on success, 400 for payload errors and 502 for stage
    failures. The error kind is exposed in the X-Bundle-Error-Kind header.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    outcome = await run_invocation(payload)
    body = outcome.to_response().model_dump()

    if outcome.ok:
        return JSONResponse(body)

    status_code = 400 if outcome.error_kind.is_request_error else 502
    return JSONResponse(
        body,
        status_code=status_code,
        headers={ERROR_KIND_HEADER: outcome.error_kind.value},
    )


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "image_bundler.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
