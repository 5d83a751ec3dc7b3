"""Main FastAPI application."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from backend.config import settings
from backend.api.routes import schema
from schemaforge.utils.logging import get_logger, setup_logging_from_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    setup_logging_from_config(level=settings.log_level)
    logger.info("=" * 80)
    logger.info(f"BACKEND STARTUP: {settings.api_title} v{settings.api_version} is ready")
    logger.info("=" * 80)
    yield
    logger.info("BACKEND: Shutting down")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request line and its status/timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "unknown"
        logger.info(f"INCOMING REQUEST: {request.method} {request.url.path} (client {client})")
        if request.query_params:
            logger.debug(f"  Query params: {dict(request.query_params)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"RESPONSE: {request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
        return response


# Add request logging middleware (before CORS so we see all requests)
app.add_middleware(RequestLoggingMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(schema.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        workers=1,
        access_log=False  # RequestLoggingMiddleware covers access logging
    )
