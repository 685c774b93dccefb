from __future__ import annotations

"""Polyglot Chat Backend - Main Application Entry Point

FastAPI application factory for the chat personalization backend.

Architecture Overview:
    - Text transformations (translate, scale, correct, transcribe) backed by Gemini
    - Per-message transformation cache fed through a durable retry queue
    - Voice message finalization: transcribe once, personalize and synthesize per recipient
    - PostgreSQL (Supabase) in production, SQLite for local development and tests

Entry Points:
    - /health - Health check endpoint
    - /api/v1/translate, /scale, /correction, /transcribe - Text transformations
    - /api/v1/alternatives, /translate-with-alternatives - Rephrasing helpers
    - /api/v1/transformations - Cached per-message translations and scaled texts
    - /api/v1/tts - Cached playback clips
    - /api/v1/voice-message/finalize - Voice message personalization
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.utils.env import get_env, is_production

# Track startup time in non-production environments
start_time = time.time() if not is_production() else None

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.database.defaults import AUTO_CREATE_TABLES
from core.auth import AuthenticationError
from core.exceptions import ConfigurationError, ServiceError
from core.http.errors import error_response_for
from core.logging import setup_logging
from core.observability import register_http_request_logging
from core.pydantic_schemas import error_response
from core.queue import get_durable_queue_store
from features.transformations.dependencies import get_connectivity_monitor, get_transformation_cache
from features.transformations.routes import router as transformations_router
from features.tts.routes import router as tts_router
from features.voice_messages.routes import router as voice_messages_router
from infrastructure.db import dispose_all_engines, prepare_database, require_main_session_factory
from infrastructure.db import engines

setup_logging()
logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


async def _start_background_services(app: FastAPI) -> None:
    try:
        require_main_session_factory()
    except ConfigurationError as exc:
        logger.warning("Database not configured; queues stay idle: %s", exc)
        return

    if AUTO_CREATE_TABLES and engines.main_engine is not None:
        await prepare_database(engines.main_engine)
        logger.info("Database tables ensured")

    cache = get_transformation_cache()
    app.state.transformation_cache = cache
    recovered = await cache.queue.start()
    monitor = get_connectivity_monitor()
    monitor.subscribe(cache.queue.notify_online)
    monitor.start()
    logger.info("Transformation queue started (%d recovered unit(s))", recovered)


async def _stop_background_services(app: FastAPI) -> None:
    await get_connectivity_monitor().stop()
    cache = getattr(app.state, "transformation_cache", None)
    if cache is not None:
        await cache.queue.stop()
    store = get_durable_queue_store()
    if store is not None:
        await store.close()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events."""

    await _start_background_services(app)
    yield
    logger.info("Application shutting down...")
    await _stop_background_services(app)
    await dispose_all_engines()
    logger.info("Shutdown complete")


def _configure_cors(app: FastAPI) -> None:
    if is_production():
        origins = [origin.strip() for origin in (get_env("CORS_ALLOWED_ORIGINS") or "*").split(",") if origin.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        return

    # Local clients (Expo web, Vite) on any port
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        response = error_response(exc.code, exc.message, {"reason": exc.reason} if exc.reason else None)
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Typed errors that escape a route (rate limits, a dependency without configuration)."""

        response = error_response_for(exc)
        if response.status_code < 500:
            logger.warning("Rejected %s: %s", request.url.path, exc)
        else:
            logger.error("Unhandled %s on %s: %s", exc.__class__.__name__, request.url.path, exc)
        return response


def create_app() -> FastAPI:
    """Application factory returning a configured FastAPI instance."""

    app = FastAPI(
        title="Polyglot Chat Backend",
        description="Translation, proficiency scaling and voice personalization for chat messages",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    _configure_cors(app)
    _register_error_handlers(app)

    @app.get("/health")
    async def health_check() -> dict[str, object]:
        cache = getattr(app.state, "transformation_cache", None)
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "online": get_connectivity_monitor().is_online(),
            "queuedTransformations": cache.queue.pending_count() if cache is not None else 0,
        }

    register_http_request_logging(app)
    app.include_router(transformations_router)
    app.include_router(tts_router)
    app.include_router(voice_messages_router)

    if start_time is not None:
        logger.info("Application created (loaded in %.2fs)", time.time() - start_time)
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
