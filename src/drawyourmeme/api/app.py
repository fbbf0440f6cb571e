"""
FastAPI application factory.

Wires the registry, image store and settings onto ``app.state``, mounts
the user, token and health routers plus the ``/uploads`` static files,
and runs the Telegram bot alongside the API when it is configured.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from drawyourmeme import __version__
from drawyourmeme.api.middleware.cors import add_cors_middleware
from drawyourmeme.api.middleware.logging import RequestLoggingMiddleware
from drawyourmeme.api.routes import health, tokens, users
from drawyourmeme.api.schemas.exceptions import APIException, ValidationError
from drawyourmeme.artifacts.storage import PUBLIC_PREFIX, ImageStore
from drawyourmeme.config import Settings
from drawyourmeme.registry.storage import Registry

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

API_NAME = "DrawYourMeme API"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run Telegram polling next to the API for the life of the app."""
    settings: Settings = app.state.settings
    logger.info(f"{API_NAME} v{__version__} starting, uploads in {app.state.image_store.root}")

    bot_task: asyncio.Task | None = None
    if settings.bot_enabled:
        from drawyourmeme.bot.handlers import run_polling

        bot_task = asyncio.create_task(run_polling(app.state.registry, settings))
    else:
        logger.info("Telegram bot disabled (DYM_TELEGRAM_BOT_TOKEN not set)")

    yield

    if bot_task is not None:
        bot_task.cancel()
        with suppress(asyncio.CancelledError):
            await bot_task
    logger.info(f"{API_NAME} stopped")


def _field_messages(exc: RequestValidationError) -> dict[str, str]:
    """Map each failing field (camelCase, without its body/query prefix) to a message."""
    fields: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        message = str(err.get("msg", "Invalid value"))
        fields[".".join(loc) or "body"] = message.removeprefix("Value error, ")
    return fields


def create_app(
    settings: Settings | None = None,
    registry: Registry | None = None,
    title: str = API_NAME,
) -> FastAPI:
    """
    Create the DrawYourMeme application.

    Args:
        settings: Service settings; read from DYM_* variables when omitted
        registry: Registry to serve; a fresh empty one when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings.from_env()
    image_store = ImageStore(settings.uploads_dir, max_bytes=settings.max_upload_bytes)

    app = FastAPI(
        title=title,
        description="Draw, launch and vote on meme tokens",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry if registry is not None else Registry()
    app.state.image_store = image_store

    app.add_middleware(RequestLoggingMiddleware, trust_proxy_headers=settings.trust_proxy_headers)
    add_cors_middleware(app, settings.cors_origins)

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(tokens.router, prefix="/api/tokens", tags=["Tokens"])
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=image_store.root), name="uploads")

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed JSON bodies are a 400 with per-field messages, like launch errors."""
        error = ValidationError(_field_messages(exc), message="Request validation failed")
        return JSONResponse(status_code=error.status_code, content=error.body())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "type": "internal_error",
                    "message": "An unexpected error occurred",
                    "detail": None,
                }
            },
        )

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, object]:
        return {
            "name": API_NAME,
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
            "health": "/health",
        }

    return app
