from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from animeshelf.api.container import Container, build_container
from animeshelf.api.routers import auth, profile, system
from animeshelf.domain.exceptions import (
    AuthError,
    DomainError,
    EmailAlreadyExistsError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from animeshelf.infrastructure.security.session_manager import SessionManager
from animeshelf.shared.config import Settings, get_settings
from animeshelf.shared.logging_config import configure_logging


logger = logging.getLogger(__name__)


async def prune_sessions_periodically(session_manager: SessionManager, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            session_manager.prune_expired()
        except Exception:
            logger.exception("main: session_prune_failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: Container = app.state.container
    task = asyncio.create_task(
        prune_sessions_periodically(
            container.session_manager,
            container.settings.session_prune_interval_seconds,
        )
    )
    logger.info("main: started data_file=%s", container.store.path)
    try:
        yield
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else str(message)


def _domain_status(exc: DomainError) -> int:
    if isinstance(exc, EmailAlreadyExistsError):
        return 409
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, UpstreamError):
        return 502
    return 500


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = _domain_status(exc)
        if isinstance(exc, StorageError):
            logger.error("main: storage_error path=%s error=%s", request.url.path, exc)
            return JSONResponse(status_code=500, content={"error": "Failed to persist data."})
        if status_code >= 500:
            logger.error("main: domain_error path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("main: unhandled_error path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error."})


def create_app(settings: Settings | None = None, *, container: Container | None = None) -> FastAPI:
    settings = settings or (container.settings if container is not None else get_settings())
    configure_logging(settings.log_level)
    container = container or build_container(settings)

    app = FastAPI(title="animeshelf API", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        "animeshelf.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8787")),
    )


if __name__ == "__main__":
    run()
