from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles

from accounts_core import __version__
from accounts_core.api.models import fail_response, status_to_code
from accounts_core.api.v1.router import router as v1_router
from accounts_core.config import LoggingConfig, load_core_config, resolve_configured_paths
from accounts_core.db import resolve_db_path
from accounts_core.db.migrate import apply_migrations
from accounts_core.home import ensure_accounts_layout, resolve_accounts_home
from accounts_core.storage import build_storage_manager
from accounts_core.ui.router import STATIC_DIR as UI_STATIC_DIR
from accounts_core.ui.router import router as ui_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_log_file_handler(log_path: Path, config: LoggingConfig) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        log_path,
        maxBytes=config.max_size_mb * 1024 * 1024,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def create_app() -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_accounts_home()
        paths = ensure_accounts_layout(home)
        config = load_core_config(paths)
        paths = resolve_configured_paths(paths, config)

        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(build_log_file_handler(paths.logs_dir / "core.log", config.logging))

        logger.info("Accounts Core starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")

        db_path = resolve_db_path(paths)
        apply_migrations(db_path)

        app.state.accounts_home = home
        app.state.accounts_paths = paths
        app.state.accounts_config = config
        app.state.db_path = db_path
        app.state.storage_manager = build_storage_manager(config=config)

        if not app.state.storage_manager.s3_configured():
            logger.warning("S3 storage is not configured; profile image uploads will fail")

        # Used for server-side PUTs to presigned storage URLs.
        app.state.http_client = httpx.AsyncClient()

        try:
            yield
        finally:
            await app.state.http_client.aclose()
            logger.info("Accounts Core shut down")

    app = FastAPI(title="Accounts Core", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return fail_response(
            422,
            code="validation_error",
            message="Request validation failed",
            details=exc.errors(),
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return fail_response(
            exc.status_code,
            code=status_to_code(exc.status_code),
            message=str(exc.detail),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return fail_response(
            exc.status_code,
            code=status_to_code(exc.status_code),
            message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return fail_response(500, code="internal_error", message="Internal server error")

    app.include_router(v1_router)

    if UI_STATIC_DIR.is_dir():
        app.mount(
            "/ui/static",
            StaticFiles(directory=str(UI_STATIC_DIR)),
            name="ui-static",
        )
    else:
        logger.warning(
            "UI static directory is missing (%s); /ui/static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/ui/settings", status_code=302)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
