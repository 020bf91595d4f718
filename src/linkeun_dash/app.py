from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from linkeun_dash import __version__
from linkeun_dash.auth import (
    cookie_name,
    delete_session_cookie,
    extract_session_token,
    is_exempt_path,
)
from linkeun_dash.config import load_dash_config
from linkeun_dash.context import ANONYMOUS
from linkeun_dash.home import ensure_linkeun_layout, resolve_linkeun_home
from linkeun_dash.queries.cache import QueryCache
from linkeun_dash.session import resolve_session
from linkeun_dash.site import SITE_CONFIG
from linkeun_dash.ui.router import STATIC_DIR as UI_STATIC_DIR
from linkeun_dash.ui.router import router as ui_router
from linkeun_dash.ui.router import templates

logger = logging.getLogger(__name__)


def _sets_cookie(response: Response, name: str) -> bool:
    prefix = f"{name}="
    return any(
        value.decode("latin-1").startswith(prefix)
        for key, value in response.raw_headers
        if key.lower() == b"set-cookie"
    )


def create_app() -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_linkeun_home()
        paths = ensure_linkeun_layout(home)
        config = load_dash_config(paths)

        # Configure Logging
        file_handler = RotatingFileHandler(
            paths.log_path,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)

        logger.info("Linkeun Dash starting up (%s)", config.environment)
        logger.info(f"Backend API: {config.api.base_url}")

        app.state.linkeun_home = home
        app.state.linkeun_paths = paths
        app.state.dash_config = config
        app.state.query_cache = QueryCache(
            stale_seconds=config.queries.stale_seconds,
            max_entries=config.queries.max_entries,
            max_retries=config.queries.max_retries,
        )

        yield

    app = FastAPI(title="Linkeun Dash", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    class _SessionMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next) -> Response:
            if is_exempt_path(request.url.path):
                request.state.context = ANONYMOUS
                return await call_next(request)

            config = request.app.state.dash_config
            resolution = await resolve_session(extract_session_token(request, config), config)
            request.state.context = resolution.context

            response = await call_next(request)

            # A login on this same request may already have replaced the cookie.
            if resolution.clear_cookie and not _sets_cookie(response, cookie_name(config)):
                delete_session_cookie(response, config)
            return response

    app.add_middleware(_SessionMiddleware)

    def _error_page(request: Request, status_code: int, message: str) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "error.html",
            {
                "title": SITE_CONFIG.page_title(str(status_code)),
                "site": SITE_CONFIG,
                "user": getattr(request.state, "context", ANONYMOUS).user,
                "breadcrumbs": [],
                "status_code": status_code,
                "message": message,
            },
            status_code=status_code,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> HTMLResponse:
        return _error_page(request, exc.status_code, str(exc.detail))

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> HTMLResponse:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_page(request, exc.status_code, message)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> HTMLResponse:
        # Details stay in the server log.
        logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return _error_page(request, 500, "Internal server error")

    if UI_STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(UI_STATIC_DIR)), name="static")
    else:
        logger.warning(
            "UI static directory is missing (%s); /static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
