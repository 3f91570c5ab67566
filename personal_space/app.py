"""
FastAPI application entry point for the personal space backend.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from personal_space.config import Settings, get_settings
from personal_space.db import DbClient, StoreError
from personal_space.dependencies import build_db_client
from personal_space.routes import router

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"{location}: {first.get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        return _error(400, message)

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        return _error(500, str(exc))


def _install_body_limit(app: FastAPI, max_body_bytes: int) -> None:
    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is not None:
            if declared.isdigit() and int(declared) > max_body_bytes:
                return _error(413, "Payload too large")
        elif request.method in ("POST", "PUT", "PATCH"):
            # Chunked bodies carry no length; buffer and measure them here.
            # Starlette replays the cached body to the route.
            body = await request.body()
            if len(body) > max_body_bytes:
                return _error(413, "Payload too large")
        return await call_next(request)


def _install_frontend(app: FastAPI, static_dir: Path, api_prefix: str) -> None:
    root = static_dir.resolve()
    api_root = api_prefix.strip("/")

    @app.get("/{full_path:path}", include_in_schema=False)
    def frontend(full_path: str):
        if api_root and (full_path == api_root or full_path.startswith(f"{api_root}/")):
            raise HTTPException(status_code=404, detail="Not found")
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        index = root / "index.html"
        if not index.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(index)


def create_app(
    settings: Optional[Settings] = None, db_client: Optional[DbClient] = None
) -> FastAPI:
    settings = settings or get_settings()
    if db_client is None:
        db_client = build_db_client(settings)

    app = FastAPI(title="Personal Space Backend", version="0.1.0")
    app.state.settings = settings
    app.state.db_client = db_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_body_limit(app, settings.max_body_bytes)
    _install_error_handlers(app)

    app.include_router(router, prefix=settings.api_prefix)
    _install_frontend(app, Path(settings.static_dir), settings.api_prefix)
    return app
