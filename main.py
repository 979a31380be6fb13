"""
Main API module for the shortlink service.

Responsibilities:
    - Expose REST endpoints to shorten URLs, list them and read click stats
    - Redirect short codes to their original URL, counting one click each
    - Map core error kinds to HTTP responses in one place

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Settings are built once and passed down explicitly; only
      `shortlink.config` reads the environment.
    - LinkManager owns the shorten/resolve rules; the store is injected.
"""

import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shortlink import errors
from shortlink.config import Settings
from shortlink.manager.link_manager import LinkManager
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage_factory import get_storage

log = logging.getLogger("shortlink")


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(ApiModel):
    """Request payload for creating a short URL."""
    original_url: Optional[str] = None


class ShortenResponse(ApiModel):
    short_code: str
    short_url: str


class StatsResponse(ApiModel):
    short_code: str
    original_url: str
    clicks: int
    created_at: datetime


class MappingResponse(StatsResponse):
    id: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(settings: Optional[Settings] = None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Explicit configuration; read from the environment when omitted.
        storage: Store to use instead of the one selected by `settings`.

    Returns:
        FastAPI: A configured application with its own store and LinkManager
                 (exposed as `app.state.manager` for tests and tooling).
    """
    settings = settings or Settings.from_env()

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        )

    app = FastAPI(
        title="Shortlink",
        description="URL shortener with per-link click counting",
        docs_url="/docs",
    )
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage or get_storage(settings)
    storage.init_schema()
    manager = LinkManager.from_settings(storage, settings)
    app.state.settings = settings
    app.state.manager = manager
    log.info("Shortlink storage: %s, base URL: %s", type(storage).__name__, settings.base_url)

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(errors.ValidationError)
    def handle_validation(request: Request, exc: errors.ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    def handle_bad_body(request: Request, exc: RequestValidationError):
        log.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error(400, "originalUrl is required")

    @app.exception_handler(errors.NotFoundError)
    def handle_not_found(request: Request, exc: errors.NotFoundError):
        return _error(404, "URL not found")

    @app.exception_handler(errors.GenerationExhaustedError)
    def handle_exhausted(request: Request, exc: errors.GenerationExhaustedError):
        log.error("Error %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "Internal Server Error")

    @app.exception_handler(errors.StoreTimeoutError)
    def handle_store_timeout(request: Request, exc: errors.StoreTimeoutError):
        log.error("Store timeout on %s %s: %s", request.method, request.url.path, exc)
        return _error(503, "Service Unavailable")

    @app.exception_handler(errors.StoreError)
    def handle_store_error(request: Request, exc: errors.StoreError):
        log.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "Internal Server Error")

    @app.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception):
        log.error("Error %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return _error(500, "Internal Server Error")

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/", include_in_schema=False)
    def index():
        page = Path(settings.public_dir) / "index.html"
        if not page.is_file():
            return _error(404, "Not found")
        return FileResponse(page)

    api = APIRouter(prefix="/api/v1/url")

    @api.post("/shorten", status_code=201, response_model=ShortenResponse)
    def shorten(req: Optional[ShortenRequest] = None):
        """
        Create a short URL.

        Returns 201 with `shortCode` and `shortUrl`; 400 when `originalUrl`
        is missing or blank.
        """
        result = manager.shorten(req.original_url if req else None, settings.base_url)
        return ShortenResponse(short_code=result.short_code, short_url=result.short_url)

    @api.get("/list", response_model=List[MappingResponse])
    def list_urls():
        """All mappings, newest first."""
        return [MappingResponse(**asdict(m)) for m in manager.list_all()]

    @api.get("/{short_code}/stats", response_model=StatsResponse)
    def url_stats(short_code: str):
        return StatsResponse(**asdict(manager.get_stats(short_code)))

    @api.get("/{short_code}")
    def api_redirect(short_code: str):
        return RedirectResponse(url=manager.resolve(short_code), status_code=302)

    app.include_router(api)

    # Public short URL redirect, e.g. http://localhost:5000/AbCd12
    @app.get("/{short_code}")
    def redirect(short_code: str):
        """Resolve a short code, count the click and redirect (302)."""
        return RedirectResponse(url=manager.resolve(short_code), status_code=302)

    return app


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()


if __name__ == "__main__":
    _settings: Settings = app.state.settings
    uvicorn.run(app, host=_settings.host, port=_settings.port)
