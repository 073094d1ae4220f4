# shelflife/main.py
from __future__ import annotations

import time
import uuid
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shelflife.core.logging import setup_logging
from shelflife.core.settings import settings
from shelflife.routers.deps import get_store
from shelflife.routers.maintenance import router as maintenance_router
from shelflife.routers.product import router as products_router
from shelflife.routers.report import router as report_router
from shelflife.services.errors import ConstraintViolation, InvalidArgument, ParseError, StorageError
from shelflife.services.product_store import ProductStore

APP_STARTED_MONO = time.monotonic()
APP_STARTED_TS = int(time.time())

# --- Logging ---
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("shelflife.api")

tags_metadata = [
    {"name": "health", "description": "Liveness/Readiness checks"},
    {"name": "products", "description": "Product store: insert, list, filter, delete-all"},
    {"name": "report", "description": "Days-until-expiration chart data"},
    {"name": "maintenance", "description": "Destructive schema reset"},
]

# --- Utilitare ---
def _get_req_id_from_headers(request: Request) -> str:
    # Prefer X-Request-ID, apoi X-Correlation-ID; dacă lipsesc, generează unul.
    return (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or uuid.uuid4().hex[:12]
    )

def _error(request: Request, code: int, detail) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={"detail": detail},
        headers={"X-Request-ID": _get_req_id_from_headers(request)},
    )

# --- Middleware func (registered after app is created) ---
async def request_context_mw(request: Request, call_next):
    """
    - Generează/propagă X-Request-ID
    - Headers de securitate minime
    - Server-Timing / X-Process-Time
    """
    req_id = _get_req_id_from_headers(request)
    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    response.headers.setdefault("X-Request-ID", req_id)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("X-App-Version", settings.APP_VERSION)
    response.headers.setdefault("Server-Timing", f"app;dur={duration_ms:.1f}")
    response.headers.setdefault("X-Process-Time", f"{duration_ms:.1f}ms")
    return response

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: deschide store-ul (creează tabelul + seed la prima rulare, migrează la nevoie)
    store: ProductStore = app.state.store
    try:
        store.open()
        logger.info("DB startup check OK (%r, rows=%s)", store, store.count_products())
    except StorageError:
        logger.exception("DB startup check FAILED")

    # Ready to serve
    yield

    store.dispose()

def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorageError)
    async def _storage_handler(request: Request, exc: StorageError):
        return _error(request, status.HTTP_503_SERVICE_UNAVAILABLE, "Product store unavailable.")

    @app.exception_handler(ParseError)
    async def _parse_handler(request: Request, exc: ParseError):
        logger.error("Corrupt stored row: %s", exc)
        return _error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(InvalidArgument)
    async def _invalid_arg_handler(request: Request, exc: InvalidArgument):
        return _error(request, status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(ConstraintViolation)
    async def _constraint_handler(request: Request, exc: ConstraintViolation):
        return _error(request, status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        return _error(request, status.HTTP_422_UNPROCESSABLE_ENTITY, jsonable_encoder(exc.errors()))

    # Prinde 404/405 Starlette și răspunde JSON unitar
    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exc_handler(request: Request, exc: StarletteHTTPException):
        headers = dict(exc.headers or {})
        headers.setdefault("X-Request-ID", _get_req_id_from_headers(request))
        detail = exc.detail
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            detail = {"message": "Not Found", "path": str(request.url.path)}
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            detail = {"message": "Method Not Allowed", "path": str(request.url.path)}
        return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return _error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

def _register_health_routes(app: FastAPI) -> None:
    @app.get("/", tags=["health"])
    def root():
        return {"name": settings.APP_TITLE, "version": settings.APP_VERSION, "env": settings.APP_ENV}

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    @app.get("/health/uptime", tags=["health"])
    def health_uptime():
        return {"uptime_seconds": round(time.monotonic() - APP_STARTED_MONO, 3), "started_at": APP_STARTED_TS}

    @app.get("/health/db", tags=["health"])
    def health_db(store: ProductStore = Depends(get_store)):
        try:
            return {
                "status": "ok",
                "db": "up",
                "schema_version": store.schema_version_stored(),
                "expected_schema_version": store.schema_version,
                "products": store.count_products(),
            }
        except StorageError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="DB not ready")

# --- App factory ---
def create_app(store: Optional[ProductStore] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.store = store or ProductStore(settings.DATABASE_URL)

    app.middleware("http")(request_context_mw)

    # CORS din env: CORS_ORIGINS="http://localhost:3000,https://example.com"
    if settings.CORS_ORIGINS:
        origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Total-Count", "X-Request-ID", "Server-Timing", "X-Process-Time", "X-App-Version"],
        )

    _register_exception_handlers(app)
    _register_health_routes(app)

    # --- Routers ---
    app.include_router(products_router)
    app.include_router(report_router)
    app.include_router(maintenance_router)
    return app

app = create_app()
