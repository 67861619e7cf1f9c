"""
api/main.py -- FastAPI application factory for the user service.

Run with:  python main.py              (connects to MongoDB, then serves)
           uvicorn asgi:app --reload

Wiring:
  create_app(user_store=...) takes an already-connected UserStore. The store is
  put on app.state.user_store and reaches route handlers through the
  get_user_store dependency. Nothing in the request path reads a module-level
  connection.

  create_app() with no store lets the lifespan connect using Settings. If the
  connection fails the lifespan raises, so uvicorn aborts startup instead of
  serving requests without a database.

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- permissive by default (CORS_ORIGINS=["*"])
  2. log_requests   -- one log line per request with status and latency
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ComponentStatus, ErrorResponse, HealthResponse
from api.routes.users import router as users_router
from auth.store import UserStore, connect_user_store
from core.config import get_settings

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userauth.api")


def create_app(user_store: UserStore | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        user_store: A connected store. The caller keeps ownership and closes
                    it. When None, the lifespan connects from Settings on
                    startup and closes the store on shutdown.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("User service starting up")
        store = user_store
        if store is None:
            try:
                store = connect_user_store(settings)
            except PyMongoError:
                logger.exception("MongoDB connection error")
                raise
            logger.info("MongoDB connected (db=%s, collection=%s)", settings.db_name, settings.collection_name)
        app.state.user_store = store

        yield

        if user_store is None:
            store.close()
        logger.info("User service shutdown complete")

    app = FastAPI(
        title="User Auth API",
        description="User signup and login with JWT session tokens.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    app.include_router(users_router, prefix="/api", tags=["Users"])
    _register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def root() -> str:
        return "API is running..."

    @app.get("/api/health", tags=["Health"])
    def health(request: Request) -> HealthResponse:
        """Return API liveness, version and database reachability."""
        database = "ok"
        try:
            request.app.state.user_store.ping()
        except PyMongoError as exc:
            logger.warning("Health check: MongoDB ping failed: %s", exc)
            database = "error"
        return HealthResponse(version=__version__, components=ComponentStatus(database=database))

    return app


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same flat ErrorResponse envelope so clients read
# body["message"] regardless of status code.
# ---------------------------------------------------------------------------


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 422 when the request body is missing fields or has the wrong types.

        Each error keeps only type, loc, msg. pydantic also attaches the offending
        input, which for a missing field is the whole body, password included.
        """
        errors = [{k: v for k, v in e.items() if k in ("type", "loc", "msg")} for e in exc.errors()]
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                message="Request validation failed.",
                code="validation_error",
                detail=jsonable_encoder(errors),
            ).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render HTTPException in the shared envelope.

        Route handlers raise HTTPException with detail={"code", "message"}.
        Framework-raised ones (404, 405) carry a plain string detail.
        """
        if isinstance(exc.detail, dict):
            body = ErrorResponse(message=exc.detail["message"], code=exc.detail["code"])
        else:
            body = ErrorResponse(message=str(exc.detail), code=f"http_{exc.status_code}")
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for errors raised outside the route try blocks (e.g. in dependencies).

        The exception goes to the log only; the client gets the generic message.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message="Server error", code="server_error").model_dump(),
        )
