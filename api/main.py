"""
api/main.py -- FastAPI application entry point for the RecordKeeper mock API.

A small REST facade over two collections (users, records) with bearer-token
auth. Stands in for a real backend while the client is developed.

Run with:      uvicorn asgi:app --reload
               python asgi.py

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- only the client dev origin may call from a browser
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan handles startup (stores, seed data) and shutdown (dispose engines)
symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import EndpointInfo, ErrorDetail, ErrorResponse, HealthResponse, IndexResponse
from api.routes.auth import router as auth_router
from api.routes.profile import router as profile_router
from api.routes.records import router as records_router
from api.routes.users import router as users_router
from api.seed import seed_initial_data
from auth.store import UserStore
from core.config import VERSION, get_settings
from records.store import RecordStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("recordkeeper.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the stores on startup and dispose of them on shutdown.

    Both stores point at the same database URL. Seeding runs after both
    exist because the seed writes to users and records.
    """
    logger.info("RecordKeeper API starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.record_store = RecordStore(_settings.database_url)
    logger.info("Stores initialized")
    if _settings.seed_on_startup and seed_initial_data(app.state.user_store, app.state.record_store):
        logger.info("Empty database seeded with initial data")

    yield

    app.state.record_store.close()
    app.state.user_store.close()
    logger.info("RecordKeeper API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="RecordKeeper API",
    description="Mock REST API for records management with bearer-token authentication.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

# Added first so it sits inside CORS (Starlette wraps in reverse order).
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Total-Count"],
    max_age=3600,
)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Wall-clock time is captured around call_next to report latency.
# In debug mode the presence (never the value) of the Authorization header
# is logged too, which is the quickest way to see why a call got a 401.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    if _settings.debug:
        logger.debug(
            "Authorization header %s on %s %s",
            "present" if request.headers.get("Authorization") else "absent",
            request.method,
            request.url.path,
        )
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


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(records_router, tags=["Records"])
app.include_router(profile_router, tags=["Profile"])
app.include_router(users_router, tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 naming the offending fields when a body or query fails validation."""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message=f"Invalid or missing fields: {', '.join(fields)}.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all HTTP exceptions.

    Route handlers raise HTTPException with a {"code", "message"} dict as
    detail. When detail is already structured, use it directly as the error
    field rather than stringifying it. Router-level 404/405 carry a plain
    string and get a generated code.
    """
    if isinstance(exc.detail, dict):
        content = {"error": exc.detail}
    else:
        content = ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump()
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged server-side. The response body only carries
    it in debug mode; otherwise the client gets a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
                detail=str(exc) if _settings.debug else None,
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Index and health
#
# Defined directly in main.py (not in a router) so they are always reachable
# regardless of router registration state. No auth and no rate limit.
# ---------------------------------------------------------------------------

_ENDPOINTS: dict[str, dict[str, EndpointInfo]] = {
    "auth": {
        "login": EndpointInfo(path="/login", method="POST", description="Log in and obtain a bearer token", requires_auth=False),
    },
    "records": {
        "getAll": EndpointInfo(
            path="/records",
            method="GET",
            description="List records",
            requires_auth=True,
            query_params=["_page", "_limit", "q", "_sort", "_order"],
        ),
        "getOne": EndpointInfo(path="/records/:id", method="GET", description="Get one record", requires_auth=True),
        "create": EndpointInfo(path="/records", method="POST", description="Create a record", requires_auth=True),
        "update": EndpointInfo(path="/records/:id", method="PUT", description="Replace a record", requires_auth=True),
        "patch": EndpointInfo(path="/records/:id", method="PATCH", description="Partially update a record", requires_auth=True),
        "delete": EndpointInfo(path="/records/:id", method="DELETE", description="Delete a record", requires_auth=True),
    },
    "profile": {
        "get": EndpointInfo(path="/profile", method="GET", description="Profile of the authenticated user", requires_auth=True),
        "update": EndpointInfo(path="/profile", method="PUT", description="Update the authenticated user's profile", requires_auth=True),
    },
    "users": {
        "get": EndpointInfo(path="/users/:id", method="GET", description="Get a user by id", requires_auth=True),
        "update": EndpointInfo(path="/users/:id", method="PUT", description="Update a user's name or email", requires_auth=True),
    },
}


@app.get("/", response_model=IndexResponse, tags=["Health"])
async def index() -> IndexResponse:
    """Describe the API: version, server time and the endpoint map."""
    return IndexResponse(version=VERSION, endpoints=_ENDPOINTS)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness plus a database round-trip check."""
    db_ok = request.app.state.user_store.ping() and request.app.state.record_store.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=VERSION,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
