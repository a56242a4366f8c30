"""
FastAPI application factory for the Trip Planner API.

Usage:
    python -m api.app                    # Dev server on port 3001
    APP_DB_PATH=/data/trips.sqlite python -m api.app

OpenAPI docs available at http://localhost:3001/docs after starting.

Logging: plain text by default, newline-delimited JSON when
APP_LOG_FORMAT=json.  CORS origins come from APP_CORS_ORIGINS.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import api.database as _db
from api.models import HealthResponse
from api.routes import trips
from utils.config import AppConfig

# ── Configuration ─────────────────────────────────────────────────────────────
_cfg = AppConfig.from_env()

# ── Structured JSON logging ───────────────────────────────────────────────────


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Merge extra fields added via logger.info("...", extra={...})
        for key in ("method", "path", "status", "duration_ms", "request_id"):
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


_logger = logging.getLogger("trip_planner_api")
_handler = logging.StreamHandler()
if _cfg.log_format == "json":
    _handler.setFormatter(_JsonFormatter())
else:
    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
logging.basicConfig(handlers=[_handler], level=logging.INFO, force=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the trip store once on startup."""
    _logger.info("Configuration: %s", _cfg.to_dict())
    connected = _db.connect_database()
    _logger.info(
        "Database status: %s", "Connected" if connected else "Disconnected"
    )
    yield


def _validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type"),
        })
    return details


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Override the database path (useful for testing).

    Returns:
        Configured FastAPI application instance.
    """
    if db_path is not None:
        _db._DB_PATH = Path(db_path)

    app = FastAPI(
        title="Trip Planner API",
        summary="Create, browse, search and update planned trips.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "trips",
                "description": "Create, list (search / filter / paginate), fetch and update trips.",
            },
            {
                "name": "meta",
                "description": "Health check.",
            },
        ],
    )

    # ── CORS middleware ───────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cfg.cors_origins,
        allow_credentials=_cfg.cors_origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    # ── Request logging middleware ────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request with its duration and a short request ID."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if _cfg.log_format == "json":
            _logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "request_id": request_id,
                },
            )
        else:
            _logger.info(
                "method=%s path=%s status=%d duration_ms=%.1f rid=%s",
                request.method, request.url.path, response.status_code,
                duration_ms, request_id,
            )
        return response

    # ── Error handlers ────────────────────────────────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Validation failed",
                "details": _validation_details(exc),
                "status_code": 400,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "status_code": exc.status_code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions and return JSON instead of a traceback."""
        _logger.error(
            "Unhandled error on %s %s", request.method, request.url.path,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "status_code": 500},
        )

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check", response_model=HealthResponse)
    def health() -> HealthResponse:
        """Report liveness plus the database flag recorded at startup."""
        connected = _db.is_connected()
        return HealthResponse(
            status="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            database={
                "connected": connected,
                "status": "Connected" if connected else "Disconnected",
            },
        )

    # ── Register routers ──────────────────────────────────────────────────────

    app.include_router(trips.router, prefix="/api")

    return app


# Singleton instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.app:app",
        host=_cfg.api_host,
        port=_cfg.api_port,
        reload=True,
        log_level="info",
    )
