"""
FastAPI application factory for the transaction dashboard API.

Usage:
    python -m api.app                          # Dev server on port 8000
    APP_DB_PATH=/data/tx.sqlite python -m api.app

OpenAPI docs available at http://localhost:8000/api-docs after starting.

Structured JSON logging when APP_LOG_FORMAT=json.
CORS middleware with configurable origins via APP_CORS_ORIGINS.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.database import ensure_database
from api.routes import transactions
from utils.config import AppConfig
from utils.database import connect, get_table_count
from utils.errors import TransactionError

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


_logger = logging.getLogger("transactions_api")
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
    """Create the database file and schema on startup if missing."""
    ensure_database(app.state.db_path)
    _logger.info("Settings: %s", app.state.config.to_dict())
    yield


def _error_body(error: str, status_code: int, detail: str | None = None,
                kind: str | None = None) -> dict:
    return {"error": error, "kind": kind, "detail": detail, "status_code": status_code}


_ERROR_TITLES = {
    400: "Bad request",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
}


def create_app(
    db_path: Path | None = None,
    config: AppConfig | None = None,
    seed_session: requests.Session | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Override the database path (useful for testing).
        config: Override the environment-derived configuration.
        seed_session: HTTP session used to fetch the seed feed; a fresh
            session per request is used when None.

    Returns:
        Configured FastAPI application instance.
    """
    cfg = config or _cfg

    app = FastAPI(
        title="Transaction API",
        summary="Browse, search and chart seeded product transactions by month.",
        description=(
            "## Transaction Dashboard API\n\n"
            "Every month-filtered endpoint matches the named calendar month "
            "in **any year**. Month names must be full English names "
            "(`January` .. `December`); anything else returns `400` with "
            "`kind: invalid_month`.\n\n"
            f"When `month` is omitted the server default (`{cfg.default_month}`) "
            "is used for all endpoints.\n\n"
            "Call `/api/transactions/initialize` once to load the seed feed."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api-docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "transactions",
                "description": "Month-filtered listing, statistics and chart data.",
            },
            {
                "name": "meta",
                "description": "Health check.",
            },
        ],
    )
    app.state.config = cfg
    app.state.db_path = Path(db_path if db_path is not None else cfg.db_path)
    app.state.seed_session = seed_session

    # ── CORS middleware ───────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── Request logging middleware ────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request with its status, duration and a short request id."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if cfg.log_format == "json":
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

    # ── Error handling ────────────────────────────────────────────────────────

    @app.exception_handler(TransactionError)
    async def transaction_error_handler(request: Request, exc: TransactionError):
        status = exc.status_code
        if status >= 500:
            _logger.error("%s on %s: %s", exc.kind, request.url.path, exc.detail)
        return JSONResponse(
            status_code=status,
            content=_error_body(_ERROR_TITLES.get(status, "Error"), status, **exc.to_dict()),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content=_error_body("Bad request", 400, detail=str(exc)),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions and return JSON instead of HTML traceback."""
        _logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", 500, detail=str(exc)),
        )

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check")
    def health(request: Request):
        """Return 200 OK if the API is running and can read the store."""
        path = request.app.state.db_path
        if not path.exists():
            return JSONResponse(
                status_code=503,
                content={"status": "no_database", "database": str(path)},
            )
        try:
            conn = connect(path, read_only=True)
            try:
                count = get_table_count(conn)
            finally:
                conn.close()
        except Exception as e:
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "error": str(e)},
            )
        return {"status": "ok", "database": str(path), "transactions": count}

    # ── Register routers ──────────────────────────────────────────────────────

    app.include_router(transactions.router, prefix="/api")

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
