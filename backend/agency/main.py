import logging
import os
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .api import api_contract, api_payment
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, engine, get_db_session
from .db_utils import ensure_agency_settings_row, ensure_client_version_column
from .middleware.cors import EmptyPreflightCORSMiddleware
from .middleware.security_headers import SecurityHeadersMiddleware
from .utils import ErrorKind, PaymentError
from .utils.metrics import incr
from .utils.status_logger import register_status_listeners

setup_logging()
logger = logging.getLogger(__name__)

_BOOT_TS = time.time()

# ─── Schema bootstrap (Alembic owns real migrations; this keeps dev/test DBs usable)
Base.metadata.create_all(bind=engine)
ensure_client_version_column(engine)
with get_db_session() as _db:
    ensure_agency_settings_row(_db)
register_status_listeners()

api_prefix = settings.API_V1_STR  # usually "/api/v1"

# Always use ORJSONResponse for JSON payloads to ensure consistent, fast
# serialization across all endpoints.
app = FastAPI(title=settings.PROJECT_NAME, default_response_class=ORJSONResponse)
setup_tracer(app)


def _merge_origins(*groups) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for origin in group:
            if not origin:
                continue
            normalized = origin.rstrip("/")
            if normalized not in merged:
                merged.append(normalized)
    return merged


ALLOWED_ORIGINS = _merge_origins(settings.CORS_ORIGINS)
ALLOW_ANY_ORIGIN = "*" in ALLOWED_ORIGINS

# Public payment pages call these endpoints from the browser; a wildcard origin
# cannot be combined with credentials, and none are needed.
app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=["*"] if ALLOW_ANY_ORIGIN else ALLOWED_ORIGINS,
    allow_credentials=not ALLOW_ANY_ORIGIN,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Server-Timing"],
)
logger.info("CORS origins set to: %s", ALLOWED_ORIGINS)

app.add_middleware(
    SecurityHeadersMiddleware,
    no_store_prefixes=(f"{api_prefix}/payments", f"{api_prefix}/contracts"),
)
app.add_middleware(GZipMiddleware, minimum_size=1024)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Turn unhandled errors into JSON 500s and stamp Server-Timing."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error at %s: %s", request.url.path, exc)
        incr("http.unhandled_error")
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )
        # Ensure browsers can read the failure even though the CORS middleware was bypassed
        origin = request.headers.get("origin")
        if origin and (ALLOW_ANY_ORIGIN or origin.rstrip("/") in ALLOWED_ORIGINS):
            response.headers["Access-Control-Allow-Origin"] = "*" if ALLOW_ANY_ORIGIN else origin
            if not ALLOW_ANY_ORIGIN:
                response.headers["Vary"] = "Origin"
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    response.headers["Server-Timing"] = f"app;dur={elapsed_ms:.1f}"
    return response


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    logger.warning(
        "Payment error at %s: code=%s message=%s",
        request.url.path,
        exc.kind.value,
        exc.message,
    )
    return ORJSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Database failures surface as external failures with the driver message."""
    logger.error("Database error at %s: %s", request.url.path, exc)
    message = str(getattr(exc, "orig", None) or exc)
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "code": ErrorKind.EXTERNAL_FAILURE.value},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject malformed payloads before any business logic runs."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    field_errors: dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field_errors.setdefault(".".join(loc) or "body", err.get("msg", "invalid"))
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Solicitud inválida",
            "code": ErrorKind.BAD_REQUEST.value,
            "field_errors": field_errors,
        },
    )


@app.get("/healthz/live", tags=["health"])
async def health_live():
    """Liveness probe: process can respond; does not touch the DB."""
    return {
        "status": "ok",
        "kind": "live",
        "uptime_s": round(time.time() - _BOOT_TS, 1),
        "pid": os.getpid(),
    }


@app.get("/healthz/ready", tags=["health"])
def health_ready():
    """Readiness probe: the database answers ``SELECT 1``."""
    started = time.perf_counter()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Readiness DB ping failed: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "kind": "ready", "ready": False, "error": str(exc)},
            headers={"Cache-Control": "no-store"},
        )
    return ORJSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ok",
            "kind": "ready",
            "ready": True,
            "db_ping_ms": round((time.perf_counter() - started) * 1000.0, 1),
        },
        headers={"Cache-Control": "no-store"},
    )


app.include_router(api_payment.router, prefix=f"{api_prefix}/payments")
app.include_router(api_contract.router, prefix=f"{api_prefix}/contracts")


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
