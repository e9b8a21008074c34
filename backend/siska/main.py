from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings
from .core.logging import configure_logging, get_logger, get_trace_id
from .core.middleware import TraceIDMiddleware
from .core.tracing import (
    configure_tracing,
    get_trace_id_from_context,
    instrument_fastapi,
    record_exception,
    shutdown_tracing,
)
from .routes import chat, health, metrics
from .services.chat.rendering import INTERNAL_ERROR_TEXT, INVALID_REQUEST_TEXT

settings = get_settings()

# JSON output in production (containerized), console output in development
configure_logging(log_level=settings.log_level, json_output=settings.log_json)

logger = get_logger(__name__)

# Spans are exported only when OTEL_EXPORTER_OTLP_ENDPOINT is set
configure_tracing()

app = FastAPI(
    title="SISKA Proxy API",
    description="Intent dispatch and aggregation over prayer, weather, places and shipping providers",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=settings.frontend_url != "*",
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Must be added after CORS middleware
app.add_middleware(TraceIDMiddleware)

instrument_fastapi(app)


@app.on_event("startup")
async def startup_event():
    """Log which provider credentials are available."""
    logger.info("app_startup_started")
    logger.info("app_startup_credentials", **settings.credential_status())
    missing = [name for name, loaded in settings.credential_status().items() if not loaded]
    if missing:
        logger.warning(
            "app_startup_credentials_missing",
            missing=missing,
            message="Intents depending on these providers will answer with an apology text.",
        )
    logger.info("app_startup_completed", port=settings.port)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("app_shutdown_started")
    shutdown_tracing()
    logger.info("app_shutdown_completed")


def _current_trace_id():
    return get_trace_id() or get_trace_id_from_context()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed chat payloads get a readable 400 instead of FastAPI's 422."""
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        error_count=len(exc.errors()),
    )
    return JSONResponse(status_code=400, content={"responseText": INVALID_REQUEST_TEXT})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions (404, 405, ...)."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})

    trace_id = _current_trace_id()
    response = JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code,
            "trace_id": trace_id,
        },
    )
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Last resort: the caller still gets a responseText payload."""
    trace_id = _current_trace_id()
    record_exception(exc)
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    response = JSONResponse(status_code=500, content={"responseText": INTERNAL_ERROR_TEXT})
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


app.include_router(chat.router, tags=["Chat"])
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
