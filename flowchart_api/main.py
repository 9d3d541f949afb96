"""
Clinical Reasoning Flowchart API
================================
FastAPI entry point.
  • POST /api/generate-flowchart — hypotheses + findings → flowchart nodes
  • Permissive CORS headers on every response, errors included
  • Every failure returns a JSON ``{"error": ...}`` body
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flowchart_api.core.config import get_settings
from flowchart_api.core.exceptions import FlowchartError, InvalidInput, InvalidMethod
from flowchart_api.api.v1.endpoints.flowchart import router as flowchart_router

settings = get_settings()

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# ── App ──────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Clinical Reasoning Flowchart API",
    description=(
        "Structures physical-therapy hypotheses and assessment findings\n"
        "into a problem → finding flowchart via a generative-language model."
    ),
    version=VERSION,
)


def _cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ── CORS ─────────────────────────────────────────────────────────────────────
@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(_cors_headers())
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(FlowchartError)
async def flowchart_error_handler(request: Request, exc: FlowchartError):
    logger.warning(f"[FLOWCHART] ✗ {type(exc).__name__} on {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"[FLOWCHART] ✗ Invalid request body on {request.url.path}: {exc.errors()[:3]}")
    return _error_response(InvalidInput.status_code, InvalidInput.default_message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return _error_response(InvalidMethod.status_code, InvalidMethod.default_message)
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: this response skips the middleware stack, so CORS is set here."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    response = _error_response(500, str(exc) or FlowchartError.default_message)
    response.headers.update(_cors_headers())
    return response


# ── Health Check ─────────────────────────────────────────────────────────────
@app.get("/", tags=["System"])
async def health_check():
    return {
        "status": "operational",
        "service": "Clinical Reasoning Flowchart API",
        "version": VERSION,
        "provider": get_settings().AI_PROVIDER,
    }


app.include_router(flowchart_router)

logger.info(f"[INIT] Flowchart API ready (provider: {settings.AI_PROVIDER})")
