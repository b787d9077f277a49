"""
StudyBuddy — Study Companion API
=================================
FastAPI entry point.
  • Global exception handlers: every error is a JSON ErrorResponse envelope
  • Profile/theme state loaded at startup, saved on every mutation
  • Notes, mind map, learning path and tutor chat under /api/v1
  • A missing API key degrades to a health warning, never a crash
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studybuddy import __version__
from studybuddy.core.config import settings
from studybuddy.core.errors import StudyBuddyError
from studybuddy.schemas.common import ErrorResponse, HealthResponse
from studybuddy.services.state_store import StudyState
from studybuddy.api.v1.router import api_router

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)

MISSING_KEY_WARNING = (
    "GOOGLE_API_KEY is not configured. Notes, mind maps, learning paths "
    "and the tutor are unavailable until it is set."
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.study = StudyState.load(settings.STATE_FILE)
    if not settings.has_api_key:
        logger.warning(f"[INIT] {MISSING_KEY_WARNING}")
    yield


# ── App ──────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="StudyBuddy — Study Companion API",
    description=(
        "Onboarding, visual notes, mind maps, learning paths and a chat tutor,\n"
        "all backed by Google Gemini."
    ),
    version=__version__,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


# ── Exception Handlers ──────────────────────────────────────────────────────
@app.exception_handler(StudyBuddyError)
async def studybuddy_exception_handler(request: Request, exc: StudyBuddyError):
    """Known failures: map to the status code the error class declares."""
    logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc}")
    body = ErrorResponse(message=str(exc), detail=exc.__class__.__name__)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = ErrorResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in errors
    )
    body = ErrorResponse(message="Invalid request.", detail=detail)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: every unhandled exception returns a clean JSON envelope."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponse(
        message="An internal server error occurred.",
        detail=str(exc),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health Check ─────────────────────────────────────────────────────────────
@app.get("/", response_model=HealthResponse, tags=["System"])
async def health_check():
    configured = settings.has_api_key
    return HealthResponse(
        status="operational" if configured else "degraded",
        service="StudyBuddy Study Companion",
        version=__version__,
        model=settings.GEMINI_MODEL,
        api_key_configured=configured,
        warnings=[] if configured else [MISSING_KEY_WARNING],
    )


app.include_router(api_router, prefix="/api/v1")
