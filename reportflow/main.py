# reportflow/main.py
"""
ReportFlow validation API.

HTTP surface for the validation-session side of report generation: report
handlers open a session, record each missing-field attempt, read the
accumulated state and drop it when done. State lives in-process only.
"""

from fastapi import FastAPI, HTTPException, Depends, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.security import APIKeyHeader
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from pydantic import BaseModel, Field
from typing import List, Optional
from contextlib import asynccontextmanager
from datetime import datetime
import os
import secrets

from reportflow.core.config import settings, validate_required_settings
from reportflow.core.exceptions import ValidationError, SessionError
from reportflow.core.logging_config import setup_logging
from reportflow.core.rate_limit_config import get_real_ip, RATE_LIMIT_TIERS, RATE_LIMIT_MESSAGE
from reportflow.core.state import SessionValidationStore, ValidationCache
from reportflow.models.validation_state import ValidationState
from reportflow.services.field_guidance import FieldGuidanceService
from reportflow.services.sweeper_service import ValidationSweeperService, SweeperConfig
from reportflow.services.validation_session_service import ValidationSessionService

API_VERSION = "1.0.0"

logger = setup_logging("DEBUG" if settings.DEBUG else None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the validation store and its services; stop the sweeper on shutdown"""
    logger.info("=" * 60)
    logger.info(f"🚀 {settings.APP_NAME} validation API starting...")
    logger.info("=" * 60)

    if not validate_required_settings():
        logger.warning("⚠️ Some settings are invalid - check the log above")

    store = SessionValidationStore()
    cache = ValidationCache(ttl_seconds=settings.VALIDATION_CACHE_TTL_SECONDS)
    guidance = FieldGuidanceService()
    sweeper = ValidationSweeperService(
        store,
        cache,
        SweeperConfig(
            interval_seconds=settings.VALIDATION_SWEEP_INTERVAL_SECONDS,
            max_age_ms=settings.VALIDATION_STATE_MAX_AGE_MS
        )
    )

    try:
        await sweeper.initialize()
    except Exception as e:
        logger.error(f"❌ Failed to start validation sweeper: {e}")
        raise

    app.state.validation_store = store
    app.state.validation_cache = cache
    app.state.field_guidance = guidance
    app.state.session_service = ValidationSessionService(store, cache, guidance)
    app.state.sweeper = sweeper

    logger.info("📋 Configuration:")
    logger.info(f"  - State max age: {settings.VALIDATION_STATE_MAX_AGE_MS} ms")
    logger.info(f"  - Result cache TTL: {settings.VALIDATION_CACHE_TTL_SECONDS} s")
    if sweeper.enabled:
        logger.info(f"  - Sweeper: every {settings.VALIDATION_SWEEP_INTERVAL_SECONDS}s")
    else:
        logger.info("  - Sweeper: disabled")
    logger.info("✅ ReportFlow API ready")

    yield

    logger.info("🛑 ReportFlow API shutting down...")
    await sweeper.shutdown()
    logger.info(f"👋 Dropped {len(store)} in-flight validation sessions")


app = FastAPI(
    title="ReportFlow Validation API",
    description="Validation session state for narrative report generation",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None
)

# =============================================================================
# API KEY AUTHENTICATION
# =============================================================================

API_KEY_NAME = "X-API-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def get_api_key() -> str:
    """Get API key from environment or generate one for development"""
    api_key = os.getenv("REPORTFLOW_API_KEY")
    if not api_key:
        api_key = secrets.token_urlsafe(32)
        logger.warning("⚠️ No REPORTFLOW_API_KEY set. Generated temporary key.")
        logger.warning("⚠️ Set REPORTFLOW_API_KEY environment variable for production!")
        logger.warning(f"⚠️ Temporary key (first 8 chars): {api_key[:8]}...")
    else:
        logger.info("✅ API Key configured from environment")
    return api_key


VALID_API_KEY = get_api_key()


def get_safe_error_message(error: Exception, context: str = "") -> str:
    """Return a safe error message that doesn't expose internal details"""
    logger.error(f"Error in {context}: {type(error).__name__}: {str(error)}")

    if isinstance(error, HTTPException):
        return error.detail

    error_messages = {
        "ConnectionError": "Connection error. Please try again later.",
        "TimeoutError": "The request took too long. Please try again.",
        "ValidationError": "The input was invalid. Please check your request.",
    }

    error_type = type(error).__name__
    return error_messages.get(error_type, "An error occurred. Please try again later.")


async def verify_api_key(api_key: Optional[str] = Depends(api_key_header)):
    """Verify API key for protected endpoints"""
    if api_key is None:
        logger.warning("❌ Request without API key")
        raise HTTPException(
            status_code=401,
            detail="Missing API Key. Include 'X-API-Key' header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    if not secrets.compare_digest(api_key, VALID_API_KEY):
        logger.warning("❌ Invalid API key attempt detected")
        raise HTTPException(
            status_code=401,
            detail="Invalid API Key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return api_key

# =============================================================================
# DEPENDENCIES
# =============================================================================


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        logger.error(f"{name} requested before startup finished")
        raise HTTPException(status_code=503, detail="Service not ready")
    return component


def get_validation_store(request: Request) -> SessionValidationStore:
    return _from_state(request, "validation_store")


def get_session_service(request: Request) -> ValidationSessionService:
    return _from_state(request, "session_service")


def get_field_guidance(request: Request) -> FieldGuidanceService:
    return _from_state(request, "field_guidance")

# =============================================================================
# RATE LIMITING
# =============================================================================

limiter = Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)


def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Plain-text 429 with a retry hint"""
    response = PlainTextResponse(content=RATE_LIMIT_MESSAGE, status_code=429)
    response.headers["Retry-After"] = "60"
    response.headers["X-RateLimit-Limit"] = str(getattr(exc, "limit", "N/A"))
    return response


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
app.state.limiter = limiter

if settings.RATE_LIMIT_TIER not in RATE_LIMIT_TIERS:
    logger.warning(f"Unknown rate limit tier '{settings.RATE_LIMIT_TIER}', using 'default'")
RATE_LIMITS = RATE_LIMIT_TIERS.get(settings.RATE_LIMIT_TIER, RATE_LIMIT_TIERS["default"])

# =============================================================================
# MIDDLEWARE
# =============================================================================

# Health checks are neither logged nor authenticated
PUBLIC_ENDPOINTS = {"/", "/health", "/healthz"}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests, skipping health checks"""
    path = request.url.path
    if path not in PUBLIC_ENDPOINTS:
        logger.info(f"📥 Request: {request.method} {path}")
    return await call_next(request)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses"""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cache-Control"] = "no-store"

    if "Server" in response.headers:
        del response.headers["Server"]

    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# =============================================================================
# API MODELS
# =============================================================================


class OpenSessionRequest(BaseModel):
    user_id: str
    offense_ids: List[str] = Field(default_factory=list)


class OpenSessionResponse(BaseModel):
    session_key: str


class AttemptRequest(BaseModel):
    prompt: str
    offense_id: str
    present_fields: List[str] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    offense_category: Optional[str] = None
    critical_fields: Optional[List[str]] = None
    required_fields: Optional[List[str]] = None
    narrative: Optional[str] = None


class SweepRequest(BaseModel):
    max_age_ms: Optional[int] = Field(default=None, gt=0)


class SweepResponse(BaseModel):
    evicted: int
    max_age_ms: int


class FieldGuidanceResponse(BaseModel):
    field: str
    category: str
    example: str
    quick_fill_options: List[str]
    contextual_fields: List[str]

# =============================================================================
# HEALTH
# =============================================================================


@app.get("/", status_code=200)
def read_root():
    return {"status": "ok", "version": API_VERSION, "service": settings.APP_NAME}


@app.get("/health", status_code=200)
def health():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/healthz", response_class=PlainTextResponse, status_code=200)
def healthz():
    return "OK"

# =============================================================================
# VALIDATION SESSIONS
# =============================================================================


@app.post("/validation/sessions", response_model=OpenSessionResponse, dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["open_session"])
async def open_session(
    request: Request,
    req: OpenSessionRequest,
    service: ValidationSessionService = Depends(get_session_service)
):
    """Derive a session key for a new validation conversation"""
    try:
        session_key = service.open_session(req.user_id, req.offense_ids)
        return {"session_key": session_key}
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except Exception as e:
        logger.error(f"Error in open_session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=get_safe_error_message(e, "open_session"))


@app.get("/validation/sessions/{session_key}", response_model=ValidationState, dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["read"])
async def get_session_state(
    request: Request,
    session_key: str,
    service: ValidationSessionService = Depends(get_session_service)
):
    """Current state of a validation session"""
    try:
        return service.require_state(session_key)
    except SessionError:
        raise HTTPException(status_code=404, detail="Validation session not found")


@app.get("/validation/sessions/{session_key}/info", dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["read"])
async def get_session_info(
    request: Request,
    session_key: str,
    store: SessionValidationStore = Depends(get_validation_store)
):
    """
    Debug information about a validation session.

    Exposes timing and counts only, never the narrative text.
    """
    info = store.get_state_info(session_key)
    if info is None:
        raise HTTPException(status_code=404, detail="Validation session not found")
    return info


@app.post("/validation/sessions/{session_key}/attempts", dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["record_attempt"])
async def record_attempt(
    request: Request,
    session_key: str,
    req: AttemptRequest,
    service: ValidationSessionService = Depends(get_session_service)
):
    """Record one missing-field attempt and return the scored outcome"""
    try:
        outcome = service.record_attempt(
            session_key,
            prompt=req.prompt,
            present_fields=req.present_fields,
            missing_fields=req.missing_fields,
            offense_id=req.offense_id,
            offense_category=req.offense_category,
            critical_fields=req.critical_fields,
            narrative=req.narrative,
            required_fields=req.required_fields,
        )
        return outcome.to_dict()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except Exception as e:
        logger.error(f"Error in record_attempt: {e}", exc_info=True)
        service.abandon(session_key)
        raise HTTPException(status_code=500, detail=get_safe_error_message(e, "record_attempt"))


@app.delete("/validation/sessions/{session_key}", status_code=204, dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["record_attempt"])
async def clear_session(
    request: Request,
    session_key: str,
    service: ValidationSessionService = Depends(get_session_service)
):
    """Drop a validation session; unknown keys are not an error"""
    service.abandon(session_key)
    return Response(status_code=204)


@app.post("/validation/sweep", response_model=SweepResponse, dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["sweep"])
async def sweep_sessions(
    request: Request,
    req: Optional[SweepRequest] = None,
    store: SessionValidationStore = Depends(get_validation_store)
):
    """Evict validation sessions older than max_age_ms (settings default when omitted)"""
    max_age_ms = req.max_age_ms if req and req.max_age_ms else settings.VALIDATION_STATE_MAX_AGE_MS
    evicted = store.sweep_older_than(max_age_ms)
    return {"evicted": evicted, "max_age_ms": max_age_ms}


@app.get("/validation/results/{cache_key:path}", dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["read"])
async def get_cached_result(
    request: Request,
    cache_key: str,
    service: ValidationSessionService = Depends(get_session_service)
):
    """A recently recorded attempt outcome, while it is still cached"""
    result = service.get_cached_result(cache_key)
    if result is None:
        raise HTTPException(status_code=404, detail="Validation result expired or unknown")
    return result


@app.get("/validation/metrics", dependencies=[Depends(verify_api_key)])
async def get_validation_metrics(request: Request):
    """Store, cache and sweeper metrics for monitoring"""
    store = _from_state(request, "validation_store")
    cache = _from_state(request, "validation_cache")
    sweeper = _from_state(request, "sweeper")
    return {
        "store": store.get_metrics(),
        "cache": cache.get_metrics(),
        "sweeper": {
            **sweeper.get_metrics(),
            "health": await sweeper.health_check(),
        },
    }

# =============================================================================
# FIELD GUIDANCE
# =============================================================================


@app.get("/fields/{field}/guidance", response_model=FieldGuidanceResponse, dependencies=[Depends(verify_api_key)])
@limiter.limit(RATE_LIMITS["read"])
async def get_field_guidance_for(
    request: Request,
    field: str,
    offense_category: Optional[str] = None,
    guidance: FieldGuidanceService = Depends(get_field_guidance)
):
    """Example text and quick-fill phrases for one report field"""
    return {
        "field": field,
        "category": guidance.resolve_field_category(field),
        "example": guidance.get_field_examples(field, offense_category),
        "quick_fill_options": guidance.get_quick_fill_options(field),
        "contextual_fields": guidance.get_contextual_fields(offense_category),
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"🚀 Starting ReportFlow API on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
