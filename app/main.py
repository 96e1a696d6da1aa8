# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import compliance, health
from app.database import create_tables
from app.config import settings
from app.exceptions import ComplianceAuditError, ComplianceBlockedError, MissingComplianceEntityError
from app.schemas.compliance_check import ComplianceBlockedDetail, ComplianceBlockedOut
from app.services.compliance_gate import OVERRIDE_INSTRUCTIONS
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Tour Dispatch Compliance API",
    description="Driver qualification, vehicle roadworthiness and hours-of-service checks for tour dispatch.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the admin dashboard to call the API) ────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Compliance Exception Handlers ────────────────────────────────────────────
@app.exception_handler(ComplianceBlockedError)
async def compliance_blocked_handler(request: Request, exc: ComplianceBlockedError):
    body = ComplianceBlockedOut(error=ComplianceBlockedDetail(
        message=str(exc),
        operation=exc.operation,
        violations=exc.result.all_violations,
        warnings=exc.result.all_warnings,
        can_override=exc.can_override,
        override_instructions=OVERRIDE_INSTRUCTIONS if exc.can_override else None,
    ))
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN,
                        content=body.model_dump(mode="json", exclude_none=True))


@app.exception_handler(MissingComplianceEntityError)
async def missing_entity_handler(request: Request, exc: MissingComplianceEntityError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                        content={"detail": str(exc), "missing": exc.missing})


@app.exception_handler(ComplianceAuditError)
async def audit_failure_handler(request: Request, exc: ComplianceAuditError):
    logger.error(f"Audit failure on {request.url.path} — operation refused: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Compliance audit log unavailable; operation not permitted"},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(compliance.router, prefix="/api/v1", tags=["🚦 Compliance"])
app.include_router(health.router,     prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Compliance backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(
        f"⏱️  HOS limits: driving={settings.HOS_MAX_DRIVING_HOURS}h "
        f"on_duty={settings.HOS_MAX_ON_DUTY_HOURS}h week={settings.HOS_MAX_HOURS_7_DAYS}h"
    )
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Compliance backend shutting down...")
