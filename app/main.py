# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, domain/global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import (
    admin,
    auth,
    health,
    incidents,
    leoni_personnel,
    logs,
    schedule_presence,
    suppliers,
    vehicles,
    workers,
)
from app.database import create_tables
from app.config import settings
from app.errors import DomainError
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Leoni Gate Access Control API",
    description="Check-in / check-out ledger for workers, suppliers and Leoni personnel, "
                "with vehicle presence, supplier visit counters, account approval and incidents.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard origins from settings) ───────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handler ─────────────────────────────────────────────────────
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "code": "internal_error", "message": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,              prefix="/api/v1", tags=["🔑 Auth"])
app.include_router(admin.router,             prefix="/api/v1", tags=["🛡️  Admin"])
app.include_router(logs.router,              prefix="/api/v1", tags=["🚪 Presence Logs"])
app.include_router(vehicles.router,          prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(workers.router,           prefix="/api/v1", tags=["👷 Workers"])
app.include_router(suppliers.router,         prefix="/api/v1", tags=["📦 Suppliers"])
app.include_router(leoni_personnel.router,   prefix="/api/v1", tags=["🏢 Leoni Personnel"])
app.include_router(incidents.router,         prefix="/api/v1", tags=["🚨 Incidents"])
app.include_router(schedule_presence.router, prefix="/api/v1", tags=["📅 Schedule"])
app.include_router(health.router,            prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Leoni Gate backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Leoni Gate backend shutting down...")
