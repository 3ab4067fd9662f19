# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import qr, occupancy, entry_exit, health, realtime
from app.database import create_tables
from app.exceptions import OccupancyError
from app.config import settings
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Facility Occupancy API",
    description="QR code entry/exit tracking with capacity limits and real-time updates.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow dashboards and scanner kiosks to call the API) ──────────────
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
    Optional lightweight API key auth for admin endpoints (capacity, reset).
    Scan, QR and read endpoints stay open; they sit behind the upstream auth layer.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    protected_paths = {"/api/v1/occupancy/capacity", "/api/v1/occupancy/reset"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in self.protected_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Unauthorized", "message": "Invalid or missing API key"},
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


# ── Exception Handlers ───────────────────────────────────────────────────────
SCAN_PATH = "/api/v1/qr/scan"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Scanner kiosks expect a plain 400 for a missing or empty QR code
    if request.url.path == SCAN_PATH:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "QR code is required",
                     "message": "Request body must include a non-empty qrCode"},
        )
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(OccupancyError)
async def occupancy_error_handler(request: Request, exc: OccupancyError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(qr.router,         prefix="/api/v1", tags=["QR Scan"])
app.include_router(occupancy.router,  prefix="/api/v1", tags=["Occupancy"])
app.include_router(entry_exit.router, prefix="/api/v1", tags=["Entry/Exit Log"])
app.include_router(realtime.router,   prefix="/api/v1", tags=["Real-time"])
app.include_router(health.router,     prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info(f"🚀 {settings.FACILITY_NAME} occupancy backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"👥 Default capacity {settings.MAX_CAPACITY}, "
                f"warning at {settings.NEAR_CAPACITY_PERCENT}%, strict={settings.STRICT_CAPACITY}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Occupancy backend shutting down...")
