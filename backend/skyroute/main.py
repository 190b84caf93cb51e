"""
SkyRoute - Backend Main Application
FastAPI entry point

Endpoints:
    /api/flights          - Flight search
    /api/calendar         - Price calendar
    /api/booking-options  - Offer details
    /api/book             - Order creation
    /health               - Health check
    /metrics              - Prometheus metrics
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skyroute.api.v1.booking_routes import router as booking_router
from skyroute.api.v1.flight_routes import router as flight_router
from skyroute.core.config import get_settings
from skyroute.core.errors import AppError, SkyRouteError
from skyroute.core.metrics import setup_metrics

# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("SkyRoute-Backend")


# ═══════════════════════════════════════════════════════════════════
# LIFESPAN (Startup & Shutdown)
# ═══════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events"""

    # ─────────── STARTUP ───────────
    logger.info("🚀 Starting SkyRoute Backend...")

    if not get_settings().duffel_api_token:
        logger.warning("⚠️ DUFFEL_API_TOKEN is not set; flight endpoints will answer 500")

    app.state.http = httpx.AsyncClient()
    logger.info("✅ SkyRoute Backend started successfully")

    yield

    # ─────────── SHUTDOWN ───────────
    logger.info("🛑 Shutting down SkyRoute Backend...")
    await app.state.http.aclose()
    logger.info("👋 SkyRoute Backend stopped")


# ═══════════════════════════════════════════════════════════════════
# FASTAPI APP
# ═══════════════════════════════════════════════════════════════════

app = FastAPI(
    title="SkyRoute",
    description="Flight search, price calendar and booking over the Duffel offer/order API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

setup_metrics(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# ═══════════════════════════════════════════════════════════════════
# ROUTERS
# ═══════════════════════════════════════════════════════════════════

app.include_router(flight_router, prefix="/api")   # /api/flights, /api/calendar, ...
app.include_router(booking_router, prefix="/api")  # /api/book


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "checks": {
            "duffel_token": "configured" if get_settings().duffel_api_token else "missing"
        }
    }


# ═══════════════════════════════════════════════════════════════════
# ERROR HANDLERS
# ═══════════════════════════════════════════════════════════════════

@app.exception_handler(SkyRouteError)
async def skyroute_exception_handler(request: Request, exc: SkyRouteError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.url.path} failed: {exc.code} - {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump()
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Unparseable JSON or wrongly typed fields
    logger.info(f"{request.url.path} rejected: malformed body")
    return JSONResponse(
        status_code=400,
        content=AppError(error="Invalid JSON body", code="VALIDATION_ERROR").model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=AppError(error="Internal server error", code="INTERNAL_ERROR").model_dump()
    )


# ═══════════════════════════════════════════════════════════════════
# RUN (for development)
# ═══════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "skyroute.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
