# streamhub/main.py
import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .api.v1.router import api_router
from .database import init_db, close_db, check_db_health
from .errors import AppError, ErrorKind
from .redis_client import redis_client
from .services.catalog import catalog
from .services.payment_gateway import payment_gateway

# ============================================================
# Setup Logging
# ============================================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================================
# Startup/Shutdown Events
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan with startup/shutdown
    """
    # ✅ STARTUP
    logger.info(f"🚀 Starting {settings.APP_NAME}...")
    logger.info(f"🔒 Debug mode: {settings.DEBUG}")
    logger.info(f"💳 Payment gateway: {payment_gateway.name}")

    await asyncio.to_thread(init_db)

    try:
        await redis_client.connect()
    except Exception as e:
        logger.warning(f"⚠️ API will continue without Redis caching: {e}")

    if not settings.is_tmdb_enabled:
        logger.warning("⚠️ TMDB_API_KEY not set, catalog endpoints will fail")

    logger.info("✅ Application startup complete!")

    yield  # Application runs

    # ❌ SHUTDOWN
    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")

    await asyncio.gather(
        catalog.close(),
        payment_gateway.close(),
        redis_client.disconnect(),
        return_exceptions=True,
    )
    close_db()

    logger.info("👋 Goodbye!")


# ============================================================
# Create FastAPI Application
# ============================================================

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Catalog, watch progress, streaming details and subscriptions",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# ============================================================
# Middleware Configuration
# ============================================================

# 1️⃣ CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
    max_age=3600,
)

# 2️⃣ Request ID Middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next: Callable):
    """Add unique request ID for tracing"""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

# 3️⃣ Request Logging Middleware
@app.middleware("http")
async def log_requests(request: Request, call_next: Callable):
    """Log all requests with timing"""
    start_time = time.time()

    logger.info(f"➡️ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"⬅️ {request.method} {request.url.path} "
        f"[{response.status_code}] {duration:.3f}s"
    )

    response.headers["X-Process-Time"] = str(duration)
    return response

# 4️⃣ Security Headers Middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next: Callable):
    """Add security headers to all responses"""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    return response

# ============================================================
# API Routers
# ============================================================

app.include_router(api_router, prefix="/api/v1")

# ============================================================
# Root Endpoints
# ============================================================

@app.get("/", tags=["Root"])
async def root() -> dict:
    """API information endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Fast health check endpoint for load balancers
    Returns immediately without checking dependencies
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health/detailed", tags=["Health"])
async def health_check_detailed() -> dict:
    """
    Detailed health check endpoint
    Checks database and Redis connectivity
    """
    db_healthy = await asyncio.to_thread(check_db_health)
    redis_healthy = await redis_client.ping()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": "connected" if db_healthy else "disconnected",
        "redis": "connected" if redis_healthy else "disconnected",
    }

# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Structured service errors"""
    if exc.is_server_fault:
        logger.error(f"❌ {exc} [{request.method} {request.url.path}]")
    else:
        logger.info(f"⚠️ {exc} [{request.method} {request.url.path}]")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are InvalidInput, same shape as service errors"""
    problems = [
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    ]
    error = AppError(ErrorKind.INVALID_INPUT, "; ".join(problems) or "Invalid request")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        f"❌ Unhandled exception [Request ID: {request_id}]: {str(exc)}",
        exc_info=True
    )

    # Hide internal errors in production
    error_detail = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": error_detail,
            "request_id": request_id
        }
    )

# ============================================================
# Run Application
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "streamhub.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
