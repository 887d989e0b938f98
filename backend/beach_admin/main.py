"""
Beach Admin API - Main Application Entry Point

Admin backend for beach rentals:
- Beaches with zones laid out as sunbed grids
- Bookings that reserve and release sunbeds
- Occupancy kept in sync with sunbed statuses
- Change events published to Redis for the live dashboards
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beach_admin.core.config import get_settings
from beach_admin.core.exceptions import ServiceError
from beach_admin.core.logging import setup_logging, get_logger
from beach_admin.core.metrics import metrics_endpoint
from beach_admin.api.router import api_router
from beach_admin.api.middleware import RequestLoggingMiddleware
from beach_admin.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Cache and event publisher share this connection
    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache and live events")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Beach rental administration: zones, sunbeds, bookings and occupancy",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("service_error", error=exc.message, status_code=exc.status_code)
    else:
        logger.info("service_rejected", error=exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(_describe_error(error) for error in exc.errors()) or "Invalid request"
    logger.info("request_invalid", error=message, status_code=400)
    return JSONResponse(status_code=400, content={"message": message})


def _describe_error(error: dict) -> str:
    # Drop the "body" / "path" / "query" prefix FastAPI puts first
    field = ".".join(str(part) for part in error.get("loc", ())[1:])
    return f"{field}: {error['msg']}" if field else error["msg"]


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
