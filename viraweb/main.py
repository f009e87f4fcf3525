import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401
from .config import CORS_ORIGINS
from .database import Base, engine
from .domain.appointments import router as appointments_router
from .domain.attendance import router as attendance_router
from .domain.billing import checkout_router, webhooks_router
from .domain.billing import router as subscriptions_router
from .domain.dashboard import router as dashboard_router
from .domain.financial import router as financial_router
from .domain.goals import router as goals_router
from .domain.notes import router as notes_router
from .domain.notifications import router as notifications_router
from .domain.patients import router as patients_router
from .domain.professionals import router as professionals_router
from .domain.reports import router as reports_router
from .domain.settings import router as settings_router
from .domain.support import router as support_router
from .domain.todos import router as todos_router
from .error_messages import register_error_handlers
from .routes.auth import router as auth_router
from .routes.seo import router as seo_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("stripe").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        from .rate_limiter import get_redis_client

        get_redis_client()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(
            f"Redis connection failed - rate limited routes will answer 503 and realtime is off: {e}"
        )

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="ViraWeb API", version="1.0.0", lifespan=lifespan)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware,
        exclude_paths=["/health", "/docs", "/openapi.json", "/sitemap.xml", "/robots.txt"],
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,  # Supabase session cookie
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Retry-After", "X-Token-Expired"],
)

# Routes
app.include_router(auth_router)
app.include_router(patients_router)
app.include_router(professionals_router)
app.include_router(appointments_router)
app.include_router(attendance_router)
app.include_router(financial_router)
app.include_router(goals_router)
app.include_router(todos_router)
app.include_router(notes_router)
app.include_router(notifications_router)
app.include_router(dashboard_router)
app.include_router(reports_router)
app.include_router(settings_router)
app.include_router(support_router)
app.include_router(subscriptions_router)
app.include_router(checkout_router)
app.include_router(webhooks_router)
app.include_router(seo_router)


@app.get("/")
def root():
    return {"message": "ViraWeb API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        from .rate_limiter import get_redis_client

        redis_client = get_redis_client()

        start_time = time.time()
        redis_client.ping()
        response_time = (time.time() - start_time) * 1000

        info = redis_client.info()
        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
                "connected_clients": info.get("connected_clients", 0),
            },
        }
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
