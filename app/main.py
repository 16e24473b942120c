"""
AX TEAM Backend - Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import httpx
import logging

from app.config import settings
from app.core.exceptions import AppError
from app.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from app.services.file_storage import FileStorageService
from app.services.notifications import NotificationDispatcher
from app.api.v1 import (
    auth,
    services,
    bookings,
    reviews,
    admin,
    support,
    gallery,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if settings.BOOTSTRAP_ADMIN_ON_STARTUP:
        from app.scripts.create_admin import ensure_admin
        from app.db.session import SessionLocal

        db = SessionLocal()
        try:
            ensure_admin(db)
        finally:
            db.close()

    # Shared outbound HTTP client for SMS / WhatsApp
    http_client = httpx.AsyncClient(timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
    app.state.notifier = NotificationDispatcher.from_settings(settings, http_client)

    yield

    # Shutdown
    logger.info("Shutting down...")
    await http_client.aclose()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Home services booking platform API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan,
    debug=settings.DEBUG
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# ============================================================================
# MIDDLEWARE
# ============================================================================

logger.info(f"CORS configured for origins: {settings.CORS_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Trusted Host Middleware (security)
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/")
async def root():
    """
    Root endpoint - API status
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring
    """
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }


app.include_router(
    auth.router,
    prefix=f"{settings.API_V1_PREFIX}/auth",
    tags=["Authentication"]
)

app.include_router(
    services.router,
    prefix=f"{settings.API_V1_PREFIX}/services",
    tags=["Service Catalog"]
)

app.include_router(
    bookings.router,
    prefix=f"{settings.API_V1_PREFIX}/bookings",
    tags=["Service Bookings"]
)

app.include_router(
    reviews.router,
    prefix=f"{settings.API_V1_PREFIX}/reviews",
    tags=["Reviews"]
)

app.include_router(
    admin.router,
    prefix=f"{settings.API_V1_PREFIX}/admin",
    tags=["Admin"]
)

app.include_router(
    support.router,
    prefix=f"{settings.API_V1_PREFIX}/support",
    tags=["Support Requests"]
)

app.include_router(
    gallery.router,
    prefix=f"{settings.API_V1_PREFIX}/gallery",
    tags=["Gallery"]
)


# ============================================================================
# STATIC FILES (gallery uploads)
# ============================================================================

try:
    # creates the upload tree before StaticFiles checks for it
    FileStorageService()
except OSError as e:
    logger.warning(f"Upload directory {settings.UPLOAD_BASE_DIR} unavailable: {e}. Static file serving disabled.")
else:
    app.mount(settings.STATIC_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_BASE_DIR), name="static")
    logger.info(f"Static files mounted at {settings.STATIC_URL_PREFIX} from {settings.UPLOAD_BASE_DIR}")


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "The requested resource was not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """
    Catch-all 500 handler
    """
    logger.exception(f"Internal server error on {request.method} {request.url.path}: {exc}")
    content = {
        "success": False,
        "message": "An unexpected error occurred. Please try again later."
    }
    if settings.DEBUG:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
