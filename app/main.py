"""
ListingHub API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings, validate_settings
from .database import engine, Base
from .limiter import limiter
from .logging_config import api_logger
from .middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from .responses import (
    api_exception_handler,
    domain_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .routes import posts_router, upload_router, callbacks_router
from .services.exceptions import ListingHubError
from . import models  # noqa: F401  (registers tables on Base.metadata)

settings = get_settings()
validate_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup (use migrations in production)"""
    Base.metadata.create_all(bind=engine)
    if not settings.n8n_webhook_url:
        api_logger.warning("N8N_WEBHOOK_URL not configured; AI generation and publishing will fail")
    api_logger.info("ListingHub API started", environment=settings.environment)
    yield


app = FastAPI(
    title="ListingHub API",
    description="Back office for real-estate listing posts, AI content and Facebook publishing",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error envelopes
app.add_exception_handler(StarletteHTTPException, api_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ListingHubError, domain_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)

if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
        "X-API-Key",
        "X-Requested-With",
    ],
    max_age=3600,
)

# Routes
app.include_router(posts_router)
app.include_router(upload_router)
app.include_router(callbacks_router)


@app.get("/api/health")
def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": "1.0.0",
        "workflow_configured": bool(settings.n8n_webhook_url),
    }


@app.get("/")
def root():
    """Root endpoint points at the API docs."""
    return {
        "message": "ListingHub API",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
