"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import select

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .core import BaseError, get_settings
from .deps import SessionDep
from .infrastructure.database import engine
from .models import Base
from .api.v1.api import api_v1_router
from .api.v1.middleware import (
    app_error_handler, unhandled_exception_handler, validation_exception_handler,
)

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Schema is owned by alembic in deployments; create_all covers fresh local databases
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Realty API started")
    yield
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Realty Franchise API",
    description="Accounts, agent verification, offices and listings",
    version="1.0.0",
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Rate limiting
@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too many requests", status_code=429)

app.add_middleware(SlowAPIMiddleware)

# Exception handling
app.add_exception_handler(BaseError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include v1 API with all endpoints
app.include_router(api_v1_router, prefix="/api/v1")


# Health check
@app.get("/healthz")
async def healthz(sess: SessionDep):
    """Health check endpoint."""
    status = {"db": "ok"}
    try:
        await sess.scalar(select(1))
    except Exception:
        logger.exception("Health check query failed")
        status["db"] = "error"
    return status


# Root endpoint
@app.get("/")
async def root():
    """API root."""
    return {
        "message": "Welcome to Realty Franchise API v1.0",
        "docs": "/docs",
        "health": "/healthz"
    }
