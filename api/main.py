"""
FastAPI main application for the catalog search API
"""
import logging
import os
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

# Add api directory to path for imports (works both locally and in containers)
api_dir = os.path.dirname(os.path.abspath(__file__))
if api_dir not in sys.path:
    sys.path.insert(0, api_dir)

from core.cache import close_redis_client
from core.config import settings
from core.logging import setup_logging
from middleware.logging_middleware import RequestLoggingMiddleware
from routers import products
from schemas.products import ErrorResponse

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")
    logger.info(
        f"Search window: max(limit * {settings.search_window_multiplier}, {settings.search_window_min}), "
        f"cache TTL {settings.search_cache_ttl}s"
    )

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await close_redis_client()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="Typo-tolerant product search API",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed query parameters in the standard failure envelope"""
    if request.url.path.endswith("/products/search"):
        message = "Invalid search parameters"
    else:
        message = "Invalid query parameters"
    logger.info(f"Rejected {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


app.include_router(products.router, prefix="/api")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {
            "products": "/api/products",
            "search": "/api/products/search",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
