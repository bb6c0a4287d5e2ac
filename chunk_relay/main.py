"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings, close_redis, close_http_client
from .core.exceptions import RelayError
from .middleware.rate_limit import limiter
from .routers import relay
from .utils.logger import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(
        "Starting application",
        version=settings.app_version,
        session_store=settings.session_store,
        storage_provider=settings.storage_provider,
    )
    yield
    # Shutdown
    logger.info("Shutting down application")
    await close_http_client()
    await close_redis()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Relays large files from HTTP sources into object storage chunk by chunk",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# Exception handlers
@app.exception_handler(RelayError)
async def relay_exception_handler(request: Request, exc: RelayError):
    """Render relay errors with their status code and details."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(exc.message, code=exc.code, path=request.url.path, **exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "InternalError"},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


# Include routers
app.include_router(relay.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chunk_relay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
