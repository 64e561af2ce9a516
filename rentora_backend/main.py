"""Rentora Rental Marketplace - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .core.exceptions import RentoraException
from .core.logging import (
    RequestLogMiddleware,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .database import AsyncSessionLocal

# Import routers
from .modules.auth import router as auth_router
from .modules.auth.seed import seed_initial_admin
from .modules.commons import ErrorResponse
from .modules.property_management import router as properties_router
from .modules.reporting import router as hierarchy_router
from .modules.tenant_management import router as tenants_router
from .modules.user_management import router as users_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(settings)
    logger.info(
        "Starting Rentora application",
        extra={"env": settings.app_env, "debug": settings.app_debug},
    )
    async with AsyncSessionLocal() as db:
        await seed_initial_admin(db)
    yield
    # Shutdown
    logger.info("Shutting down Rentora application")
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description="Rental marketplace: listings approval, unit occupancy and tenant onboarding",
    version=settings.api_version,
    docs_url=f"{settings.api_prefix}/docs" if settings.app_debug else None,
    redoc_url=f"{settings.api_prefix}/redoc" if settings.app_debug else None,
    openapi_url=f"{settings.api_prefix}/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request correlation and access log
app.add_middleware(RequestLogMiddleware)


def _error_response(status_code: int, message: str, error: str, details=None):
    envelope = ErrorResponse(message=message, error=error, details=details or None)
    return JSONResponse(status_code=status_code, content=envelope.body())


# Global exception handlers
@app.exception_handler(RentoraException)
async def rentora_exception_handler(request: Request, exc: RentoraException):
    """Render domain exceptions with their own status and code."""
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={"error_code": exc.error_code, "path": request.url.path},
        )
    else:
        logger.info(
            "Request rejected",
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "path": request.url.path,
                "reason": exc.message,
            },
        )
    details = dict(exc.details)
    field = getattr(exc, "field", None)
    if field:
        details["field"] = field
    return _error_response(exc.status_code, exc.message, exc.error_code, details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are plain 400s."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request"
    return _error_response(400, message, "validation_error", {"errors": errors})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Storage failures are fatal for the request and never retried here."""
    logger.exception("Database error", extra={"path": request.url.path})
    return _error_response(500, "Database error", "database_error")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception("Unhandled exception", extra={"path": request.url.path})
    return _error_response(
        500,
        str(exc) if settings.app_debug else "Internal server error",
        "internal_error",
    )


# Health check endpoint
@app.get(f"{settings.api_prefix}/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


# Register routers under the API prefix
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(tenants_router, prefix=settings.api_prefix)
app.include_router(hierarchy_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentora_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
