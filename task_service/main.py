# task_service/main.py - Application wiring: tracing, handlers, metrics, routes
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager
from prometheus_fastapi_instrumentator import Instrumentator
import time

# Core imports
from task_service.core.config import settings
from task_service.db.database import get_db, init_db

# Import tracing
from task_service.core import tracing

# Import API routes
from task_service.api.v1 import api_router

# Import exception handlers
from task_service.exceptions.handlers import (
    http_exception_handler,
    validation_exception_handler,
    global_exception_handler,
    starlette_http_exception_handler
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan with database initialization
    """
    tracing.info("Task Service startup initiated")

    try:
        await init_db()
    except Exception as e:
        tracing.error(f"Database initialization failed: {e}")
        raise

    tracing.info(f"Environment: {settings.ENVIRONMENT}")
    tracing.info(f"Log Level: {settings.LOG_LEVEL}")
    tracing.info(f"Project service: {settings.PROJECT_SERVICE_URL}")
    tracing.info(f"User service: {settings.USER_SERVICE_URL}")
    tracing.info(f"Task Service v{tracing.SERVICE_VERSION} startup complete")

    yield

    tracing.info("Task Service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Task Service",
    description="Project-scoped task management with role-based access",
    version=tracing.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT == "development" else None
)

# =============================================================================
# TRACING & LOGGING
# =============================================================================

tracing.setup_tracing(app)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_instrument_requests_inprogress=True,
    inprogress_labels=True
)
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

# =============================================================================
# API ROUTES
# =============================================================================

app.include_router(api_router, prefix="/api/v1")

tracing.info("API routes configured")


# =============================================================================
# SYSTEM ENDPOINTS
# =============================================================================

@app.get("/health", tags=["System"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check with database connectivity test
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        tracing.error(f"Health check failed: {e}",
                      endpoint="/health",
                      error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy - database connection failed"
        )

    return {
        "status": "healthy",
        "service": tracing.SERVICE_NAME,
        "version": tracing.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "trace_id": tracing.get_current_trace_id(),
        "checks": {
            "database": "connected",
        }
    }


@app.get("/", tags=["System"])
async def api_information():
    """API information endpoint"""
    return {
        "message": "Task Service - project-scoped tasks with role-based access",
        "version": tracing.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "operational",
        "trace_id": tracing.get_current_trace_id(),
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "tasks": "/api/v1/tasks",
            "documentation": "/docs" if settings.ENVIRONMENT == "development" else "Contact administrator"
        },
        "timestamp": time.time()
    }
