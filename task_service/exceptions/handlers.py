# task_service/exceptions/handlers.py
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from task_service.core import tracing
import time


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_safe_headers(request: Request) -> dict:
    """Extract and mask sensitive headers for logging"""
    headers = request.headers
    return {
        "user_agent": headers.get("user-agent", "unknown"),
        "authorization": (headers.get("authorization", "")[:10] + "...") if headers.get("authorization") else "none",
        "referer": headers.get("referer", "none")
    }


def error_response(request: Request, status_code: int, detail, headers=None, **extra) -> JSONResponse:
    """Every error body carries detail, status_code, trace_id, timestamp and path"""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "status_code": status_code,
            "trace_id": tracing.get_current_trace_id(),
            "timestamp": time.time(),
            "path": request.url.path,
            **extra
        },
        headers=headers
    )


def _log_request_error(request: Request, level: str, message: str, **kwargs):
    tracing.log_with_trace(
        level,
        message,
        url=str(request.url),
        ip=get_client_ip(request),
        **kwargs,
        **get_safe_headers(request)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # 5xx means a collaborator failed
    level = "error" if exc.status_code >= 500 else "warning"
    _log_request_error(request, level, f"HTTP {exc.status_code}: {exc.detail}",
                       error_type=type(exc).__name__)
    return error_response(request, exc.status_code, exc.detail, headers=getattr(exc, 'headers', None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    _log_request_error(request, "warning", f"Validation error: {len(errors)} errors")
    return error_response(request, 422, "Validation error", errors=errors)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _log_request_error(request, "error", f"Unhandled exception: {exc}", error_type=type(exc).__name__)
    return error_response(request, 500, "Internal server error", error_type=type(exc).__name__)


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    _log_request_error(request, "warning", f"HTTP {exc.status_code}: {exc.detail}")
    return error_response(request, exc.status_code, exc.detail, headers=getattr(exc, 'headers', None))
