# task_service/core/tracing.py - Trace-aware structured logging on top of loguru

import os
import socket
import traceback
import sys
import json
import random
import re
from datetime import datetime, timezone
from typing import Optional
from loguru import logger
from contextvars import ContextVar

from task_service.core.config import settings

SERVICE_NAME = "task-service"
SERVICE_VERSION = "1.0.0"

TRACE_HEADER = "x-trace-id"
TRACE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# Context variables for trace propagation
_trace_id_context: ContextVar[str] = ContextVar('trace_id', default='no-trace')
_span_id_context: ContextVar[str] = ContextVar('span_id', default='no-span')


def generate_trace_id() -> str:
    """Generate a 128-bit trace ID as 32-character hex string"""
    return f"{random.getrandbits(128):032x}"


def generate_span_id() -> str:
    """Generate a 64-bit span ID as 16-character hex string"""
    return f"{random.getrandbits(64):016x}"


def inbound_trace_id(raw: Optional[bytes]) -> Optional[str]:
    """Trace ID from a request header, or None unless it is 32 hex characters"""
    if not raw or len(raw) != 32:
        return None
    trace_id = raw.decode("latin-1").lower()
    return trace_id if TRACE_ID_PATTERN.match(trace_id) else None


class TracingMiddleware:
    """ASGI middleware that gives every request a trace context and echoes it back"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Reuse a well-formed inbound trace ID so calls across services line up
        inbound = dict(scope.get("headers") or [])
        trace_id = inbound_trace_id(inbound.get(TRACE_HEADER.encode())) or generate_trace_id()
        span_id = generate_span_id()

        trace_token = _trace_id_context.set(trace_id)
        span_token = _span_id_context.set(span_id)

        async def send_with_trace(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((TRACE_HEADER.encode(), trace_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace)
        finally:
            _trace_id_context.reset(trace_token)
            _span_id_context.reset(span_token)


def setup_tracing(app) -> bool:
    """Install the tracing middleware and configure log sinks"""
    app.add_middleware(TracingMiddleware)
    setup_structured_logging(enable_json=settings.should_use_json_logging)

    setup_logger = logger.bind(trace_id=generate_trace_id(), span_id=generate_span_id())
    setup_logger.info("Local trace IDs enabled")
    return True


def format_stack_trace(exception_info) -> Optional[str]:
    """Format exception stack trace for logging"""
    if not exception_info:
        return None

    try:
        if exception_info.traceback:
            return ''.join(traceback.format_exception(
                exception_info.type,
                exception_info.value,
                exception_info.traceback
            ))
        return str(exception_info.value)
    except Exception:
        return "Error formatting stack trace"


def setup_structured_logging(enable_json: bool = None):
    """Structured logging with trace context on every record"""
    if enable_json is None:
        enable_json = settings.ENABLE_JSON_LOGGING

    logger.remove()

    hostname = socket.gethostname()
    pid = os.getpid()
    environment = settings.ENVIRONMENT

    if enable_json:
        def json_sink(message):
            record = message.record
            extra = record["extra"]

            trace_id = extra.get("trace_id") or _trace_id_context.get()
            span_id = extra.get("span_id") or _span_id_context.get()

            log_entry = {
                "@timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record["level"].name,
                "message": record["message"],
                "service": {
                    "name": SERVICE_NAME,
                    "version": SERVICE_VERSION,
                    "environment": environment,
                },
                "host": {"hostname": hostname},
                "process": {"pid": pid},
                "log": {
                    "origin": {
                        "file": {"name": record["file"].name, "line": record["line"]},
                        "function": record["function"]
                    },
                    "logger": record["name"]
                },
                "trace": {"id": trace_id, "span_id": span_id},
            }

            custom = {k: v for k, v in extra.items()
                      if k not in ("trace_id", "span_id") and not k.startswith("_")}
            if custom:
                log_entry["custom"] = custom

            if record["exception"]:
                exc = record["exception"]
                log_entry["error"] = {
                    "type": exc.type.__name__ if exc.type else "UnknownError",
                    "message": str(exc.value) if exc.value else "Unknown error",
                    "stack_trace": format_stack_trace(exc),
                }

            sys.stderr.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
            sys.stderr.flush()

        logger.add(json_sink, level=settings.LOG_LEVEL, enqueue=True, catch=True)
    else:
        def format_with_trace(record):
            trace_id = record["extra"].get("trace_id", "no-trace")
            trace_info = f" [trace:{trace_id[:8]}]" if trace_id != "no-trace" else ""
            return (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                "<cyan>{name}:{function}:{line}</cyan>" + trace_info + " - <level>{message}</level>\n{exception}"
            )

        logger.add(
            sys.stderr,
            format=format_with_trace,
            level=settings.LOG_LEVEL,
            colorize=True,
            enqueue=True,
            catch=True
        )


def get_current_trace_span_ids() -> tuple[str, str]:
    """Current trace_id and span_id; generated and cached when outside a request"""
    trace_id = _trace_id_context.get()
    span_id = _span_id_context.get()
    if trace_id != "no-trace" and span_id != "no-span":
        return trace_id, span_id

    trace_id = generate_trace_id()
    span_id = generate_span_id()
    _trace_id_context.set(trace_id)
    _span_id_context.set(span_id)
    return trace_id, span_id


def get_current_trace_id() -> str:
    trace_id, _ = get_current_trace_span_ids()
    return trace_id


def log_with_trace(level: str, message: str, **kwargs):
    """Log with the current trace context bound to the record"""
    trace_id, span_id = get_current_trace_span_ids()
    extra_data = {
        "trace_id": trace_id,
        "span_id": span_id,
        **kwargs
    }

    try:
        log_func = getattr(logger.bind(**extra_data), level.lower())
    except AttributeError:
        logger.error(f"Invalid log level: {level}")
        return
    log_func(message)


# Convenience functions
def info(message: str, **kwargs):
    log_with_trace("info", message, **kwargs)


def debug(message: str, **kwargs):
    log_with_trace("debug", message, **kwargs)


def warning(message: str, **kwargs):
    log_with_trace("warning", message, **kwargs)


def error(message: str, **kwargs):
    log_with_trace("error", message, **kwargs)


__all__ = [
    'setup_tracing', 'setup_structured_logging', 'TracingMiddleware',
    'get_current_trace_span_ids', 'get_current_trace_id', 'inbound_trace_id',
    'log_with_trace', 'info', 'debug', 'warning', 'error'
]
