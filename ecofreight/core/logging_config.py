"""
Structured JSON logging for the EcoFreight service.

Every record is emitted as one JSON object carrying the service identity,
the request trace context (request id, correlation id, acting user) and the
source location, so log lines can be joined per request.
"""

import json
import logging
import os
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

_service_info: Dict[str, str] = {
    "service": "ecofreight",
    "version": "1.0.0",
}

class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": _service_info["service"],
            "version": _service_info["version"],
            "environment": os.getenv('ENVIRONMENT', 'development'),
        }

        trace = current_trace_context()
        if trace:
            log_obj["trace"] = trace

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        return json.dumps(log_obj, default=str)

class SecurityFilter(logging.Filter):
    """Mask values of sensitive keys inside extra_fields."""

    SENSITIVE_FIELDS = ('password', 'token', 'api_key', 'secret', 'authorization')

    def filter(self, record: logging.LogRecord) -> bool:
        fields = getattr(record, 'extra_fields', None)
        if isinstance(fields, dict):
            record.extra_fields = {
                key: ("***REDACTED***" if any(s in key.lower() for s in self.SENSITIVE_FIELDS) else value)
                for key, value in fields.items()
            }
        return True

def setup_logging(service_name: str, level: str = "INFO", version: str = "1.0.0") -> None:
    """
    Configure the root logger with a JSON console handler.

    Args:
        service_name: Name stamped on every record
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        version: Service version stamped on every record
    """
    _service_info["service"] = service_name
    _service_info["version"] = version

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    console_handler.addFilter(SecurityFilter())
    root_logger.addHandler(console_handler)

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={'extra_fields': {'service': service_name, 'level': level}}
    )

def current_trace_context() -> Optional[Dict[str, str]]:
    context = {
        "request_id": request_id_var.get(),
        "correlation_id": correlation_id_var.get(),
        "user_id": user_id_var.get(),
    }
    context = {k: v for k, v in context.items() if v}
    return context or None

class LoggerAdapter(logging.LoggerAdapter):
    """Attach the current trace context to every message."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        trace = current_trace_context()
        if trace:
            extra.update(trace)
        kwargs['extra'] = extra
        return msg, kwargs

def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), {})

def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None
) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)
    if user_id:
        user_id_var.set(user_id)

def generate_request_id() -> str:
    return str(uuid.uuid4())

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and echo X-Request-ID back."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(
            request_id=request_id,
            correlation_id=request.headers.get('X-Correlation-ID')
        )

        logger = get_logger(__name__)
        logger.debug(f"Request started: {request.method} {request.url.path}")
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'duration_ms': (time.perf_counter() - started) * 1000,
                }}
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={'extra_fields': {
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': (time.perf_counter() - started) * 1000,
            }}
        )
        response.headers['X-Request-ID'] = request_id
        return response
