"""
Structured Logging
==================
structlog configuration and request logging for the service.

Usage:
    from vortex_core.logging import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="vortex-threat-intel")
    app.add_middleware(RequestLoggingMiddleware)

    logger = structlog.get_logger(__name__)
    logger.info("ip_reputation_checked", ip=ip, threat_level="safe")
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List

import structlog

service_name_var: ContextVar[str] = ContextVar("service_name", default="unknown")


def _add_service_name(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("service", service_name_var.get())
    return event_dict


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> logging.Logger:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Name stamped on every record
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, console renderer otherwise

    Returns:
        Configured root logger
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)
    shared = _shared_processors()

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger("vortex_core").info("logging_configured", level=level.upper())
    return root_logger


class RequestLoggingMiddleware:
    """
    ASGI middleware that logs each request and its outcome.

    Binds a short request id to the structlog context so every event
    logged while handling the request carries it, and echoes the id in the
    ``X-Request-ID`` response header.
    """

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("vortex_core.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:8]
        method = scope.get("method", "")
        path = scope.get("path", "")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            log = (
                self.logger.info if status_code < 400
                else self.logger.warning if status_code < 500
                else self.logger.error
            )
            log(
                "http_request",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
            )
            structlog.contextvars.clear_contextvars()
