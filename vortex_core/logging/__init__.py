"""
Structured logging setup and request logging middleware.
"""

from .structured import (
    setup_logging,
    RequestLoggingMiddleware,
    service_name_var,
)

__all__ = [
    "setup_logging",
    "RequestLoggingMiddleware",
    "service_name_var",
]
