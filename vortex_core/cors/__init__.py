"""
CORS Policy Guard
=================
Origin allow-list with trusted preview-domain suffixes.
"""

from .policy import (
    ALLOW_HEADERS,
    GET_POST_METHODS,
    POST_METHODS,
    CorsPolicy,
)
from .middleware import CorsPolicyMiddleware

__all__ = [
    "ALLOW_HEADERS",
    "GET_POST_METHODS",
    "POST_METHODS",
    "CorsPolicy",
    "CorsPolicyMiddleware",
]
