from .ip_reputation import router as ip_reputation_router
from .url_reputation import router as url_reputation_router
from .visitor_ip import router as visitor_ip_router
from .health import create_health_router

__all__ = [
    "ip_reputation_router",
    "url_reputation_router",
    "visitor_ip_router",
    "create_health_router",
]
