"""
Vortex Core
===========
Threat intelligence backend for the vortex firewall dashboard.
"""

__version__ = "0.3.0"

# Validation
from vortex_core.validators import (
    ValidationResult,
    validate_ip,
    validate_url,
)

# Rate Limiting
from vortex_core.rate_limit import (
    SlidingWindowRateLimiter,
    RateLimitInfo,
    RateLimitRecord,
)

# CORS
from vortex_core.cors import (
    CorsPolicy,
    CorsPolicyMiddleware,
)

# Client IP
from vortex_core.client_ip import resolve_client_ip

# Models
from vortex_core.models import (
    ThreatLevel,
    ThreatIntelligence,
    URLScanResult,
    VisitorIPResponse,
)

# Services
from vortex_core.services import (
    IPReputationService,
    URLReputationService,
)

# Application
from vortex_core.config import Settings
from vortex_core.app import create_app

__all__ = [
    # Validation
    "ValidationResult",
    "validate_ip",
    "validate_url",
    # Rate Limiting
    "SlidingWindowRateLimiter",
    "RateLimitInfo",
    "RateLimitRecord",
    # CORS
    "CorsPolicy",
    "CorsPolicyMiddleware",
    # Client IP
    "resolve_client_ip",
    # Models
    "ThreatLevel",
    "ThreatIntelligence",
    "URLScanResult",
    "VisitorIPResponse",
    # Services
    "IPReputationService",
    "URLReputationService",
    # Application
    "Settings",
    "create_app",
]
