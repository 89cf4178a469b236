"""
CORS Policy
===========
Allow-list plus trusted-suffix origin policy.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from vortex_core.config import DEFAULT_ALLOWED_ORIGINS, TRUSTED_ORIGIN_SUFFIXES

ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"

POST_METHODS: Tuple[str, ...] = ("POST", "OPTIONS")
GET_POST_METHODS: Tuple[str, ...] = ("GET", "POST", "OPTIONS")


@dataclass(frozen=True)
class CorsPolicy:
    """
    Computes the CORS headers attached to every response.

    An origin is allowed when it is on the allow-list or ends with one of
    the trusted suffixes. A missing or unknown origin gets an empty
    ``Access-Control-Allow-Origin``, which browsers treat as a denial. The
    response body is still returned, so this does not restrict
    server-to-server callers.
    """
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    trusted_suffixes: Tuple[str, ...] = TRUSTED_ORIGIN_SUFFIXES
    allow_headers: str = ALLOW_HEADERS

    def is_allowed(self, origin: Optional[str]) -> bool:
        if not origin:
            return False
        return origin in self.allowed_origins or origin.endswith(self.trusted_suffixes)

    def headers_for(
        self,
        origin: Optional[str],
        methods: Iterable[str] = POST_METHODS,
    ) -> Dict[str, str]:
        """
        Args:
            origin: Value of the request's Origin header, if any
            methods: Methods advertised for the handler

        Returns:
            Header mapping for the response
        """
        return {
            "Access-Control-Allow-Origin": origin if self.is_allowed(origin) else "",
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Allow-Methods": ", ".join(methods),
        }
