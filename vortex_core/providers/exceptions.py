"""
Provider Exceptions
===================
Failures raised by the upstream threat intelligence clients.

Services decide per provider whether a failure degrades the response or
fails the request. Nothing here is shown to API callers.
"""

from typing import Any, Dict, Optional


class ProviderError(Exception):
    """An upstream provider call did not yield usable data."""

    reason = "error"

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.details: Dict[str, Any] = {"provider": provider, "reason": self.reason}
        if status_code is not None:
            self.details["status_code"] = status_code
        if details is not None:
            self.details["body"] = details

        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{provider} {self.reason}: {message}{status}")


class ProviderUnavailableError(ProviderError):
    """Network failure before the provider answered."""
    reason = "unavailable"


class ProviderTimeoutError(ProviderUnavailableError):
    """No answer within the upstream timeout."""
    reason = "timeout"


class ProviderAuthError(ProviderError):
    """API key rejected or over quota (401/403)."""
    reason = "auth_rejected"


class ProviderNotFoundError(ProviderError):
    """The provider has no record, e.g. a URL VirusTotal never scanned."""
    reason = "not_found"


class ProviderResponseError(ProviderError):
    """Non-success status, or a body that is not the expected JSON object."""
    reason = "bad_response"
