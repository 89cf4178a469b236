from typing import Any, Dict, Optional

import httpx

from .exceptions import (
    ProviderError,
    ProviderUnavailableError,
    ProviderTimeoutError,
    ProviderAuthError,
    ProviderNotFoundError,
    ProviderResponseError,
)


class BaseProviderClient:
    """
    Async HTTP client base for third-party threat intelligence APIs.

    Features:
    - Shares one pooled httpx.AsyncClient owned by the application.
    - Standardized exception mapping.
    - Single attempt per call, no retries.
    """

    name = "provider"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.headers = {"Accept": "application/json", **(headers or {})}

    def _map_exception(self, exc: Exception) -> ProviderError:
        """Map httpx exceptions to provider exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return ProviderTimeoutError("Request timed out", provider=self.name)
        if isinstance(exc, httpx.TransportError):
            return ProviderUnavailableError(f"Failed to connect: {exc}", provider=self.name)
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            text = exc.response.text[:500]
            if status in (401, 403):
                return ProviderAuthError("Credential rejected", provider=self.name, status_code=status)
            if status == 404:
                return ProviderNotFoundError("Resource not found", provider=self.name, status_code=status)
            return ProviderResponseError("Unexpected status", provider=self.name, status_code=status, details=text)

        return ProviderError(f"Unexpected error: {exc}", provider=self.name)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute one request and raise a ProviderError on any failure."""
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            response = await self.client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._map_exception(e) from e
        return response

    async def _request_json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = await self._request(method, path, **kwargs)
        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderResponseError(
                "Response body is not valid JSON",
                provider=self.name,
                status_code=response.status_code,
            ) from e
        if not isinstance(payload, dict):
            raise ProviderResponseError(
                "Unexpected response shape",
                provider=self.name,
                status_code=response.status_code,
            )
        return payload

    async def get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        return await self._request_json("GET", path, params=params)

    async def post_form(self, path: str, data: Dict[str, str]) -> Dict[str, Any]:
        return await self._request_json("POST", path, data=data)
