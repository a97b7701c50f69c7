"""
Shared async HTTP plumbing for the Atlassian REST clients.

One httpx.AsyncClient per service with basic auth, retry with exponential
backoff on 429/5xx and transport errors, and uniform response handling.
401/403 become PermissionDeniedError and are never retried; the upstream
body is logged but never placed in the exception.
"""

import asyncio
from typing import Any

import httpx

from keeper.features.cognitive_offboarding.domain.errors import (
    ArtifactServiceError,
    PermissionDeniedError,
)
from keeper.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Request timeouts and retry configuration
REQUEST_TIMEOUT = 30
MAX_RETRIES = 3
BACKOFF_FACTOR = 2
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}
PERMISSION_STATUS_CODES = {401, 403}


class AtlassianHTTPClient:
    """Base class for the Jira, Bitbucket and Confluence clients."""

    service = "atlassian"

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or self._create_client(auth, timeout)

    def _create_client(self, auth: tuple[str, str] | None, timeout: float) -> httpx.AsyncClient:
        """Create async HTTP client for the service."""
        return httpx.AsyncClient(
            auth=auth,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with retry and backoff."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                    logger.debug(
                        f"{self.service} API retrying request",
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    raise ArtifactServiceError(
                        self.service, f"{self.service} API unreachable: {e}"
                    ) from e
                backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                logger.debug(
                    f"{self.service} API request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError(f"{self.service} API retry loop exhausted")

    def _handle_api_response(self, response: httpx.Response, operation: str) -> Any:
        """
        Handle and validate an API response.

        Args:
            response: HTTP response from the service
            operation: Operation name for logging

        Returns:
            Parsed JSON body ({} for an empty body)

        Raises:
            PermissionDeniedError: On 401/403 (generic message only)
            ArtifactServiceError: On any other non-success status or a malformed body
        """
        logger.debug(
            f"{self.service} API {operation} response",
            status_code=response.status_code,
            response_size=len(response.text) if response.text else 0,
        )

        if response.is_success:
            try:
                return response.json() if response.text else {}
            except ValueError as e:
                logger.error(f"Failed to parse {self.service} API {operation} response", error=str(e))
                raise ArtifactServiceError(
                    self.service, f"Invalid response format: {e}", status_code=response.status_code
                ) from e

        if response.status_code in PERMISSION_STATUS_CODES:
            # Upstream text can name private repositories or spaces: log only.
            logger.warning(
                f"{self.service} API {operation} permission denied",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise PermissionDeniedError(self.service)

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            error_data = {}

        message = _error_message(error_data) or f"HTTP {response.status_code}"
        logger.error(
            f"{self.service} API {operation} failed",
            status_code=response.status_code,
            error_message=message,
        )
        raise ArtifactServiceError(
            self.service,
            f"{self.service} {operation} failed: {message}",
            status_code=response.status_code,
            response_data=error_data if isinstance(error_data, dict) else {},
        )

    async def get_json(self, path: str, operation: str, **kwargs) -> Any:
        response = await self._request_with_retry("GET", self.url(path), **kwargs)
        return self._handle_api_response(response, operation)

    async def post_json(self, path: str, operation: str, payload: dict) -> Any:
        response = await self._request_with_retry("POST", self.url(path), json=payload)
        return self._handle_api_response(response, operation)


def _error_message(error_data: Any) -> str | None:
    """Pull a readable message out of the Jira, Bitbucket or Confluence error shapes."""
    if not isinstance(error_data, dict):
        return None
    if error_data.get("errorMessages"):
        return "; ".join(str(m) for m in error_data["errorMessages"])
    error = error_data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if error_data.get("message"):
        return str(error_data["message"])
    return None
