"""
Base Registry Client - shared HTTP request loop for the package registries.

Both registry clients (NuGet and the Umbraco Marketplace) go through
`_make_request()`, which gives them:
- A bounded per-request timeout (httpx client timeout)
- Retry on 429 and transport errors with exponential backoff
- Circuit breaker so a dead registry is skipped quickly
- "Never raise": every failure is logged and reported as ``None``
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

import httpx
from typing_extensions import Self

from package_suggest.core.async_utils import CircuitBreaker
from package_suggest.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 15.0
USER_AGENT = "umbraco-package-suggest-mcp/0.1"


class BaseRegistryClient:
    """
    Base class for registry HTTP clients.

    Subclasses set `_service_name` and can override:
    - `_handle_expected_status()`: short-circuit on service-specific codes (e.g. 404)
    - `_parse_response()`: custom body extraction

    Example:
        class MyRegistry(BaseRegistryClient):
            _service_name = "MyRegistry"

            async def search(self, query: str, limit: int) -> list[RawPackageRecord]:
                data = await self._make_request("/search", params={"q": query})
                ...
    """

    _service_name: str = "Registry"
    _MAX_RETRIES: int = 2
    _MAX_RETRY_AFTER: float = 30.0

    def __init__(
        self,
        base_url: str = "",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL for relative request paths
            timeout: Request timeout in seconds
            headers: Extra default headers
            circuit_breaker: Optional breaker; a default one is created otherwise
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})},
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            transport=transport,
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=60.0)

    @property
    def service_name(self) -> str:
        return self._service_name

    def _build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        GET a JSON document with retry and circuit breaker protection.

        Args:
            url: Full URL or path appended to the base URL
            params: Query string parameters

        Returns:
            Decoded JSON object, or None on any failure
        """
        full_url = self._build_url(url)

        for attempt in range(self._MAX_RETRIES + 1):
            try:
                async with self._circuit_breaker:
                    response = await self._client.get(full_url, params=params)

                    expected = self._handle_expected_status(response, full_url)
                    if expected is not _CONTINUE:
                        return expected

                    if response.status_code == 429:
                        if attempt < self._MAX_RETRIES:
                            retry_after = self._get_retry_after(response, attempt)
                            logger.warning(
                                f"{self._service_name}: Rate limited (429), "
                                f"retry {attempt + 1}/{self._MAX_RETRIES} in {retry_after:.1f}s"
                            )
                            await asyncio.sleep(retry_after)
                            continue
                        logger.warning(f"{self._service_name}: Rate limit exceeded after retries")
                        return None

                    response.raise_for_status()
                    return self._parse_response(response)

            except RateLimitError:
                logger.warning(f"{self._service_name}: Circuit breaker open, skipping request")
                return None
            except httpx.HTTPStatusError as e:
                logger.warning(
                    f"{self._service_name} HTTP error {e.response.status_code}: {e.response.reason_phrase}"
                )
                return None
            except httpx.RequestError as e:
                if attempt < self._MAX_RETRIES:
                    logger.warning(f"{self._service_name} request error (attempt {attempt + 1}): {e}")
                    await asyncio.sleep(2**attempt * 0.5)
                    continue
                logger.warning(f"{self._service_name} request failed: {e}")
                return None
            except ValueError as e:
                # json.JSONDecodeError is a ValueError
                logger.warning(f"{self._service_name} returned an undecodable body: {e}")
                return None

        return None

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        """
        Handle non-200 codes that should not be retried.

        Return a value to short-circuit, or the `_CONTINUE` sentinel to go on.
        """
        return _CONTINUE

    def _parse_response(self, response: httpx.Response) -> dict[str, Any] | None:
        data = response.json()
        return data if isinstance(data, dict) else None

    def _get_retry_after(self, response: httpx.Response, attempt: int) -> float:
        """Retry-After header (capped at `_MAX_RETRY_AFTER`), falling back to exponential backoff."""
        try:
            delay = float(response.headers.get("Retry-After", 2**attempt))
        except (ValueError, TypeError):
            delay = float(2**attempt)
        if not math.isfinite(delay):
            delay = self._MAX_RETRY_AFTER
        return min(max(delay, 0.0), self._MAX_RETRY_AFTER)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


# Sentinel returned by _handle_expected_status to continue normal processing
_CONTINUE = object()
