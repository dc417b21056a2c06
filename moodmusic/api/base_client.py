"""
Base API Client

Unified HTTP request handling, rate limiting and error handling for the
music catalog adapters. Every failure surfaces as MusicServiceError.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp
import structlog

from .music_service import MusicServiceError
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)

MAX_BACKOFF_SECONDS = 60.0


class BaseAPIClient(ABC):
    """
    Base HTTP client for catalog adapters.

    Subclasses supply the base URL, per-request auth and the extraction of
    API errors embedded in a response body.
    """

    def __init__(
        self,
        base_url: str,
        rate_limiter: UnifiedRateLimiter,
        timeout: int = 10,
        service_name: str = "api"
    ):
        """
        Initialize base API client.

        Args:
            base_url: Base URL for the API
            rate_limiter: Rate limiter instance for this client
            timeout: Request timeout in seconds
            service_name: Service name for logging and errors
        """
        self.base_url = base_url.rstrip('/')
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.service_name = service_name
        self.session: Optional[aiohttp.ClientSession] = None

        self.logger = logger.bind(
            service=service_name,
            component="BaseAPIClient",
            base_url=base_url
        )

    async def __aenter__(self):
        """Async context manager entry. An adapter holds one session at a time."""
        if self.session is not None:
            raise RuntimeError(f"{self.service_name} client session already open")
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        self.logger.debug("API client session started")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("API client session closed")

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        retries: int = 3
    ) -> Dict[str, Any]:
        """
        Make rate-limited HTTP request with retries.

        429 and 5xx responses, timeouts and connection errors are retried
        with exponential backoff. Other 4xx responses fail immediately.

        Args:
            endpoint: API endpoint (relative to base_url)
            params: Query parameters (JSON body for POST/PUT)
            method: HTTP method
            headers: Additional headers
            retries: Number of retry attempts

        Returns:
            Parsed JSON response data

        Raises:
            MusicServiceError: When the request cannot be completed
        """
        if not self.session:
            self.logger.error("Client not initialized")
            raise MusicServiceError(
                self.service_name, "client not initialized, use async context manager"
            )

        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url
        request_params = params or {}
        request_headers = {**self._auth_headers(), **(headers or {})}
        request_headers.setdefault('User-Agent', f'MoodMusic-{self.service_name}/1.0')

        for attempt in range(retries + 1):
            await self.rate_limiter.wait_if_needed()

            try:
                self.logger.debug(
                    "Making API request",
                    method=method,
                    endpoint=endpoint,
                    attempt=attempt + 1,
                    max_attempts=retries + 1
                )

                async with self.session.request(
                    method=method,
                    url=url,
                    params=request_params if method == "GET" else None,
                    json=request_params if method in ("POST", "PUT", "PATCH") else None,
                    headers=request_headers
                ) as response:

                    if response.status == 200:
                        data = await self._parse_response(response)
                        error_info = self._extract_api_error(data)
                        if error_info:
                            self.logger.error("API error in response body", error=error_info, endpoint=endpoint)
                            raise MusicServiceError(self.service_name, f"API error: {error_info}", 200)

                        self.logger.debug("API request successful", endpoint=endpoint)
                        return data

                    if response.status == 429:
                        wait_time = self._retry_after(response, attempt)
                        self.logger.warning(
                            "Rate limited - backing off",
                            attempt=attempt + 1,
                            wait_time=wait_time,
                            endpoint=endpoint
                        )
                        if attempt == retries:
                            raise MusicServiceError(self.service_name, "rate limited", 429)
                        await asyncio.sleep(wait_time)
                        continue

                    body = await self._safe_error_body(response)
                    self.logger.warning(
                        f"{self.service_name} HTTP error",
                        status=response.status,
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        error=body
                    )
                    if response.status < 500 or attempt == retries:
                        raise MusicServiceError(
                            self.service_name,
                            f"HTTP {response.status}: {body or response.reason}",
                            response.status
                        )

            except asyncio.TimeoutError:
                self.logger.warning("Request timeout", attempt=attempt + 1, endpoint=endpoint, timeout=self.timeout)
                if attempt == retries:
                    raise MusicServiceError(
                        self.service_name, f"request timed out after {retries + 1} attempts"
                    )

            except aiohttp.ClientError as e:
                self.logger.error(
                    "HTTP client error",
                    error=str(e),
                    error_type=type(e).__name__,
                    attempt=attempt + 1,
                    endpoint=endpoint
                )
                if attempt == retries:
                    raise MusicServiceError(self.service_name, f"client error: {e}") from e

            await self._exponential_backoff(attempt)

        raise MusicServiceError(self.service_name, f"request failed after {retries + 1} attempts")

    async def _parse_response(self, response: aiohttp.ClientResponse) -> Dict[str, Any]:
        """Parse a JSON response body."""
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError) as e:
            self.logger.error("Invalid JSON response", error=str(e))
            raise MusicServiceError(self.service_name, "returned invalid JSON", response.status) from e

    async def _safe_error_body(self, response: aiohttp.ClientResponse) -> Optional[str]:
        try:
            data = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return None
        return self._extract_api_error(data) if isinstance(data, dict) else None

    def _auth_headers(self) -> Dict[str, str]:
        """Per-request auth headers. Key-based APIs pass credentials as params instead."""
        return {}

    @abstractmethod
    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract API-specific error information from response data.

        Args:
            data: Parsed response data

        Returns:
            Error message if found, None otherwise
        """

    def _retry_after(self, response: aiohttp.ClientResponse, attempt: int) -> float:
        retry_after = response.headers.get('Retry-After')
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                self.logger.debug("Unparseable Retry-After header", value=retry_after)
        return min(2 ** attempt, MAX_BACKOFF_SECONDS)

    async def _exponential_backoff(self, attempt: int, base_delay: float = 1.0):
        """Sleep with exponential backoff and jitter."""
        delay = base_delay * (2 ** attempt)
        total_delay = min(delay + random.uniform(0.1, 0.3) * delay, MAX_BACKOFF_SECONDS)

        self.logger.debug("Backing off before retry", attempt=attempt + 1, delay=total_delay)
        await asyncio.sleep(total_delay)
