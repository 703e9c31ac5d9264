"""
Base API client providing common functionality for HTTP clients of the music backend.
Includes async HTTP session handling, retry logic, caching, and error handling.
"""

import asyncio
import logging
from typing import Dict, Any, Optional
import aiohttp
import backoff
from moodradio.errors import CatalogError
from moodradio.utils.cache_manager import CacheManager

logger = logging.getLogger(__name__)

class APIError(CatalogError):
    """Base exception for API errors."""

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None, body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.body = body or {}

class AuthenticationError(APIError):
    """Exception raised when the backend rejects our credentials."""
    pass

class BaseAPIClient:
    """Base class for clients of the music backend REST API."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        cache_manager: Optional[CacheManager] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.max_retries = max_retries
        self.cache_manager = cache_manager
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self):
        """Ensure HTTP session is created."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))

    async def close(self):
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _get_auth_headers(self) -> Dict[str, str]:
        """Bearer header when an access token is configured."""
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Make HTTP request, retrying transport failures with exponential backoff."""
        retrying = backoff.on_exception(
            backoff.expo,
            (aiohttp.ClientConnectionError, asyncio.TimeoutError),
            max_tries=self.max_retries,
            max_time=60
        )(self._send)

        try:
            return await retrying(method, endpoint, params=params, data=data, headers=headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"HTTP request {method} {endpoint} failed: {e}")
            raise APIError(f"Request failed: {e}")

    async def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        await self._ensure_session()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        request_headers = self._get_auth_headers()
        if headers:
            request_headers.update(headers)

        async with self.session.request(
            method, url, params=params, json=data, headers=request_headers
        ) as response:
            if response.status == 401:
                raise AuthenticationError("Authentication failed", status=401)

            if response.status >= 400:
                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    body = {}
                message = body.get("message") or f"HTTP {response.status}"
                raise APIError(message, status=response.status, body=body)

            return await response.json()

    async def _cached_request(
        self,
        cache_key: str,
        method: str,
        endpoint: str,
        ttl: int = 3600,
        **kwargs
    ) -> Dict[str, Any]:
        """Make request with caching support."""
        if self.cache_manager:
            cached_result = await self.cache_manager.get(cache_key)
            if cached_result:
                return cached_result

        result = await self._make_request(method, endpoint, **kwargs)

        if self.cache_manager:
            await self.cache_manager.set(cache_key, result, ttl)

        return result
