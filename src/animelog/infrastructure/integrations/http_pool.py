"""Shared HTTP client pool for cover downloads.

Hey future me - cover images come from MyAnimeList's CDN (cdn.myanimelist.net), which is a
DIFFERENT origin than the Jikan API and is NOT rate limited by us. Downloads therefore don't go
through the RequestThrottle, but they should still reuse TCP connections instead of opening a
fresh AsyncClient per image. A backfill over 300 entries would otherwise do 300 TLS handshakes.

Usage:
    client = await HttpClientPool.get_client()
    response = await client.get(url)

Call HttpClientPool.close() at shutdown (see lifecycle.py)!
"""

import asyncio
import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Process-wide lazily created httpx.AsyncClient."""

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    DEFAULT_TIMEOUT: ClassVar[float] = 30.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 10
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 20

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        # Lazy so the lock is created inside a running event loop
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(
        cls,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> httpx.AsyncClient:
        """Get the shared HTTP client instance.

        Args:
            timeout: Request timeout in seconds (only honored on first call)
            user_agent: User-Agent header (only honored on first call)

        Returns:
            Shared httpx.AsyncClient instance
        """
        async with cls._ensure_lock():
            if cls._client is None:
                effective_timeout = timeout or cls.DEFAULT_TIMEOUT
                headers = {"User-Agent": user_agent} if user_agent else None
                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(effective_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=cls.DEFAULT_MAX_KEEPALIVE,
                        max_connections=cls.DEFAULT_MAX_CONNECTIONS,
                    ),
                    headers=headers,
                    http2=True,
                    # CDNs love redirects
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, max_conn=%d)",
                    effective_timeout,
                    cls.DEFAULT_MAX_CONNECTIONS,
                )
            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client. The next get_client() creates a new one."""
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._client is not None
