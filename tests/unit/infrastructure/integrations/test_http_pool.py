"""Tests for the shared download client pool."""

import httpx

from animelog.infrastructure.integrations.http_pool import HttpClientPool


class TestHttpClientPool:
    async def test_returns_shared_client_and_closes(self) -> None:
        try:
            first = await HttpClientPool.get_client(timeout=5.0, user_agent="animelog-test")
            second = await HttpClientPool.get_client()

            assert first is second
            assert isinstance(first, httpx.AsyncClient)
            assert first.headers["User-Agent"] == "animelog-test"
            assert first.follow_redirects is True
            assert HttpClientPool.is_initialized()
        finally:
            await HttpClientPool.close()
            HttpClientPool._lock = None

        assert not HttpClientPool.is_initialized()
