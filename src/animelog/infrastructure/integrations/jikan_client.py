"""Jikan (unofficial MyAnimeList API) HTTP client with request throttling."""

import logging
from typing import Any

import httpx

from animelog.config.settings import JikanSettings
from animelog.domain.dtos import ExternalRecord
from animelog.domain.exceptions import UpstreamError, UpstreamRateLimited, ValidationError
from animelog.domain.ports import IMetadataLookupClient
from animelog.infrastructure.rate_limiter import RequestThrottle

logger = logging.getLogger(__name__)


class JikanClient(IMetadataLookupClient):
    """HTTP client for Jikan search with throttled requests."""

    # Hey future me, Jikan is STRICT-ish about rate limiting - ~1 req/sec (plus a per-minute cap).
    # ALL requests go through the injected RequestThrottle. Don't create your own throttle here
    # "for testing" - pass a fast one in from the test instead. The singleton lives in
    # rate_limiter.get_jikan_throttle() and lifecycle.py wires it in.
    def __init__(
        self,
        settings: JikanSettings,
        throttle: RequestThrottle,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize Jikan client.

        Args:
            settings: Jikan configuration settings
            throttle: Process-wide request throttle for the Jikan API
            client: Optional preconfigured httpx client (tests pass a MockTransport one)
        """
        self.settings = settings
        self.throttle = throttle
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client (only if we created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # Yo future me, this is the ONLY place that talks to Jikan. The inner _request() runs
    # inside the throttle's critical section, so everything in it (connect, send, read body)
    # counts as "the call" and the watermark is set after it's fully done. Status handling is
    # ALSO inside - a 429 is still a completed call that consumed its slot.
    async def _throttled_get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        Make a throttled GET request to the Jikan API.

        Raises:
            UpstreamRateLimited: Jikan answered 429
            UpstreamError: Any other non-2xx, transport failure or garbage body
        """

        async def _request() -> dict[str, Any]:
            client = await self._get_client()
            try:
                response = await client.get(path, params=params)
            except httpx.HTTPError as e:
                raise UpstreamError(None, f"{type(e).__name__}: {e}") from e

            if response.status_code == 429:
                raise UpstreamRateLimited(
                    response.text, retry_after=_parse_retry_after(response)
                )
            if not response.is_success:
                raise UpstreamError(response.status_code, response.text)

            try:
                payload = response.json()
            except ValueError as e:
                raise UpstreamError(
                    response.status_code, "Response body is not valid JSON"
                ) from e
            if not isinstance(payload, dict):
                raise UpstreamError(response.status_code, "Unexpected response shape")
            return payload

        return await self.throttle.submit(_request)

    # Listen up, we ask Jikan for limit=1 and trust ITS relevance ranking. No local re-ranking,
    # no fuzzy matching. "Naruto" gives Naruto, not Shippuden - usually. If that's ever not
    # good enough, raise the limit and score the candidates yourself.
    async def lookup(self, title: str) -> ExternalRecord | None:
        """
        Resolve a title to the best-matching anime.

        Args:
            title: Free-text title

        Returns:
            ExternalRecord or None if Jikan has no match

        Raises:
            ValidationError: Empty title
            UpstreamRateLimited: Jikan rate limited us
            UpstreamError: Jikan failed
        """
        if not title or not title.strip():
            raise ValidationError("A valid anime title is required.")

        logger.info("Searching Jikan for: %r", title)
        payload = await self._throttled_get("/anime", params={"q": title, "limit": 1})

        results = payload.get("data") or []
        if not results:
            logger.info("No Jikan match for %r", title)
            return None

        return _to_external_record(results[0])

    async def __aenter__(self) -> "JikanClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


# Hey future me - webp first because it's smaller, jpg as fallback. Jikan sometimes sends
# images.webp = {"image_url": null}, hence the "or {}" and the None filtering.
def _to_external_record(item: dict[str, Any]) -> ExternalRecord:
    mal_id = item.get("mal_id")
    if mal_id is None:
        raise UpstreamError(200, "Jikan result without mal_id")

    images = item.get("images") or {}
    urls: list[str] = []
    for fmt in ("webp", "jpg"):
        url = (images.get(fmt) or {}).get("image_url")
        if url and url not in urls:
            urls.append(url)

    return ExternalRecord(
        mal_id=int(mal_id),
        title=item.get("title") or "",
        image_urls=tuple(urls),
        type=item.get("type"),
        episodes=item.get("episodes"),
    )
