"""External API integrations."""

from animelog.infrastructure.integrations.http_pool import HttpClientPool
from animelog.infrastructure.integrations.jikan_client import JikanClient

__all__ = ["HttpClientPool", "JikanClient"]
