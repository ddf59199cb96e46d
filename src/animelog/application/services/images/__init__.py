"""Cover image caching."""

from animelog.application.services.images.asset_cache import AssetCache

__all__ = ["AssetCache"]
