"""Cover resolution - the single entry point for "get me a cover for this title".

Hey future me - there used to be TWO cover paths (the covers endpoint and the PUT /api/db
handler calling it over HTTP) with slightly different filename logic. This service is the
one and only implementation now. Everything that wants a cover comes through resolve().

Step order (first satisfying step wins):
1. probe(key)          → local hit, zero network
2. lookup(title)       → Jikan via RequestThrottle; None = "no cover", errors propagate
3. probe_exact(file)   → authoritative check once mal_id + extension are known
4. store(file, url)    → download (NOT throttled), persist, return path
"""

import logging

from animelog.application.services.images.asset_cache import AssetCache
from animelog.domain.dtos import CoverResolution
from animelog.domain.exceptions import ValidationError
from animelog.domain.ports import IMetadataLookupClient
from animelog.domain.value_objects import cover_filename, infer_extension, make_cover_key

logger = logging.getLogger(__name__)


class CoverResolutionService:
    """Stateless orchestrator over JikanClient + AssetCache.

    Safe to call concurrently for many titles (bulk backfill fans out freely). The
    Jikan step is serialized underneath by the throttle, downloads run in parallel.
    """

    def __init__(self, metadata_client: IMetadataLookupClient, asset_cache: AssetCache) -> None:
        self.metadata_client = metadata_client
        self.asset_cache = asset_cache

    async def resolve(self, title: str, known_id: int | None = None) -> CoverResolution:
        """Resolve a title to a local cover path.

        Args:
            title: Anime title
            known_id: mal_id if already known (only used to prefer a cached file)

        Returns:
            CoverResolution - cover_image is None when no cover exists upstream

        Raises:
            ValidationError: Empty title
            UpstreamRateLimited / UpstreamError: Jikan failed
            DownloadError: CDN failed
            StorageError: Disk failed
        """
        if not title or not title.strip():
            raise ValidationError("Missing anime title")

        key = make_cover_key(title)

        cached = await self.asset_cache.probe(key, known_id=known_id)
        if cached is not None:
            logger.debug("Image for %r already exists locally: %s", title, cached)
            return CoverResolution(cover_image=cached)

        record = await self.metadata_client.lookup(title)
        if record is None:
            logger.info("No Jikan match for %r", title)
            return CoverResolution.not_found(title)

        image_url = record.preferred_image_url
        if image_url is None:
            logger.info("Jikan match for %r (mal_id=%d) has no image", title, record.mal_id)
            return CoverResolution.not_found(title)

        filename = cover_filename(key, record.mal_id, infer_extension(image_url))

        existing = await self.asset_cache.probe_exact(filename)
        if existing is not None:
            logger.debug("Image for %r already exists (definitive filename): %s", title, existing)
            return CoverResolution(cover_image=existing)

        path = await self.asset_cache.store(filename, image_url)
        return CoverResolution(cover_image=path, downloaded=True)
