"""Cover resolution endpoint."""

# Hey future me - this is the public "get cover for title X" operation. It's idempotent:
# the first call may hit Jikan + the CDN, every later call for the same title is answered
# from the cover directory without any network. Not-found is a 200 with coverImage=null!

import logging

from fastapi import APIRouter, Depends, Query

from animelog.api.dependencies import get_cover_service
from animelog.api.schemas import CoverResponse
from animelog.application.services.cover_resolution_service import CoverResolutionService
from animelog.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["covers"])


@router.get("/anime-covers")
async def resolve_cover(
    title: str | None = Query(default=None, description="Anime title"),
    id: int | None = Query(default=None, description="mal_id, if already known"),
    cover_service: CoverResolutionService = Depends(get_cover_service),
) -> CoverResponse:
    """Resolve a title to a local cover path (downloading it on first use)."""
    if not title:
        raise ValidationError("Missing anime title")

    resolution = await cover_service.resolve(title, known_id=id)
    return CoverResponse.from_resolution(resolution)
