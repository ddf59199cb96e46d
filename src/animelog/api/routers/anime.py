"""Single-entry CRUD endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from animelog.api.dependencies import get_anime_service
from animelog.api.schemas import AddAnimeRequest, AnimeEntrySchema, MessageResponse
from animelog.application.services.anime_service import AnimeListService
from animelog.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["anime"])


@router.post("/anime", status_code=status.HTTP_201_CREATED)
async def add_anime(
    body: AddAnimeRequest,
    anime_service: AnimeListService = Depends(get_anime_service),
) -> AnimeEntrySchema:
    """Look a title up on Jikan and add it to the top of the list."""
    entry = await anime_service.add_by_title(body.title or "")
    return AnimeEntrySchema.from_entry(entry)


@router.delete("/anime")
async def delete_anime(
    id: str | None = Query(default=None),
    anime_service: AnimeListService = Depends(get_anime_service),
) -> MessageResponse:
    """Delete an entry. Deleting an unknown id is not an error."""
    if not id:
        raise ValidationError("Anime ID is required.")
    try:
        anime_id = int(id)
    except ValueError:
        raise ValidationError("Invalid Anime ID format.") from None

    removed = await anime_service.delete(anime_id)
    if removed is None:
        return MessageResponse(message="Anime not found or already deleted.")
    return MessageResponse(message=f'Successfully deleted "{removed.title}"')


@router.patch("/anime")
async def update_anime(
    body: dict[str, Any] = Body(...),
    anime_service: AnimeListService = Depends(get_anime_service),
) -> AnimeEntrySchema:
    """Partially update an entry (``id`` plus any db.json fields)."""
    anime_id = body.get("id")
    if not isinstance(anime_id, int) or isinstance(anime_id, bool):
        raise ValidationError("A valid anime ID is required.")

    changes = {key: value for key, value in body.items() if key != "id"}
    entry = await anime_service.update(anime_id, changes)
    return AnimeEntrySchema.from_entry(entry)
