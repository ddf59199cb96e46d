"""Whole-database endpoints used by the list page."""

import logging

from fastapi import APIRouter, Depends

from animelog.api.dependencies import get_anime_service, get_record_store
from animelog.api.schemas import (
    AnimeEntrySchema,
    CoverRequest,
    CoverResponse,
    DbSnapshot,
    DbUpdateRequest,
    MessageResponse,
)
from animelog.application.services.anime_service import AnimeListService
from animelog.domain.exceptions import ValidationError
from animelog.infrastructure.persistence.json_store import JsonRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["db"])


@router.get("/db")
async def get_database(store: JsonRecordStore = Depends(get_record_store)) -> DbSnapshot:
    """Return the full list and all custom orderings."""
    return DbSnapshot(
        anime_list=[AnimeEntrySchema.from_entry(entry) for entry in store.get_all()],
        anime_orders=store.get_orders(),
    )


# Hey future me - the UI sends the WHOLE list after a drag-reorder or bulk edit, and the whole
# orders map after reordering inside a custom sort. We replace, we don't merge.
@router.post("/db")
async def update_database(
    body: DbUpdateRequest,
    store: JsonRecordStore = Depends(get_record_store),
) -> MessageResponse:
    """Replace the anime list or the custom orderings."""
    if body.type == "updateAnimeList" and body.updated_anime_list is not None:
        store.replace_all([item.to_entry() for item in body.updated_anime_list])
        await store.flush()
        return MessageResponse(message="Anime list updated.")

    if body.type == "updateAnimeOrders" and body.updated_orders is not None:
        store.set_orders(body.updated_orders)
        await store.flush()
        return MessageResponse(message="Anime orders updated.")

    raise ValidationError("Invalid request type")


@router.put("/db")
async def save_cover(
    body: CoverRequest,
    anime_service: AnimeListService = Depends(get_anime_service),
) -> CoverResponse:
    """Resolve the cover of one entry and persist the local path in db.json."""
    if not body.title or body.id is None:
        raise ValidationError("Missing title or ID")

    resolution = await anime_service.resolve_cover_for(body.id, body.title)
    return CoverResponse.from_resolution(resolution)
