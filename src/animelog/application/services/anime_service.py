"""Anime list operations: add by title, patch, delete, resolve+persist cover."""

import logging
import math
from typing import Any

from animelog.application.services.cover_resolution_service import CoverResolutionService
from animelog.domain.dtos import CoverResolution
from animelog.domain.entities import COMPLETED, AnimeEntry
from animelog.domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationError,
)
from animelog.domain.ports import IMetadataLookupClient
from animelog.infrastructure.persistence.json_store import JsonRecordStore

logger = logging.getLogger(__name__)


def _to_number(value: Any) -> float | None:
    """Loose number parsing (the UI sends "12" as often as 12). None if not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# db.json keys that must stay strings, otherwise the list can no longer be served
_TEXT_FIELDS = ("title", "type", "status", "startDate", "finishDate")


def _normalize(number: float) -> int | float:
    return int(number) if number.is_integer() else number


class AnimeListService:
    """Business rules around the tracked list.

    Hey future me - adding by title goes through the SAME JikanClient (and therefore the
    same throttle) as cover resolution. Calling Jikan directly from here, unthrottled,
    is exactly how you collect 429s during bulk imports.
    """

    def __init__(
        self,
        store: JsonRecordStore,
        metadata_client: IMetadataLookupClient,
        cover_service: CoverResolutionService,
        local_cover_prefix: str = "/anime-covers",
    ) -> None:
        self.store = store
        self.metadata_client = metadata_client
        self.cover_service = cover_service
        self.local_cover_prefix = local_cover_prefix

    async def add_by_title(self, title: str) -> AnimeEntry:
        """Look a title up on Jikan and prepend it to the list.

        Raises:
            ValidationError: Empty title
            EntityNotFoundException: Jikan has no match
            DuplicateEntityException: mal_id already listed
        """
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("A valid anime title is required.")

        record = await self.metadata_client.lookup(title)
        if record is None:
            raise EntityNotFoundException("Anime", title)

        if self.store.get_by_id(record.mal_id) is not None:
            raise DuplicateEntityException(
                "Anime",
                record.mal_id,
                message=f'"{record.title}" already exists in your list.',
            )

        entry = AnimeEntry(
            id=record.mal_id,
            title=record.title,
            type=record.type or "Unknown",
            episodes=record.episodes or 0,
            cover_image=record.preferred_image_url or "",
        )
        self.store.add(entry, front=True)
        await self.store.flush()

        logger.info("Added %r (mal_id=%d) to the list", entry.title, entry.id)
        return entry

    async def delete(self, entry_id: int) -> AnimeEntry | None:
        """Remove an entry (and its id from all custom orderings). Idempotent."""
        removed = self.store.delete(entry_id)
        if removed is None:
            logger.info("Anime %d not found or already deleted", entry_id)
            return None

        await self.store.flush()
        logger.info("Deleted %r (ID: %d)", removed.title, entry_id)
        return removed

    # Listen up, PATCH semantics follow the UI: any db.json key can be patched, but known
    # keys are type-checked (episodes/watchedEpisodes/score also range-checked), and
    # reaching the last episode flips the status to Completed automatically. The id
    # itself can never be patched.
    async def update(self, entry_id: int, changes: dict[str, Any]) -> AnimeEntry:
        """Apply a partial update.

        Raises:
            EntityNotFoundException: Unknown id
            ValidationError: A known field has the wrong type, or
                episodes/watchedEpisodes/score is out of range
        """
        original = self.store.get_by_id(entry_id)
        if original is None:
            raise EntityNotFoundException("Anime", entry_id)

        data = original.to_dict()
        data.update({k: v for k, v in changes.items() if k != "id"})

        # Nothing below may reach the store unchecked: a bad type on disk breaks GET /api/db
        for key in _TEXT_FIELDS:
            if key in changes and not isinstance(changes[key], str):
                raise ValidationError(f"{key} must be a string.")

        if "coverImage" in changes and not isinstance(changes["coverImage"], str | None):
            raise ValidationError("coverImage must be a string.")

        if "episodes" in changes:
            episodes = _to_number(changes["episodes"])
            if episodes is None or episodes < 0 or not episodes.is_integer():
                raise ValidationError("Invalid number of episodes.")
            data["episodes"] = int(episodes)

        if "watchedEpisodes" in changes:
            watched = _to_number(changes["watchedEpisodes"])
            if (
                watched is None
                or watched < 0
                or (original.episodes > 0 and watched > original.episodes)
            ):
                raise ValidationError("Invalid number of watched episodes.")
            data["watchedEpisodes"] = _normalize(watched)

        if "score" in changes:
            score = _to_number(changes["score"])
            if score is None or score < 0 or score > 10:
                raise ValidationError("Score must be between 0 and 10.")
            data["score"] = _normalize(score)

        updated = AnimeEntry.from_dict(data)
        if updated.episodes > 0 and updated.watched_episodes == updated.episodes:
            updated.status = COMPLETED

        self.store.replace(updated)
        await self.store.flush()

        logger.info("Updated %r", updated.title)
        return updated

    async def resolve_cover_for(self, entry_id: int, title: str | None = None) -> CoverResolution:
        """Make sure an entry has a local cover and persist its path.

        Raises:
            EntityNotFoundException: Unknown id
            (plus everything CoverResolutionService.resolve raises)
        """
        entry = self.store.get_by_id(entry_id)
        if entry is None:
            raise EntityNotFoundException("Anime", entry_id)

        if entry.has_local_cover(self.local_cover_prefix):
            logger.debug("Anime %d already has local cover: %s", entry_id, entry.cover_image)
            return CoverResolution(cover_image=entry.cover_image)

        resolution = await self.cover_service.resolve(title or entry.title, known_id=entry_id)
        if not resolution.found:
            logger.warning("No cover image found for %r", entry.title)
            return resolution

        self.store.update_field(entry_id, "coverImage", resolution.cover_image)
        await self.store.flush()
        logger.info("Updated DB with local cover for %r: %s", entry.title, resolution.cover_image)
        return resolution

    def entries_missing_cover(self) -> list[AnimeEntry]:
        return [
            entry
            for entry in self.store.get_all()
            if not entry.has_local_cover(self.local_cover_prefix)
        ]
