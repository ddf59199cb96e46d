"""Pydantic schemas for the anime/db/cover endpoints.

Hey future me - the frontend speaks camelCase (coverImage, watchedEpisodes, animeOrders).
Every model here uses the to_camel alias generator and FastAPI serializes by alias, so Python
code stays snake_case while the JSON matches what the UI has always read.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from animelog.domain.dtos import CoverResolution
from animelog.domain.entities import PLAN_TO_WATCH, UNKNOWN_DATE, AnimeEntry


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnimeEntrySchema(CamelModel):
    """One entry of the anime list, as stored in db.json."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    title: str
    type: str = "Unknown"
    episodes: int = 0
    watched_episodes: int | float = 0
    status: str = PLAN_TO_WATCH
    score: int | float = 0
    start_date: str = UNKNOWN_DATE
    finish_date: str = UNKNOWN_DATE
    cover_image: str | None = None

    @classmethod
    def from_entry(cls, entry: AnimeEntry) -> "AnimeEntrySchema":
        return cls.model_validate(entry.to_dict())

    def to_entry(self) -> AnimeEntry:
        return AnimeEntry.from_dict(self.model_dump(by_alias=True, exclude_none=True))


class CoverResponse(CamelModel):
    """Result of a cover resolution. coverImage=null means "no cover", not an error."""

    cover_image: str | None = Field(description="Served path of the local cover")
    message: str | None = None

    @classmethod
    def from_resolution(cls, resolution: CoverResolution) -> "CoverResponse":
        return cls(cover_image=resolution.cover_image, message=resolution.message)


class CoverRequest(CamelModel):
    """PUT /api/db body: resolve and persist the cover of one entry."""

    title: str | None = None
    id: int | None = None


class AddAnimeRequest(CamelModel):
    title: str | None = None


class DbSnapshot(CamelModel):
    anime_list: list[AnimeEntrySchema]
    anime_orders: dict[str, list[int]]


class DbUpdateRequest(CamelModel):
    """POST /api/db body. ``type`` selects which part gets replaced."""

    type: str
    updated_anime_list: list[AnimeEntrySchema] | None = None
    updated_orders: dict[str, list[int]] | None = None


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class HealthResponse(CamelModel):
    status: str
    throttle: dict[str, Any]
    backfill: dict[str, Any] | None = None
