"""Request/response schemas."""

from animelog.api.schemas.anime import (
    AddAnimeRequest,
    AnimeEntrySchema,
    CoverRequest,
    CoverResponse,
    DbSnapshot,
    DbUpdateRequest,
    HealthResponse,
    MessageResponse,
)

__all__ = [
    "AddAnimeRequest",
    "AnimeEntrySchema",
    "CoverRequest",
    "CoverResponse",
    "DbSnapshot",
    "DbUpdateRequest",
    "HealthResponse",
    "MessageResponse",
]
