"""Application services."""

from animelog.application.services.anime_service import AnimeListService
from animelog.application.services.cover_resolution_service import CoverResolutionService
from animelog.application.services.images import AssetCache
from animelog.application.services.mal_import_service import MalImportService

__all__ = ["AnimeListService", "AssetCache", "CoverResolutionService", "MalImportService"]
