"""Dependency injection for API endpoints."""

import logging
from typing import Any, cast

from fastapi import HTTPException, Request

from animelog.application.services.anime_service import AnimeListService
from animelog.application.services.cover_resolution_service import CoverResolutionService
from animelog.application.services.mal_import_service import MalImportService
from animelog.application.workers.cover_backfill_worker import CoverBackfillWorker
from animelog.infrastructure.persistence.json_store import JsonRecordStore
from animelog.infrastructure.rate_limiter import RequestThrottle

logger = logging.getLogger(__name__)


# Hey future me, everything here comes from app.state, which lifecycle.lifespan() fills at startup.
# If an attribute is missing, startup failed (or a test forgot to set it) - answer 503 instead of
# crashing with AttributeError. Tests override these with app.dependency_overrides.
def _from_state(request: Request, name: str) -> Any:
    if not hasattr(request.app.state, name):
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return getattr(request.app.state, name)


def get_record_store(request: Request) -> JsonRecordStore:
    return cast(JsonRecordStore, _from_state(request, "record_store"))


def get_cover_service(request: Request) -> CoverResolutionService:
    return cast(CoverResolutionService, _from_state(request, "cover_service"))


def get_anime_service(request: Request) -> AnimeListService:
    return cast(AnimeListService, _from_state(request, "anime_service"))


def get_throttle(request: Request) -> RequestThrottle:
    return cast(RequestThrottle, _from_state(request, "jikan_throttle"))


def get_backfill_worker(request: Request) -> CoverBackfillWorker | None:
    """Backfill worker, or None when disabled in settings."""
    return cast(CoverBackfillWorker | None, getattr(request.app.state, "backfill_worker", None))


def get_import_service(request: Request) -> MalImportService:
    return cast(MalImportService, _from_state(request, "import_service"))
