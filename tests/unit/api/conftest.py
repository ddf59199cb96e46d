"""Shared fixtures for router tests.

Hey future me - routers read their services from app.state (see api/dependencies.py), so
these fixtures build a bare FastAPI app, put real/mocked services on app.state and skip the
lifespan entirely. test_app_factory.py covers the real wiring.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from animelog.api import api_router
from animelog.api.exception_handlers import register_exception_handlers
from animelog.application.services import AnimeListService, MalImportService
from animelog.domain.entities import AnimeEntry
from animelog.infrastructure.persistence import JsonRecordStore
from animelog.infrastructure.rate_limiter import RequestThrottle, RequestThrottleConfig


@pytest.fixture
def record_store(tmp_path: Path) -> JsonRecordStore:
    store = JsonRecordStore(tmp_path / "db.json")
    store.add(AnimeEntry(id=1, title="Cowboy Bebop", type="TV", episodes=26), front=False)
    store.add(
        AnimeEntry(id=20, title="Naruto", episodes=220, cover_image="/anime-covers/naruto-20.webp"),
        front=False,
    )
    store.set_orders({"favorites": [20, 1]})
    return store


@pytest.fixture
def metadata_client() -> AsyncMock:
    client = AsyncMock()
    client.lookup.return_value = None
    return client


@pytest.fixture
def cover_service() -> MagicMock:
    service = MagicMock()
    service.resolve = AsyncMock()
    return service


@pytest.fixture
def throttle() -> RequestThrottle:
    return RequestThrottle(config=RequestThrottleConfig(min_interval_seconds=0.0), name="jikan")


@pytest.fixture
def app(
    record_store: JsonRecordStore,
    metadata_client: AsyncMock,
    cover_service: MagicMock,
    throttle: RequestThrottle,
) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    app.state.record_store = record_store
    app.state.cover_service = cover_service
    app.state.anime_service = AnimeListService(
        record_store, metadata_client, cover_service, "/anime-covers"
    )
    app.state.import_service = MalImportService(record_store)
    app.state.jikan_throttle = throttle
    app.state.backfill_worker = None
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
