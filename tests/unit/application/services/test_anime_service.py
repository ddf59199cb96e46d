"""Tests for AnimeListService."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from animelog.application.services import AnimeListService
from animelog.domain.dtos import CoverResolution, ExternalRecord
from animelog.domain.entities import COMPLETED, PLAN_TO_WATCH, UNKNOWN_DATE, AnimeEntry
from animelog.domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationError,
)
from animelog.infrastructure.persistence import JsonRecordStore


@pytest.fixture
async def store(tmp_path: Path) -> JsonRecordStore:
    store = JsonRecordStore(tmp_path / "db.json")
    await store.load()
    store.add(AnimeEntry(id=1, title="Cowboy Bebop", episodes=26, watched_episodes=3), front=False)
    store.add(
        AnimeEntry(id=20, title="Naruto", episodes=220, cover_image="/anime-covers/naruto-20.webp"),
        front=False,
    )
    store.add(AnimeEntry(id=21, title="One Piece", episodes=0, cover_image=""), front=False)
    store.set_orders({"favorites": [21, 1, 20]})
    await store.flush()
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
def anime_service(
    store: JsonRecordStore, metadata_client: AsyncMock, cover_service: MagicMock
) -> AnimeListService:
    return AnimeListService(store, metadata_client, cover_service, "/anime-covers")


class TestAddByTitle:
    async def test_adds_entry_at_top(
        self, anime_service: AnimeListService, store: JsonRecordStore, metadata_client: AsyncMock
    ) -> None:
        metadata_client.lookup.return_value = ExternalRecord(
            mal_id=30,
            title="Neon Genesis Evangelion",
            image_urls=("https://cdn.myanimelist.net/images/anime/1314/108941.webp",),
            type="TV",
            episodes=26,
        )

        entry = await anime_service.add_by_title("evangelion")

        assert entry.id == 30
        assert entry.title == "Neon Genesis Evangelion"
        assert entry.status == PLAN_TO_WATCH
        assert entry.watched_episodes == 0
        assert entry.score == 0
        assert entry.start_date == UNKNOWN_DATE
        assert entry.cover_image == "https://cdn.myanimelist.net/images/anime/1314/108941.webp"
        assert store.get_all()[0].id == 30
        on_disk = json.loads(store.path.read_text())
        assert on_disk["animeList"][0]["id"] == 30

    async def test_no_match(self, anime_service: AnimeListService) -> None:
        with pytest.raises(EntityNotFoundException):
            await anime_service.add_by_title("Xyzzyxnonexistent12345")

    async def test_duplicate(
        self, anime_service: AnimeListService, metadata_client: AsyncMock
    ) -> None:
        metadata_client.lookup.return_value = ExternalRecord(mal_id=1, title="Cowboy Bebop")

        with pytest.raises(DuplicateEntityException) as exc_info:
            await anime_service.add_by_title("bebop")

        assert exc_info.value.message == '"Cowboy Bebop" already exists in your list.'

    async def test_empty_title(
        self, anime_service: AnimeListService, metadata_client: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError):
            await anime_service.add_by_title("")
        metadata_client.lookup.assert_not_awaited()


class TestDelete:
    async def test_delete_removes_from_orders(
        self, anime_service: AnimeListService, store: JsonRecordStore
    ) -> None:
        removed = await anime_service.delete(1)

        assert removed is not None
        assert store.get_by_id(1) is None
        assert store.get_orders() == {"favorites": [21, 20]}
        on_disk = json.loads(store.path.read_text())
        assert on_disk["animeOrders"] == {"favorites": [21, 20]}

    async def test_delete_is_idempotent(self, anime_service: AnimeListService) -> None:
        assert await anime_service.delete(999) is None


class TestUpdate:
    async def test_patch_fields(self, anime_service: AnimeListService) -> None:
        entry = await anime_service.update(1, {"watchedEpisodes": "10", "score": 8.5, "startDate": "2024-02-01"})

        assert entry.watched_episodes == 10
        assert entry.score == 8.5
        assert entry.start_date == "2024-02-01"
        assert entry.status == PLAN_TO_WATCH

    async def test_auto_completes(self, anime_service: AnimeListService) -> None:
        entry = await anime_service.update(1, {"watchedEpisodes": 26})

        assert entry.status == COMPLETED

    async def test_no_auto_complete_without_episode_count(self, anime_service: AnimeListService) -> None:
        entry = await anime_service.update(21, {"watchedEpisodes": 0})

        assert entry.status == PLAN_TO_WATCH

    @pytest.mark.parametrize("watched", [-1, 27, "abc", None])
    async def test_invalid_watched_episodes(self, anime_service: AnimeListService, watched) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await anime_service.update(1, {"watchedEpisodes": watched})

        assert exc_info.value.message == "Invalid number of watched episodes."

    async def test_unknown_episode_count_has_no_upper_bound(self, anime_service: AnimeListService) -> None:
        entry = await anime_service.update(21, {"watchedEpisodes": 1100})

        assert entry.watched_episodes == 1100

    @pytest.mark.parametrize("score", [-0.5, 11, "ten"])
    async def test_invalid_score(self, anime_service: AnimeListService, score) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await anime_service.update(1, {"score": score})

        assert exc_info.value.message == "Score must be between 0 and 10."

    async def test_episodes_are_coerced(self, anime_service: AnimeListService) -> None:
        entry = await anime_service.update(1, {"episodes": "24"})

        assert entry.episodes == 24

    @pytest.mark.parametrize("episodes", [12.5, "abc", -1, None, True])
    async def test_invalid_episodes_are_not_persisted(
        self, anime_service: AnimeListService, store: JsonRecordStore, episodes
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await anime_service.update(1, {"episodes": episodes})

        assert exc_info.value.message == "Invalid number of episodes."
        assert store.get_by_id(1).episodes == 26

    @pytest.mark.parametrize("key", ["title", "type", "status", "startDate", "finishDate"])
    async def test_text_fields_must_be_strings(
        self, anime_service: AnimeListService, store: JsonRecordStore, key: str
    ) -> None:
        before = store.get_by_id(1).to_dict()

        with pytest.raises(ValidationError):
            await anime_service.update(1, {key: 5})

        assert store.get_by_id(1).to_dict() == before

    async def test_cover_image_must_be_a_string(self, anime_service: AnimeListService) -> None:
        with pytest.raises(ValidationError):
            await anime_service.update(1, {"coverImage": ["a.jpg"]})

    async def test_infinite_watched_episodes_are_rejected(self, anime_service: AnimeListService) -> None:
        with pytest.raises(ValidationError):
            await anime_service.update(21, {"watchedEpisodes": float("inf")})

    async def test_id_cannot_be_changed(self, anime_service: AnimeListService, store: JsonRecordStore) -> None:
        entry = await anime_service.update(1, {"id": 999, "status": "Watching"})

        assert entry.id == 1
        assert store.get_by_id(1).status == "Watching"

    async def test_unknown_id(self, anime_service: AnimeListService) -> None:
        with pytest.raises(EntityNotFoundException):
            await anime_service.update(999, {"score": 5})


class TestResolveCoverFor:
    async def test_existing_local_cover_short_circuits(
        self, anime_service: AnimeListService, cover_service: MagicMock
    ) -> None:
        resolution = await anime_service.resolve_cover_for(20)

        assert resolution.cover_image == "/anime-covers/naruto-20.webp"
        cover_service.resolve.assert_not_awaited()

    async def test_resolves_and_persists(
        self, anime_service: AnimeListService, cover_service: MagicMock, store: JsonRecordStore
    ) -> None:
        cover_service.resolve.return_value = CoverResolution(
            cover_image="/anime-covers/cowboy_bebop-1.jpg", downloaded=True
        )

        resolution = await anime_service.resolve_cover_for(1, "Cowboy Bebop")

        assert resolution.found
        cover_service.resolve.assert_awaited_once_with("Cowboy Bebop", known_id=1)
        on_disk = json.loads(store.path.read_text())
        bebop = next(e for e in on_disk["animeList"] if e["id"] == 1)
        assert bebop["coverImage"] == "/anime-covers/cowboy_bebop-1.jpg"

    async def test_not_found_leaves_entry_unchanged(
        self, anime_service: AnimeListService, cover_service: MagicMock, store: JsonRecordStore
    ) -> None:
        cover_service.resolve.return_value = CoverResolution.not_found("One Piece")

        resolution = await anime_service.resolve_cover_for(21)

        assert resolution.cover_image is None
        assert store.get_by_id(21).cover_image == ""

    async def test_unknown_id(self, anime_service: AnimeListService) -> None:
        with pytest.raises(EntityNotFoundException):
            await anime_service.resolve_cover_for(999, "Nope")

    async def test_entries_missing_cover(self, anime_service: AnimeListService) -> None:
        assert [e.id for e in anime_service.entries_missing_cover()] == [1, 21]
