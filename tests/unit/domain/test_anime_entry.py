"""Tests for AnimeEntry and the metadata DTOs."""

from animelog.domain.dtos import CoverResolution, ExternalRecord
from animelog.domain.entities import PLAN_TO_WATCH, UNKNOWN_DATE, AnimeEntry


class TestAnimeEntrySerialization:
    """Test camelCase <-> snake_case mapping of db.json entries."""

    def test_from_dict_maps_camel_case_keys(self) -> None:
        entry = AnimeEntry.from_dict(
            {
                "id": 1,
                "title": "Cowboy Bebop",
                "watchedEpisodes": 3,
                "startDate": "2024-01-01",
                "coverImage": "/anime-covers/cowboy_bebop-1.jpg",
            }
        )

        assert entry.watched_episodes == 3
        assert entry.start_date == "2024-01-01"
        assert entry.finish_date == UNKNOWN_DATE
        assert entry.status == PLAN_TO_WATCH
        assert entry.cover_image == "/anime-covers/cowboy_bebop-1.jpg"

    def test_unknown_keys_survive_round_trip(self) -> None:
        data = {"id": 1, "title": "Cowboy Bebop", "notes": "rewatch", "rewatchCount": 2}

        entry = AnimeEntry.from_dict(data)
        result = entry.to_dict()

        assert entry.extra == {"notes": "rewatch", "rewatchCount": 2}
        assert result["notes"] == "rewatch"
        assert result["rewatchCount"] == 2

    def test_to_dict_omits_missing_cover(self) -> None:
        entry = AnimeEntry(id=1, title="Cowboy Bebop")

        assert "coverImage" not in entry.to_dict()

    def test_to_dict_keeps_empty_cover(self) -> None:
        """"" means "never had a cover" and is written as-is."""
        entry = AnimeEntry(id=1, title="Cowboy Bebop", cover_image="")

        assert entry.to_dict()["coverImage"] == ""

    def test_attribute_for(self) -> None:
        assert AnimeEntry.attribute_for("coverImage") == "cover_image"
        assert AnimeEntry.attribute_for("cover_image") == "cover_image"
        assert AnimeEntry.attribute_for("bogus") is None


class TestHasLocalCover:
    def test_local_path(self) -> None:
        entry = AnimeEntry(id=1, title="X", cover_image="/anime-covers/x-1.jpg")
        assert entry.has_local_cover("/anime-covers") is True

    def test_remote_url(self) -> None:
        entry = AnimeEntry(id=1, title="X", cover_image="https://cdn.myanimelist.net/x.jpg")
        assert entry.has_local_cover("/anime-covers") is False

    def test_empty_or_missing(self) -> None:
        assert AnimeEntry(id=1, title="X", cover_image="").has_local_cover("/anime-covers") is False
        assert AnimeEntry(id=1, title="X").has_local_cover("/anime-covers") is False

    def test_prefix_needs_path_boundary(self) -> None:
        entry = AnimeEntry(id=1, title="X", cover_image="/anime-covers-old/x-1.jpg")
        assert entry.has_local_cover("/anime-covers/") is False


class TestExternalRecord:
    def test_preferred_image_url_is_first(self) -> None:
        record = ExternalRecord(mal_id=1, title="X", image_urls=("a.webp", "a.jpg"))
        assert record.preferred_image_url == "a.webp"

    def test_no_images(self) -> None:
        assert ExternalRecord(mal_id=1, title="X").preferred_image_url is None


class TestCoverResolution:
    def test_not_found(self) -> None:
        resolution = CoverResolution.not_found("Cowboy Bebop")

        assert resolution.cover_image is None
        assert resolution.found is False
        assert resolution.message == "No image found for Cowboy Bebop"
