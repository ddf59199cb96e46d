"""Domain entities."""

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

PLAN_TO_WATCH = "Plan to Watch"
COMPLETED = "Completed"
UNKNOWN_DATE = "0000-00-00"

AnimeOrders = dict[str, list[int]]


# Hey future me - db.json uses camelCase keys (the frontend reads it straight from /api/db).
# Python side is snake_case. _FIELD_MAP is the ONLY place where both worlds meet, don't
# sprinkle "watchedEpisodes" strings around the codebase!
@dataclass
class AnimeEntry:
    """One tracked anime in the user's list."""

    id: int
    title: str
    type: str = "Unknown"
    episodes: int = 0
    watched_episodes: int = 0
    status: str = PLAN_TO_WATCH
    score: float = 0
    start_date: str = UNKNOWN_DATE
    finish_date: str = UNKNOWN_DATE
    cover_image: str | None = None
    # Unknown keys from db.json survive a load/save round trip
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    _FIELD_MAP: ClassVar[dict[str, str]] = {
        "id": "id",
        "title": "title",
        "type": "type",
        "episodes": "episodes",
        "watchedEpisodes": "watched_episodes",
        "status": "status",
        "score": "score",
        "startDate": "start_date",
        "finishDate": "finish_date",
        "coverImage": "cover_image",
    }

    @classmethod
    def attribute_for(cls, key: str) -> str | None:
        """Map a db.json key (or an attribute name) to the attribute name."""
        if key in cls._FIELD_MAP:
            return cls._FIELD_MAP[key]
        if key in cls._FIELD_MAP.values():
            return key
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnimeEntry":
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            attr = cls._FIELD_MAP.get(key)
            if attr is None:
                extra[key] = value
            else:
                kwargs[attr] = value
        return cls(**kwargs, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        values = asdict(self)
        values.pop("extra")
        data = {key: values[attr] for key, attr in self._FIELD_MAP.items()}
        if data["coverImage"] is None:
            data.pop("coverImage")
        data.update(self.extra)
        return data

    def has_local_cover(self, local_prefix: str) -> bool:
        """True if cover_image already points into our cover directory."""
        return bool(self.cover_image) and self.cover_image.startswith(
            local_prefix.rstrip("/") + "/"
        )


__all__ = [
    "COMPLETED",
    "PLAN_TO_WATCH",
    "UNKNOWN_DATE",
    "AnimeEntry",
    "AnimeOrders",
]
