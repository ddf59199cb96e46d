"""
Data Transfer Objects for the metadata gateway.

Hey future me - ExternalRecord is what JikanClient hands out. It's a transient snapshot
of ONE Jikan search hit, never stored as-is. Only derived fields (mal_id, chosen image URL)
end up on disk (cover filename) or in db.json (new entries).
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExternalRecord:
    """Normalized best match from the metadata API."""

    mal_id: int
    title: str
    # Ranked by preference: webp (lighter) first, jpg second
    image_urls: tuple[str, ...] = field(default_factory=tuple)
    type: str | None = None
    episodes: int | None = None

    @property
    def preferred_image_url(self) -> str | None:
        """Best image URL, or None if the record has no image at all."""
        return self.image_urls[0] if self.image_urls else None


@dataclass(frozen=True)
class CoverResolution:
    """Outcome of one cover resolution.

    cover_image=None means "no cover available" - NOT an error. Render the entry
    without an image. Real failures are raised as exceptions instead.
    """

    cover_image: str | None
    message: str | None = None
    downloaded: bool = False

    @property
    def found(self) -> bool:
        return self.cover_image is not None

    @classmethod
    def not_found(cls, title: str) -> "CoverResolution":
        return cls(cover_image=None, message=f"No image found for {title}")


__all__ = ["CoverResolution", "ExternalRecord"]
