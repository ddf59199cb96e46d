"""Cover cache naming rules.

Hey future me - these functions decide the on-disk filename of every cover.
They MUST stay deterministic: same (title, mal_id, extension) -> same filename,
forever. Change the rules and every cached cover becomes invisible to probe()
and gets downloaded again.
"""

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse

DEFAULT_EXTENSION = ".jpg"

_NON_ALNUM = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)


# Listen up, this is lossy ON PURPOSE. "One Piece" and "One-Piece" both become
# "one_piece". Uniqueness comes from the mal_id suffix once Jikan told us who it is.
# One "_" per replaced character, no collapsing ("A  B" -> "a__b").
def make_cover_key(title: str) -> str:
    """Derive the canonical cache key for a title."""
    return _NON_ALNUM.sub("_", title).lower()


def infer_extension(url: str) -> str:
    """Lowercase file extension of a URL's path, ``.jpg`` if it has none."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    return suffix or DEFAULT_EXTENSION


def cover_filename(key: str, mal_id: int, extension: str) -> str:
    """Build the exact cache filename: ``<key>-<mal_id><ext>``."""
    return f"{key}-{mal_id}{extension}"
