"""Value objects."""

from animelog.domain.value_objects.cover_key import (
    DEFAULT_EXTENSION,
    cover_filename,
    infer_extension,
    make_cover_key,
)

__all__ = [
    "DEFAULT_EXTENSION",
    "cover_filename",
    "infer_extension",
    "make_cover_key",
]
