"""Import of MyAnimeList XML exports into the record store."""

import logging
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from animelog.domain.entities import PLAN_TO_WATCH, UNKNOWN_DATE, AnimeEntry
from animelog.domain.exceptions import ValidationError
from animelog.infrastructure.persistence.json_store import JsonRecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    added: int
    updated: int

    @property
    def message(self) -> str:
        return (
            f"Import successful! Added {self.added} new anime and "
            f"updated {self.updated} existing entries."
        )


def _text(node: ET.Element, tag: str) -> str | None:
    value = node.findtext(tag)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _int(node: ET.Element, tag: str) -> int:
    try:
        return int(_text(node, tag) or 0)
    except ValueError:
        return 0


# Hey future me - a MAL export is <myanimelist><myinfo/><anime>...</anime>...</myanimelist>.
# Titles come wrapped in CDATA, ElementTree unwraps that for us. Entries without a numeric
# series_animedb_id are skipped silently, same as MAL's own importer does.
def parse_mal_export(xml_text: str) -> list[AnimeEntry]:
    """Parse a MyAnimeList export into entries (without covers).

    Raises:
        ValidationError: Not well-formed XML
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValidationError(f"Failed to process XML file: {e}") from e

    entries: list[AnimeEntry] = []
    for node in root.iter("anime"):
        try:
            mal_id = int(_text(node, "series_animedb_id") or "")
        except ValueError:
            continue

        entries.append(
            AnimeEntry(
                id=mal_id,
                title=_text(node, "series_title") or "Unknown Title",
                type=_text(node, "series_type") or "Unknown",
                episodes=_int(node, "series_episodes"),
                watched_episodes=_int(node, "my_watched_episodes"),
                status=_text(node, "my_status") or PLAN_TO_WATCH,
                score=_int(node, "my_score"),
                start_date=_text(node, "my_start_date") or UNKNOWN_DATE,
                finish_date=_text(node, "my_finish_date") or UNKNOWN_DATE,
                cover_image="",
            )
        )
    return entries


class MalImportService:
    """Merge a MAL export into the list: known ids are updated, new ones appended."""

    def __init__(self, store: JsonRecordStore) -> None:
        self.store = store

    async def import_xml(self, xml_text: str) -> ImportResult:
        """
        Raises:
            ValidationError: Empty body, malformed XML or no usable entries
        """
        if not xml_text or not xml_text.strip():
            raise ValidationError("XML file content is empty.")

        imported = parse_mal_export(xml_text)
        if not imported:
            raise ValidationError("No valid anime entries found in the XML file.")

        added = updated = 0
        for entry in imported:
            existing = self.store.get_by_id(entry.id)
            if existing is None:
                self.store.add(entry, front=False)
                added += 1
                continue

            # The export knows nothing about covers - keep whatever we already resolved
            entry.cover_image = existing.cover_image
            entry.extra = {**existing.extra, **entry.extra}
            self.store.replace(entry)
            updated += 1

        await self.store.flush()

        result = ImportResult(added=added, updated=updated)
        logger.info(result.message)
        return result
