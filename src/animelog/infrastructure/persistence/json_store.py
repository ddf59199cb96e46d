# Hey future me - this is the whole "database": one JSON file, fully loaded into RAM.
#
# Layout of db.json (the frontend reads it 1:1 through GET /api/db, keep camelCase!):
#   {"animeList": [{...entry...}, ...], "animeOrders": {"<name>": [id, id, ...]}}
#
# Reads are plain in-memory lookups. Mutations change RAM and are persisted by flush(),
# which writes a temp file and os.replace()s it - a crash mid-write never leaves a
# truncated db.json behind. flush() is serialized by a lock so two concurrent PUTs can't
# interleave their writes.
"""Flat-file record store for the anime list and custom orderings."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from animelog.domain.entities import AnimeEntry, AnimeOrders
from animelog.domain.exceptions import EntityNotFoundException, StorageError, ValidationError
from animelog.domain.ports import IRecordStore

logger = logging.getLogger(__name__)


def _empty_data() -> dict[str, Any]:
    return {"animeList": [], "animeOrders": {}}


class JsonRecordStore(IRecordStore):
    """Anime list + orderings persisted as one JSON document."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._entries: list[AnimeEntry] = []
        self._orders: AnimeOrders = {}
        self._loaded = False
        self._write_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """Read db.json, creating it (and its directory) if missing.

        Raises:
            StorageError: Directory can't be created or the file is unreadable/corrupt
        """
        try:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create database directory: {e}", path=self.path.parent
            ) from e

        exists = await asyncio.to_thread(self.path.exists)
        if not exists:
            logger.info("Database file %s missing - initializing empty structure", self.path)
            self._entries, self._orders = [], {}
            self._loaded = True
            await self.flush()
            return

        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            data = json.loads(raw) if raw.strip() else _empty_data()
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read database file %s: %s", self.path, e)
            raise StorageError(f"Could not initialize database: {e}", path=self.path) from e

        self._entries = [AnimeEntry.from_dict(item) for item in data.get("animeList") or []]
        self._orders = {
            name: [int(i) for i in ids] for name, ids in (data.get("animeOrders") or {}).items()
        }
        self._loaded = True
        logger.info("Database loaded: %d entries, %d orderings", len(self._entries), len(self._orders))

    # === Reads ===

    def get_all(self) -> list[AnimeEntry]:
        return list(self._entries)

    def get_by_id(self, entry_id: int) -> AnimeEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def get_orders(self) -> AnimeOrders:
        return {name: list(ids) for name, ids in self._orders.items()}

    # === Mutations (in memory, call flush() to persist) ===

    def add(self, entry: AnimeEntry, front: bool = True) -> None:
        if front:
            self._entries.insert(0, entry)
        else:
            self._entries.append(entry)

    def replace(self, entry: AnimeEntry) -> None:
        for index, current in enumerate(self._entries):
            if current.id == entry.id:
                self._entries[index] = entry
                return
        raise EntityNotFoundException("Anime", entry.id)

    def replace_all(self, entries: list[AnimeEntry]) -> None:
        self._entries = list(entries)

    def update_field(self, entry_id: int, field: str, value: Any) -> AnimeEntry:
        """Set one field, addressed either by db.json key or attribute name."""
        entry = self.get_by_id(entry_id)
        if entry is None:
            raise EntityNotFoundException("Anime", entry_id)
        attr = AnimeEntry.attribute_for(field)
        if attr is None:
            raise ValidationError(f"Unknown field: {field}")
        setattr(entry, attr, value)
        return entry

    def delete(self, entry_id: int) -> AnimeEntry | None:
        """Remove an entry and scrub its id from every custom ordering."""
        entry = self.get_by_id(entry_id)
        if entry is None:
            return None
        self._entries = [e for e in self._entries if e.id != entry_id]
        for name, ids in self._orders.items():
            self._orders[name] = [i for i in ids if i != entry_id]
        return entry

    def set_orders(self, orders: AnimeOrders) -> None:
        self._orders = {name: [int(i) for i in ids] for name, ids in orders.items()}

    # === Persistence ===

    def to_dict(self) -> dict[str, Any]:
        return {
            "animeList": [entry.to_dict() for entry in self._entries],
            "animeOrders": self.get_orders(),
        }

    async def flush(self) -> None:
        """Write the current state to disk atomically."""
        async with self._write_lock:
            payload = json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
            temp = self.path.with_name(f".{self.path.name}.tmp")

            def _write_sync() -> None:
                temp.write_text(payload, encoding="utf-8")
                os.replace(temp, self.path)

            try:
                await asyncio.to_thread(_write_sync)
            except OSError as e:
                logger.error("Writing database file %s failed: %s", self.path, e)
                raise StorageError(f"Could not write database: {e}", path=self.path) from e
