"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Any

from animelog.domain.dtos import ExternalRecord
from animelog.domain.entities import AnimeEntry, AnimeOrders


class IMetadataLookupClient(ABC):
    """Port for the metadata API (Jikan) client."""

    @abstractmethod
    async def lookup(self, title: str) -> ExternalRecord | None:
        """
        Resolve a free-text title to the best-matching external record.

        Args:
            title: Title as typed by the user

        Returns:
            Best match, or None if the API has no match
        """
        pass


class IRecordStore(ABC):
    """Port for the flat-file record store."""

    @abstractmethod
    def get_all(self) -> list[AnimeEntry]:
        pass

    @abstractmethod
    def get_by_id(self, entry_id: int) -> AnimeEntry | None:
        pass

    @abstractmethod
    def update_field(self, entry_id: int, field: str, value: Any) -> AnimeEntry:
        pass

    @abstractmethod
    def get_orders(self) -> AnimeOrders:
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Persist all pending changes."""
        pass


__all__ = ["IMetadataLookupClient", "IRecordStore"]
