"""Persistence layer (flat-file JSON store)."""

from animelog.infrastructure.persistence.json_store import JsonRecordStore

__all__ = ["JsonRecordStore"]
