"""Background workers."""

from animelog.application.workers.cover_backfill_worker import CoverBackfillWorker

__all__ = ["CoverBackfillWorker"]
