# Hey future me - CoverBackfillWorker fills in missing covers automatically!
#
# It replaces the old "every card fetches its own cover on first render" behavior with
# one background pass shortly after startup (and optionally every N seconds after that).
#
# FAN-OUT: every entry without a local cover gets its own resolve() task, all at once.
# That's fine! Jikan lookups funnel through the ONE RequestThrottle and get serialized
# there (1/sec), cached covers short-circuit without any network, and CDN downloads run
# in parallel. No batching needed here.
#
# ISOLATION: one broken entry (429, dead CDN link, weird title) must NEVER abort the
# batch. Each task catches its own exceptions (DomainException or anything else),
# logs them and counts them as failed.
"""Cover Backfill Worker - automatically resolves missing cover images."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from typing import Any

from animelog.application.services.anime_service import AnimeListService
from animelog.domain.entities import AnimeEntry
from animelog.domain.exceptions import DomainException, UpstreamRateLimited

logger = logging.getLogger(__name__)


class CoverBackfillWorker:
    """Background worker that resolves covers for entries without a local one."""

    def __init__(
        self,
        anime_service: AnimeListService,
        startup_delay_seconds: float = 5.0,
        interval_seconds: float = 0.0,
    ) -> None:
        """Initialize cover backfill worker.

        Args:
            anime_service: Service doing the per-entry resolve + persist
            startup_delay_seconds: Wait before the first pass (let startup settle)
            interval_seconds: Repeat interval, 0 = run once
        """
        self.anime_service = anime_service
        self.startup_delay_seconds = startup_delay_seconds
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None
        self._last_run_at: datetime | None = None
        self._last_run_stats: dict[str, Any] | None = None

    async def start(self) -> None:
        """Start the worker loop in the background."""
        if self._running:
            logger.warning("CoverBackfillWorker is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "🖼️ CoverBackfillWorker started (delay: %.0fs, interval: %.0fs)",
            self.startup_delay_seconds,
            self.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the worker."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("CoverBackfillWorker stopped")

    def get_status(self) -> dict[str, Any]:
        """Get worker status for the health endpoint."""
        return {
            "name": "Cover Backfill Worker",
            "running": self._running,
            "status": "active" if self._running else "stopped",
            "interval_seconds": self.interval_seconds,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "last_run_stats": self._last_run_stats,
        }

    async def _run_loop(self) -> None:
        await asyncio.sleep(self.startup_delay_seconds)

        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                # run_once isolates per-entry failures; this is for store-level blowups
                logger.exception("Cover backfill cycle failed")

            if self.interval_seconds <= 0:
                break
            await asyncio.sleep(self.interval_seconds)

        self._running = False

    async def run_once(self) -> dict[str, int]:
        """Resolve covers for every entry missing one.

        Returns:
            Stats dict: total, resolved, not_found, failed
        """
        missing = self.anime_service.entries_missing_cover()
        stats = {"total": len(missing), "resolved": 0, "not_found": 0, "failed": 0}
        if not missing:
            logger.debug("Cover backfill: nothing to do")
            self._record(stats)
            return stats

        logger.info("Cover backfill: resolving %d entries", len(missing))
        outcomes = await asyncio.gather(*(self._resolve_one(entry) for entry in missing))
        for outcome in outcomes:
            stats[outcome] += 1

        self._record(stats)
        logger.info(
            "Cover backfill done: %d resolved, %d without cover, %d failed",
            stats["resolved"],
            stats["not_found"],
            stats["failed"],
        )
        return stats

    async def _resolve_one(self, entry: AnimeEntry) -> str:
        try:
            resolution = await self.anime_service.resolve_cover_for(entry.id, entry.title)
        except UpstreamRateLimited as e:
            logger.warning("Jikan rate limited cover lookup for %r: %s", entry.title, e.message)
            return "failed"
        except DomainException as e:
            logger.warning("Cover backfill failed for %r: %s", entry.title, e.message)
            return "failed"
        except Exception:
            logger.exception("Unexpected error backfilling cover for %r", entry.title)
            return "failed"
        return "resolved" if resolution.found else "not_found"

    def _record(self, stats: dict[str, int]) -> None:
        self._last_run_at = datetime.now(UTC)
        self._last_run_stats = dict(stats)
