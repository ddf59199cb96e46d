"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager that wires the
record store, the Jikan throttle/client, the cover cache and the backfill
worker onto app.state.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI

from animelog.application.services import (
    AnimeListService,
    AssetCache,
    CoverResolutionService,
    MalImportService,
)
from animelog.application.workers import CoverBackfillWorker
from animelog.config import Settings, get_settings
from animelog.infrastructure.integrations import HttpClientPool, JikanClient
from animelog.infrastructure.observability import configure_logging
from animelog.infrastructure.persistence import JsonRecordStore
from animelog.infrastructure.rate_limiter import get_jikan_throttle

logger = logging.getLogger(__name__)


# Listen future me, @asynccontextmanager makes this a CONTEXT MANAGER for FastAPI lifespan!
# Everything before `yield` runs at STARTUP, everything after runs at SHUTDOWN. The try/finally
# ensures cleanup ALWAYS runs even if startup fails halfway. Everything routes need goes on
# app.state - api/dependencies.py reads it back from there.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Logging configuration
    - Loading db.json (created empty if missing)
    - Jikan throttle + client, cover cache and services
    - Cover backfill worker startup
    - Resource cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    jikan_client: JikanClient | None = None
    backfill_worker: CoverBackfillWorker | None = None

    try:
        record_store = JsonRecordStore(settings.storage.database_file)
        await record_store.load()
        app.state.record_store = record_store
        logger.info("Record store loaded: %s", settings.storage.database_file)

        # Hey future me - ONE throttle per process. Cover lookups AND add-by-title both go
        # through this instance, that's the whole point.
        throttle = get_jikan_throttle(settings.jikan.min_interval_seconds)
        app.state.jikan_throttle = throttle

        jikan_client = JikanClient(settings=settings.jikan, throttle=throttle)
        app.state.jikan_client = jikan_client

        # CDN downloads share the pooled client, configured with the Jikan timeout and User-Agent
        asset_cache = AssetCache(
            cache_dir=settings.storage.covers_dir,
            url_prefix=settings.storage.covers_url_prefix,
            client_factory=partial(
                HttpClientPool.get_client,
                timeout=settings.jikan.timeout_seconds,
                user_agent=settings.jikan.user_agent,
            ),
        )
        await asset_cache.ensure_directory()
        app.state.asset_cache = asset_cache

        cover_service = CoverResolutionService(
            metadata_client=jikan_client, asset_cache=asset_cache
        )
        app.state.cover_service = cover_service

        anime_service = AnimeListService(
            store=record_store,
            metadata_client=jikan_client,
            cover_service=cover_service,
            local_cover_prefix=settings.storage.covers_url_prefix,
        )
        app.state.anime_service = anime_service
        app.state.import_service = MalImportService(record_store)

        if settings.backfill.enabled:
            backfill_worker = CoverBackfillWorker(
                anime_service=anime_service,
                startup_delay_seconds=settings.backfill.startup_delay_seconds,
                interval_seconds=settings.backfill.interval_seconds,
            )
            await backfill_worker.start()
        else:
            logger.info("Cover backfill disabled via settings")
        app.state.backfill_worker = backfill_worker

        yield

    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        if backfill_worker is not None:
            try:
                await backfill_worker.stop()
            except Exception as e:
                logger.exception("Error stopping cover backfill worker: %s", e)

        if jikan_client is not None:
            try:
                await jikan_client.close()
                logger.info("Jikan client closed")
            except Exception as e:
                logger.exception("Error closing Jikan client: %s", e)

        try:
            await HttpClientPool.close()
            logger.info("HTTP client pool closed")
        except Exception as e:
            logger.exception("Error closing HTTP client pool: %s", e)
