"""Cover Asset Cache - local persistence of downloaded cover images.

Future me note:
This is the ONLY writer of the covers directory. Nothing else creates,
renames or overwrites files in there.

What this does:
1. probe() - cheap offline pre-check: any file for this title key?
2. probe_exact() - authoritative check for the exact <key>-<mal_id><ext> file
3. store() - download from the CDN once, write atomically, return served path

What this does NOT do:
- ❌ Talk to Jikan → JikanClient (throttled)
- ❌ Decide WHICH url to download → CoverResolutionService
- ❌ Delete files → only happens when the owning entry is removed by hand

Race policy:
Filenames are a pure function of (title, mal_id, ext), so two resolutions of the
same anime converge on the same filename. Writes go to a temp file + os.replace,
so a write-write race is last-writer-wins with identical bytes and nobody ever
reads a half-written image. The per-filename lock below only exists to avoid the
duplicate DOWNLOAD, it's not needed for correctness.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx

from animelog.domain.exceptions import DownloadError, StorageError
from animelog.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Awaitable[httpx.AsyncClient]]

_TEMP_SUFFIX = ".part"


class AssetCache:
    """Key-addressed local cache of cover images."""

    def __init__(
        self,
        cache_dir: Path | str,
        url_prefix: str = "/anime-covers",
        client_factory: ClientFactory | None = None,
    ) -> None:
        """
        Args:
            cache_dir: Directory the covers are written to
            url_prefix: Prefix of the returned paths (where cache_dir is served)
            client_factory: Returns the httpx client for downloads
                (default: shared HttpClientPool - downloads are NOT throttled)
        """
        self.cache_dir = Path(cache_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self._client_factory = client_factory or HttpClientPool.get_client
        self._directory_ready = False
        # filename -> lock + number of store() calls currently holding/awaiting it
        self._inflight: dict[str, asyncio.Lock] = {}
        self._inflight_users: dict[str, int] = {}

    def served_path(self, filename: str) -> str:
        """Path recorded in db.json / returned to the UI for a cached file."""
        return f"{self.url_prefix}/{filename}"

    async def ensure_directory(self) -> None:
        """Create the cache directory (recursive, idempotent, once per instance)."""
        if self._directory_ready:
            return
        try:
            await asyncio.to_thread(self.cache_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Could not create cover directory %s: %s", self.cache_dir, e)
            raise StorageError(
                f"Could not create image directory: {e}", path=self.cache_dir
            ) from e
        self._directory_ready = True
        logger.debug("Ensured cover directory exists: %s", self.cache_dir)

    # Hey future me - we match "<key>-" and not just "<key>"! With a bare startswith,
    # "naruto" would happily return "naruto_shippuden-1735.jpg". Keys only contain
    # [a-z0-9_], so the "-" is an unambiguous boundary.
    async def probe(self, key: str, known_id: int | None = None) -> str | None:
        """Find any cached file for a title key, without network.

        Args:
            key: Canonical title key (make_cover_key)
            known_id: mal_id if the caller already knows it (preferred match)

        Returns:
            Served path of the first matching file, or None
        """
        await self.ensure_directory()
        try:
            names = sorted(await asyncio.to_thread(os.listdir, self.cache_dir))
        except OSError as e:
            # Not fatal - we just lose the offline shortcut and go to Jikan
            logger.warning("Listing cover directory %s failed: %s", self.cache_dir, e)
            return None

        prefix = f"{key}-"
        candidates = [
            name
            for name in names
            if name.startswith(prefix) and not name.endswith(_TEMP_SUFFIX)
        ]
        if not candidates:
            return None

        if known_id is not None:
            preferred = f"{key}-{known_id}."
            for name in candidates:
                if name.startswith(preferred):
                    return self.served_path(name)

        return self.served_path(candidates[0])

    async def probe_exact(self, filename: str) -> str | None:
        """Check whether exactly this file is cached."""
        exists = await asyncio.to_thread((self.cache_dir / filename).is_file)
        return self.served_path(filename) if exists else None

    async def store(self, filename: str, url: str) -> str:
        """Download url and persist it as filename (once).

        Returns:
            Served path of the stored file

        Raises:
            DownloadError: Asset host answered non-2xx or was unreachable
            StorageError: Writing the file failed
        """
        await self.ensure_directory()

        lock = self._inflight.setdefault(filename, asyncio.Lock())
        self._inflight_users[filename] = self._inflight_users.get(filename, 0) + 1
        try:
            async with lock:
                # Someone else may have finished this exact file while we waited
                existing = await self.probe_exact(filename)
                if existing is not None:
                    logger.debug("Cover %s already stored, skipping download", filename)
                    return existing

                logger.info("Downloading image from: %s", url)
                data = await self._download(url)
                await self._write(filename, data)
        finally:
            self._inflight_users[filename] -= 1
            if self._inflight_users[filename] == 0:
                del self._inflight_users[filename]
                del self._inflight[filename]

        path = self.served_path(filename)
        logger.info("Saved image locally: %s (%d bytes)", path, len(data))
        return path

    async def _download(self, url: str) -> bytes:
        client = await self._client_factory()
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise DownloadError(url, None, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise DownloadError(url, response.status_code)
        return response.content

    async def _write(self, filename: str, data: bytes) -> None:
        target = self.cache_dir / filename
        temp = self.cache_dir / f".{filename}.{uuid.uuid4().hex}{_TEMP_SUFFIX}"

        def _write_sync() -> None:
            try:
                temp.write_bytes(data)
                os.replace(temp, target)
            except OSError:
                temp.unlink(missing_ok=True)
                raise

        try:
            await asyncio.to_thread(_write_sync)
        except OSError as e:
            logger.error("Writing cover %s failed: %s", target, e)
            raise StorageError(f"Could not write image file: {e}", path=target) from e
