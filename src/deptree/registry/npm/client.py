"""NPM registry client: cached packument lookups for tree resolution."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Dict, Optional

import aiohttp

from ...common.http_client import create_session, get_json
from ...common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from ...constants import Constants
from ...versioning.cache import MetadataCache, TTLCache
from .models import Packument
from .names import encode_package_name

logger = logging.getLogger(__name__)

_default_cache: Optional[TTLCache[Packument]] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> TTLCache[Packument]:
    """Return the process-wide packument cache, creating it on first use."""
    global _default_cache  # pylint: disable=global-statement
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = TTLCache()
        return _default_cache


class PackumentFetcher:
    """Fetch packuments by name with stale-while-revalidate caching.

    ``get_packument`` never raises: a missing package, a registry outage or a
    malformed document all come back as ``None``.
    """

    def __init__(
        self,
        cache: Optional[MetadataCache[Packument]] = None,
        *,
        registry_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the fetcher.

        Args:
            cache: Packument cache; defaults to the process-wide cache.
            registry_url: Registry base URL; defaults to Constants.REGISTRY_URL_NPM.
            session: Externally owned client session. When omitted the
                fetcher creates one on demand and closes it in ``close()``.
            timeout: Per-request timeout in seconds.
        """
        self._cache = cache if cache is not None else get_default_cache()
        self._registry_url = (registry_url or Constants.REGISTRY_URL_NPM).rstrip("/") + "/"
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._refreshing: Dict[str, asyncio.Task] = {}

    @property
    def cache(self) -> MetadataCache[Packument]:
        return self._cache

    def packument_url(self, name: str) -> str:
        """Registry URL for ``name``, with scoped names kept in one path segment."""
        return f"{self._registry_url}{encode_package_name(name)}"

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = create_session(self._timeout)
            self._owns_session = True

    async def close(self) -> None:
        """Let outstanding refreshes finish, then close an owned session.

        Refreshes still running after one request timeout are cancelled.
        """
        pending = [task for task in self._refreshing.values() if not task.done()]
        if pending:
            _, overrun = await asyncio.wait(pending, timeout=self._timeout or Constants.REQUEST_TIMEOUT)
            for task in overrun:
                task.cancel()
            if overrun:
                logger.debug("Cancelled %d packument refreshes on close", len(overrun))
                await asyncio.gather(*overrun, return_exceptions=True)
        self._refreshing.clear()

        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "PackumentFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_packument(self, name: str) -> Optional[Packument]:
        """Return the packument for ``name`` or None.

        Fresh cache hits are returned directly. Stale hits are returned
        immediately and refreshed in the background. Misses are fetched.
        """
        entry = self._cache.get(name)
        if entry is not None:
            if self._cache.is_fresh(entry):
                return entry.value
            self._schedule_refresh(name)
            return entry.value

        packument = await self._fetch(name)
        if packument is not None:
            self._cache.set(name, packument)
        return packument

    def _schedule_refresh(self, name: str) -> None:
        """Start one background refresh for ``name`` unless one is running."""
        running = self._refreshing.get(name)
        if running is not None and not running.done():
            return
        if is_debug_enabled(logger):
            logger.debug(
                "Serving stale packument; refreshing",
                extra=extra_context(
                    event="cache_stale", component="packument_fetcher", action="refresh", package=name
                ),
            )
        task = asyncio.create_task(self._refresh(name))
        self._refreshing[name] = task
        task.add_done_callback(lambda t, key=name: self._refresh_done(key, t))

    def _refresh_done(self, name: str, task: asyncio.Task) -> None:
        if self._refreshing.get(name) is task:
            del self._refreshing[name]

    async def _refresh(self, name: str) -> None:
        packument = await self._fetch(name)
        # A failed refresh keeps serving the stale value.
        if packument is not None:
            self._cache.set(name, packument)

    async def _fetch(self, name: str) -> Optional[Packument]:
        """Fetch and parse one packument; every failure maps to None."""
        url = self.packument_url(name)
        headers = {"Accept": Constants.NPM_ACCEPT_HEADER}
        try:
            await self.start()
            assert self._session is not None
            with Timer() as timer:
                status_code, _, data = await get_json(self._session, url, headers=headers)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning(
                "Failed to fetch packument for %s",
                name,
                exc_info=True,
                extra=extra_context(
                    event="http_error", outcome="exception", target=safe_url(url), package_manager="npm"
                ),
            )
            return None

        if status_code == 404:
            logger.debug(
                "Package not found: %s",
                name,
                extra=extra_context(
                    event="http_response", outcome="not_found", status_code=404,
                    target=safe_url(url), package_manager="npm"
                ),
            )
            return None
        if status_code != 200:
            logger.warning(
                "Failed to fetch packument for %s (status %s)",
                name,
                status_code,
                extra=extra_context(
                    event="http_response", outcome="handled_non_2xx", status_code=status_code,
                    duration_ms=timer.duration_ms(), target=safe_url(url), package_manager="npm"
                ),
            )
            return None

        packument = Packument.from_json(name, data)
        if packument is None:
            logger.warning("Couldn't decode packument for %s, assuming package missing.", name)
            return None

        if is_debug_enabled(logger):
            logger.debug(
                "Fetched packument",
                extra=extra_context(
                    event="http_response", outcome="success", status_code=status_code,
                    duration_ms=timer.duration_ms(), package=name,
                    version_count=len(packument.versions), package_manager="npm"
                ),
            )
        return packument
