# -*- coding: utf-8 -*-
"""Catalog synchronizer: (forced) reload of the merged catalog + metadata.

load(force_refresh) steps:
  1. forced -> clear all three caches
  2. merged catalog via CatalogLoader (cache hit or enumerate + merge + write)
  3. texture data fetched directly from the Metadata Store (not via the merge path)
  4. publish a CatalogSnapshot and refresh cache diagnostics

A failure in 2 or 3 is logged and the previously published snapshot stays.
Overlapping loads: only the most recently issued one may fill caches or publish.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

import httpx

from .catalog import CatalogItem, CatalogLoader
from .errors import FetchError
from .metadata_client import MetadataSnapshot
from .tiered_cache import CacheInfo, TieredCache, now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    items: List[CatalogItem] = field(default_factory=list)
    metadata: MetadataSnapshot = field(default_factory=MetadataSnapshot)
    loaded_at: Optional[int] = None

    @property
    def categories(self) -> List[str]:
        return list(self.metadata.categories)

    def get(self, texture_id: str) -> Optional[CatalogItem]:
        for it in self.items:
            if it.id == texture_id:
                return it
        return None


class CatalogSynchronizer:
    def __init__(self, loader: CatalogLoader):
        self.loader = loader
        self._lock = threading.RLock()
        self._snapshot = CatalogSnapshot()
        self._cache_info: CacheInfo = loader.caches.catalog.info()
        self._generation = 0
        self._inflight: Set[str] = set()
        self.last_error: Optional[str] = None

    @property
    def snapshot(self) -> CatalogSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def cache_info(self) -> CacheInfo:
        with self._lock:
            return self._cache_info

    def refresh_cache_info(self) -> CacheInfo:
        info = self.loader.caches.catalog.info()
        with self._lock:
            self._cache_info = info
        return info

    def clear_caches(self) -> None:
        # in-flight loads lose their right to refill what is cleared here
        with self._lock:
            self._generation += 1
            self.loader.caches.clear_all()
        self.refresh_cache_info()

    def _writer(self, ticket: int, trigger: str) -> Callable[[TieredCache, Any], bool]:
        def write(cache: TieredCache, value: Any) -> bool:
            with self._lock:
                if ticket != self._generation:
                    logger.debug("Superseded load #%d (%s) skipped a cache write", ticket, trigger)
                    return False
                cache.write(value)
                return True

        return write

    def load(self, force_refresh: bool = False, *, trigger: str = "mount") -> bool:
        """Reload and publish. Returns True if a new snapshot was published.

        Only the most recently issued load may write caches or publish.
        """
        with self._lock:
            if trigger in self._inflight:
                logger.debug("load(%s) already in flight; skipped", trigger)
                return False
            self._inflight.add(trigger)
            self._generation += 1
            ticket = self._generation
            if force_refresh:
                self.loader.caches.clear_all()

        try:
            try:
                items = self.loader.items(self._writer(ticket, trigger))
                meta = self.loader.client.fetch()
            except (FetchError, OSError, httpx.HTTPError) as e:
                logger.error("Catalog load failed (%s): %s", trigger, e)
                with self._lock:
                    self.last_error = str(e)
                self.refresh_cache_info()
                return False

            with self._lock:
                if ticket != self._generation:
                    logger.info("Discarding superseded load #%d (%s)", ticket, trigger)
                    return False
                self._snapshot = CatalogSnapshot(items=list(items), metadata=meta, loaded_at=now_ms())
                self.last_error = None
            self.refresh_cache_info()
            logger.info("Published catalog (%s): %d textures, %d categories", trigger, len(items), len(meta.categories))
            return True
        finally:
            with self._lock:
                self._inflight.discard(trigger)

    def diagnostics(self) -> Dict[str, Dict]:
        out = {k: v.to_public_dict() for k, v in self.loader.caches.info().items()}
        return out
