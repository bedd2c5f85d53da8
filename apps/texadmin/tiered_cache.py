# -*- coding: utf-8 -*-
"""Two-tier read-through caches (fast in-process tier + durable JSON tier).

read():
  - fast tier hit -> value
  - fast miss + durable hit -> value is promoted into the fast tier, then returned
  - both miss -> None

write() updates both tiers; clear() empties both. Entries never expire:
staleness is resolved only by explicit invalidation.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CATALOG_NAMESPACE = "texadmin.catalog"
METADATA_NAMESPACE = "texadmin.metadata"
CATEGORY_NAMESPACE = "texadmin.categories"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    last_updated: int

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "lastUpdated": int(self.last_updated)}

    @staticmethod
    def from_dict(doc: Any) -> Optional["CacheEntry"]:
        if not isinstance(doc, dict) or "value" not in doc:
            return None
        try:
            ts = int(doc.get("lastUpdated") or 0)
        except (TypeError, ValueError):
            ts = 0
        return CacheEntry(value=doc.get("value"), last_updated=ts)


@dataclass(frozen=True)
class CacheInfo:
    has_fast_tier: bool
    has_durable_tier: bool
    last_updated: Optional[int] = None

    @property
    def label(self) -> str:
        if self.has_fast_tier:
            return "fast cache"
        if self.has_durable_tier:
            return "durable cache"
        return "no cache"

    @property
    def updated_at(self) -> Optional[str]:
        if not self.last_updated:
            return None
        return datetime.fromtimestamp(self.last_updated / 1000.0).strftime("%H:%M:%S")

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "hasFastTierCache": self.has_fast_tier,
            "hasDurableTierCache": self.has_durable_tier,
            "lastUpdated": self.last_updated,
            "label": self.label,
            "updatedAt": self.updated_at,
        }


class MemoryTier:
    """Ephemeral tier; lost on process restart."""

    def __init__(self) -> None:
        self._entry: Optional[CacheEntry] = None

    def get(self) -> Optional[CacheEntry]:
        return self._entry

    def put(self, entry: CacheEntry) -> None:
        self._entry = entry

    def delete(self) -> None:
        self._entry = None


class JsonFileTier:
    """Durable tier: one JSON document per namespace under cache_dir."""

    def __init__(self, cache_dir: Path, namespace: str):
        self.namespace = namespace
        self._path = Path(cache_dir) / f"{namespace}.json"

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> Optional[CacheEntry]:
        if not self._path.exists():
            return None
        try:
            doc = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Unreadable cache file %s: %s", self._path, e)
            return None
        return CacheEntry.from_dict(doc)

    def put(self, entry: CacheEntry) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(entry.to_dict(), ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    def delete(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass


class TieredCache(Generic[T]):
    """Read-through cache over a fast tier and a durable tier (thread-safe).

    encode/decode convert between the in-process value and its JSON form for
    the durable tier (identity by default).
    """

    def __init__(
        self,
        fast: MemoryTier,
        durable: JsonFileTier,
        *,
        encode: Optional[Callable[[T], Any]] = None,
        decode: Optional[Callable[[Any], T]] = None,
    ):
        self._fast = fast
        self._durable = durable
        self._encode = encode or (lambda v: v)
        self._decode = decode or (lambda v: v)
        self._lock = threading.RLock()

    @property
    def namespace(self) -> str:
        return self._durable.namespace

    def read(self) -> Optional[T]:
        with self._lock:
            hit = self._fast.get()
            if hit is not None:
                return hit.value
            stored = self._durable.get()
            if stored is None:
                return None
            try:
                value = self._decode(stored.value)
            except (TypeError, ValueError, KeyError) as e:
                logger.warning("Discarding malformed %s cache entry: %s", self.namespace, e)
                return None
            # promotion
            self._fast.put(CacheEntry(value=value, last_updated=stored.last_updated))
            return value

    def write(self, value: T) -> None:
        with self._lock:
            ts = now_ms()
            self._durable.put(CacheEntry(value=self._encode(value), last_updated=ts))
            self._fast.put(CacheEntry(value=value, last_updated=ts))

    def clear(self) -> None:
        with self._lock:
            self._fast.delete()
            self._durable.delete()

    def info(self) -> CacheInfo:
        with self._lock:
            fast = self._fast.get()
            durable = self._durable.get()
            ts = None
            if fast is not None:
                ts = fast.last_updated
            elif durable is not None:
                ts = durable.last_updated
            return CacheInfo(has_fast_tier=fast is not None, has_durable_tier=durable is not None, last_updated=ts)


class CacheSet:
    """The catalog, metadata and category caches, always cleared together."""

    def __init__(self, catalog: TieredCache, metadata: TieredCache, categories: TieredCache):
        self.catalog = catalog
        self.metadata = metadata
        self.categories = categories

    @classmethod
    def open(
        cls,
        cache_dir: Path,
        *,
        encode_catalog: Optional[Callable[[Any], Any]] = None,
        decode_catalog: Optional[Callable[[Any], Any]] = None,
    ) -> "CacheSet":
        return cls(
            catalog=TieredCache(
                MemoryTier(),
                JsonFileTier(cache_dir, CATALOG_NAMESPACE),
                encode=encode_catalog,
                decode=decode_catalog,
            ),
            metadata=TieredCache(MemoryTier(), JsonFileTier(cache_dir, METADATA_NAMESPACE)),
            categories=TieredCache(MemoryTier(), JsonFileTier(cache_dir, CATEGORY_NAMESPACE)),
        )

    def clear_all(self) -> None:
        self.catalog.clear()
        self.metadata.clear()
        self.categories.clear()

    def info(self) -> Dict[str, CacheInfo]:
        return {
            "catalog": self.catalog.info(),
            "metadata": self.metadata.info(),
            "categories": self.categories.info(),
        }
