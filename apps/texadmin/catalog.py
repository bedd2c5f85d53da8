# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import FetchError
from .metadata_client import MetadataSnapshot
from .texture_source import TextureFile, TextureSource
from .tiered_cache import CacheSet, TieredCache

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "uncategorized"


@dataclass(frozen=True)
class CatalogItem:
    id: str
    file_name: str
    image_path: str
    code: str
    name: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "imagePath": self.image_path,
            "txCode": self.code,
            "name": self.name,
            "category": self.category,
        }

    @staticmethod
    def from_dict(row: Dict[str, Any]) -> "CatalogItem":
        return CatalogItem(
            id=str(row["id"]),
            file_name=str(row.get("fileName") or ""),
            image_path=str(row.get("imagePath") or ""),
            code=str(row.get("txCode") or ""),
            name=str(row.get("name") or ""),
            category=str(row.get("category") or DEFAULT_CATEGORY),
        )


def encode_items(items: Sequence[CatalogItem]) -> List[Dict[str, Any]]:
    return [it.to_dict() for it in items]


def decode_items(raw: Any) -> List[CatalogItem]:
    if not isinstance(raw, list):
        raise ValueError("catalog cache entry is not a list")
    return [CatalogItem.from_dict(r) for r in raw]


def merge_catalog(
    files: Sequence[TextureFile],
    textures: Dict[str, Dict[str, str]],
    *,
    image_prefix: str = "/textures",
) -> List[CatalogItem]:
    """One CatalogItem per file; overrides resolved by id, defaults otherwise.

    Override keys with no matching file are ignored.
    """
    prefix = (image_prefix or "").rstrip("/")
    out: List[CatalogItem] = []
    for f in files:
        row = textures.get(f.id) or {}
        out.append(
            CatalogItem(
                id=f.id,
                file_name=f.file_name,
                image_path=f"{prefix}/{f.rel_path}",
                code=f.code,
                name=(row.get("name") or "").strip() or f.stem,
                category=(row.get("category") or "").strip() or DEFAULT_CATEGORY,
            )
        )
    return out


CacheWriter = Callable[[TieredCache, Any], bool]


def _write_always(cache: TieredCache, value: Any) -> bool:
    cache.write(value)
    return True


class CatalogLoader:
    """Read-through access to the merged catalog and its auxiliary caches.

    Every cache fill goes through ``write``; a synchronizer passes a writer
    that refuses once its load has been superseded.
    """

    def __init__(self, source: TextureSource, client: Any, caches: CacheSet, *, image_prefix: str = "/textures"):
        self.source = source
        self.client = client
        self.caches = caches
        self.image_prefix = image_prefix

    def _fetch_into_caches(self, write: CacheWriter) -> MetadataSnapshot:
        snap: MetadataSnapshot = self.client.fetch()
        write(self.caches.metadata, snap.textures)
        write(self.caches.categories, snap.categories)
        return snap

    def metadata(self, write: CacheWriter = _write_always) -> Dict[str, Dict[str, str]]:
        cached = self.caches.metadata.read()
        if cached is not None:
            return cached
        return self._fetch_into_caches(write).textures

    def categories(self, write: CacheWriter = _write_always) -> List[str]:
        cached = self.caches.categories.read()
        if cached is not None:
            return cached
        return self._fetch_into_caches(write).categories

    def items(self, write: CacheWriter = _write_always) -> List[CatalogItem]:
        cached: Optional[List[CatalogItem]] = self.caches.catalog.read()
        if cached is not None:
            return cached
        files = self.source.enumerate()
        textures = self.metadata(write)
        if not isinstance(textures, dict):
            raise FetchError("metadata cache holds a non-mapping value")
        items = merge_catalog(files, textures, image_prefix=self.image_prefix)
        if write(self.caches.catalog, items):
            logger.info("Merged catalog: %d textures (%d overrides)", len(items), len(textures))
        return items
