# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import FetchError, ValidationError

logger = logging.getLogger(__name__)


def _dedup_preserve_order(items: List[str]) -> List[str]:
    out: List[str] = []
    seen = set()
    for x in items:
        if not x or x in seen:
            continue
        out.append(x)
        seen.add(x)
    return out


def normalize_doc(doc: Any) -> Dict[str, Any]:
    """Coerce a raw texture-data document into {textures, categories}.

    Every category a record uses ends up in the category list; labels that
    were missing are appended after the listed ones, in record order.
    """
    textures: Dict[str, Dict[str, str]] = {}
    categories: List[str] = []
    if isinstance(doc, dict):
        raw = doc.get("textures")
        if isinstance(raw, dict):
            for tid, row in raw.items():
                if not tid or not isinstance(row, dict):
                    continue
                textures[str(tid)] = {
                    "name": str(row.get("name") or ""),
                    "category": str(row.get("category") or ""),
                }
        cats = doc.get("categories")
        if isinstance(cats, list):
            categories = [str(c).strip() for c in cats if isinstance(c, str)]
    categories.extend(row["category"].strip() for row in textures.values())
    return {"textures": textures, "categories": _dedup_preserve_order(categories)}


class MetadataStore:
    """Authoritative name/category overrides + category set (thread-safe).

    Backed by one JSON file:
      {"textures": {id: {"name": ..., "category": ...}}, "categories": [...]}

    A file that cannot be read or parsed raises FetchError on every access
    and blocks writes until it is fixed; the last good document is kept.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.RLock()
        self._mtime: float = -1.0
        self._doc: Dict[str, Any] = normalize_doc(None)
        try:
            self.load(force=True)
        except FetchError as e:
            logger.error("%s", e)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> bool:
        """Load the file if changed. Returns True if reload occurred."""
        with self._lock:
            if not self._path.exists():
                self._doc = normalize_doc(None)
                self._mtime = -1.0
                return False
            try:
                mtime = self._path.stat().st_mtime
                if (not force) and self._mtime == mtime:
                    return False
                doc = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                self._mtime = -1.0
                raise FetchError(f"Unreadable texture data {self._path}: {e}") from e
            if not isinstance(doc, dict):
                self._mtime = -1.0
                raise FetchError(f"Unreadable texture data {self._path}: top level is not an object")
            self._doc = normalize_doc(doc)
            self._mtime = mtime
            return True

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            self.load(force=False)
            return {
                "textures": {k: dict(v) for k, v in self._doc["textures"].items()},
                "categories": list(self._doc["categories"]),
            }

    def categories(self) -> List[str]:
        with self._lock:
            return list(self._doc["categories"])

    def get(self, texture_id: str) -> Optional[Dict[str, str]]:
        with self._lock:
            row = self._doc["textures"].get(texture_id)
            return dict(row) if row else None

    def set_texture(self, texture_id: str, name: str, category: str) -> Dict[str, str]:
        tid = (texture_id or "").strip()
        nm = (name or "").strip()
        cat = (category or "").strip()
        if not tid or not nm or not cat:
            raise ValidationError("textureId, name and category are required")
        with self._lock:
            self.load(force=False)
            self._doc["textures"][tid] = {"name": nm, "category": cat}
            if cat not in self._doc["categories"]:
                self._doc["categories"].append(cat)
            self._save()
            logger.info("Saved texture %s -> %r / %r", tid, nm, cat)
            return {"name": nm, "category": cat}

    def add_category(self, category: str) -> bool:
        """Create an (initially empty) category. Returns False if it existed."""
        cat = (category or "").strip()
        if not cat:
            raise ValidationError("category is required")
        with self._lock:
            self.load(force=False)
            if cat in self._doc["categories"]:
                return False
            self._doc["categories"].append(cat)
            self._save()
            return True

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._doc, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        self._mtime = self._path.stat().st_mtime
