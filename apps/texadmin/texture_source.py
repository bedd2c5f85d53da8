# -*- coding: utf-8 -*-
from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .errors import FetchError

logger = logging.getLogger(__name__)

TEXTURE_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp", ".gif")

_ID_UNSAFE_RE = re.compile(r"[^a-z0-9_]+")


@dataclass(frozen=True)
class TextureFile:
    """One enumerated texture file.

    rel_path is the POSIX path relative to the texture root; it doubles as the
    thumbnail URL suffix.
    """

    rel_path: str
    id: str
    code: str

    @property
    def file_name(self) -> str:
        return self.rel_path.rsplit("/", 1)[-1]

    @property
    def stem(self) -> str:
        name = self.file_name
        return name.rsplit(".", 1)[0] if "." in name else name


def texture_id_for(rel_path: str) -> str:
    base = rel_path.rsplit(".", 1)[0] if "." in rel_path.rsplit("/", 1)[-1] else rel_path
    tid = _ID_UNSAFE_RE.sub("_", base.lower()).strip("_")
    return tid or "texture"


def texture_code_for(rel_path: str) -> str:
    digest = hashlib.sha1(rel_path.encode("utf-8")).hexdigest()
    return "TX" + digest[:6].upper()


def assign_ids(rel_paths: Iterable[str]) -> List[TextureFile]:
    """Build TextureFile rows with unique ids, in sorted path order.

    Colliding ids get the file suffix appended, then a counter.
    """
    out: List[TextureFile] = []
    taken: Dict[str, str] = {}
    for rel in sorted(set(rel_paths)):
        tid = texture_id_for(rel)
        if tid in taken:
            suffix = rel.rsplit(".", 1)[-1].lower() if "." in rel else "file"
            cand = f"{tid}_{suffix}"
            n = 2
            while cand in taken:
                cand = f"{tid}_{suffix}{n}"
                n += 1
            tid = cand
        taken[tid] = rel
        out.append(TextureFile(rel_path=rel, id=tid, code=texture_code_for(rel)))
    return out


class TextureSource:
    """Enumerate texture files under a directory (read-only collaborator)."""

    def __init__(self, root: Path, *, suffixes: Iterable[str] = TEXTURE_SUFFIXES):
        self._root = Path(root)
        self._suffixes = {s.lower() for s in suffixes}

    @property
    def root(self) -> Path:
        return self._root

    def enumerate(self) -> List[TextureFile]:
        if not self._root.is_dir():
            raise FetchError(f"Texture directory not found: {self._root}")
        rels: List[str] = []
        try:
            for fp in self._root.rglob("*"):
                if not fp.is_file():
                    continue
                if fp.suffix.lower() not in self._suffixes:
                    continue
                rels.append(fp.relative_to(self._root).as_posix())
        except OSError as e:
            raise FetchError(f"Cannot enumerate {self._root}: {e}") from e
        files = assign_ids(rels)
        logger.debug("Enumerated %d textures under %s", len(files), self._root)
        return files

    def ids(self) -> List[str]:
        return [f.id for f in self.enumerate()]

    def resolve(self, rel_path: str) -> Optional[Path]:
        """Map a thumbnail URL suffix back to a file inside the root (or None)."""
        rel = (rel_path or "").strip().lstrip("/")
        if not rel:
            return None
        root = self._root.resolve()
        p = (root / rel).resolve()
        try:
            p.relative_to(root)
        except ValueError:
            return None
        if p.suffix.lower() not in self._suffixes or not p.is_file():
            return None
        return p
