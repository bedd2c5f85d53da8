# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class TexAdminSettings:
    """Runtime settings for the TexAdmin server.

    Notes
    - metadata_path is the texture-data JSON owned by this server
      ({textures, categories}); metadata_url switches the admin page to a
      remote texture-data endpoint instead.
    - cache_dir holds the durable cache tier (one JSON file per cache).
    - dev_mode gates the whole admin page (checked once at startup).
    - root_path is for reverse-proxy mount (e.g. '/texadmin')
    """

    texture_dir: Path
    metadata_path: Path
    cache_dir: Path
    dev_mode: bool = False
    page_size: int = 60
    metadata_url: Optional[str] = None
    metadata_timeout: Optional[float] = None
    static_url_prefix: str = "/textures"
    root_path: str = ""
    cors_allow_origins: Optional[List[str]] = None
    gzip_minimum_size: int = 800

    @staticmethod
    def normalize_root_path(root_path: str) -> str:
        rp = (root_path or "").strip()
        if not rp:
            return ""
        if not rp.startswith("/"):
            rp = "/" + rp
        rp = rp.rstrip("/")
        return rp
