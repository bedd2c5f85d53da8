# -*- coding: utf-8 -*-
"""TexAdmin config loader: explicit args > TEXADMIN_* env > conf/settings.ini > defaults."""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path
from typing import Optional

from .settings import TexAdminSettings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "conf" / "settings.ini"
SECTION = "TEXADMIN"

_TRUE = {"1", "true", "yes", "on", "development", "dev"}


def _expand(val: Optional[str]) -> Optional[str]:
    if not val:
        return None
    return os.path.expanduser(val.strip())


def _cfg_get(cfg: configparser.ConfigParser, key: str) -> Optional[str]:
    val = cfg.get(SECTION, key, fallback="").strip()
    return val or None


def _pick(explicit: Optional[str], cfg: configparser.ConfigParser, key: str) -> Optional[str]:
    if explicit:
        return explicit
    env = os.environ.get(f"TEXADMIN_{key.upper()}")
    if env:
        return env
    return _cfg_get(cfg, key)


def _abs(val: str) -> Path:
    p = Path(val)
    return p if p.is_absolute() else PROJECT_ROOT / p


def parse_bool(val: Optional[str]) -> bool:
    return str(val or "").strip().lower() in _TRUE


def load_ini(path: Path) -> configparser.ConfigParser:
    cfg = configparser.ConfigParser()
    if path.exists():
        cfg.read(path, encoding="utf-8")
    else:
        logger.debug("No config file at %s; using env/defaults", path)
    return cfg


def resolve_settings(
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    texture_dir: Optional[str] = None,
    metadata_path: Optional[str] = None,
    cache_dir: Optional[str] = None,
    dev_mode: Optional[bool] = None,
    metadata_url: Optional[str] = None,
    root_path: str = "",
) -> TexAdminSettings:
    cfg = load_ini(Path(config_path))

    texture_dir = _expand(_pick(texture_dir, cfg, "texture_dir")) or str(PROJECT_ROOT / "data" / "textures")
    metadata_path = _expand(_pick(metadata_path, cfg, "metadata_path")) or str(PROJECT_ROOT / "data" / "texture_data.json")
    cache_dir = _expand(_pick(cache_dir, cfg, "cache_dir")) or str(PROJECT_ROOT / "data" / "cache")
    metadata_url = _pick(metadata_url, cfg, "metadata_url")

    if dev_mode is None:
        dev_mode = parse_bool(_pick(None, cfg, "dev_mode"))

    page_size_raw = _pick(None, cfg, "page_size") or "60"
    try:
        page_size = max(1, int(page_size_raw))
    except ValueError:
        raise SystemExit(f"page_size must be an integer, got {page_size_raw!r}")

    timeout_raw = _pick(None, cfg, "metadata_timeout")
    try:
        timeout = float(timeout_raw) if timeout_raw else None
    except ValueError:
        raise SystemExit(f"metadata_timeout must be a number, got {timeout_raw!r}")

    prefix = _pick(None, cfg, "static_url_prefix") or "/textures"

    return TexAdminSettings(
        texture_dir=_abs(texture_dir),
        metadata_path=_abs(metadata_path),
        cache_dir=_abs(cache_dir),
        dev_mode=bool(dev_mode),
        page_size=page_size,
        metadata_url=metadata_url,
        metadata_timeout=timeout,
        static_url_prefix="/" + prefix.strip("/"),
        root_path=TexAdminSettings.normalize_root_path(root_path),
    )
