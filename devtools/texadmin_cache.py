#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Inspect / clear TexAdmin caches and run a one-shot catalog load.

Usage:
  python3 devtools/texadmin_cache.py status
  python3 devtools/texadmin_cache.py clear
  python3 devtools/texadmin_cache.py load [--force]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
for p in (PROJECT_ROOT / "apps",):
    if str(p) not in sys.path:
        sys.path.append(str(p))

from rich.console import Console
from rich.table import Table

from texadmin.config import DEFAULT_CONFIG_PATH, resolve_settings  # type: ignore
from texadmin.metadata_client import HttpMetadataClient, LocalMetadataClient  # type: ignore
from texadmin.metadata_store import MetadataStore  # type: ignore
from texadmin.session import AdminSession  # type: ignore
from texadmin.texture_source import TextureSource  # type: ignore

console = Console()


def _status_table(session: AdminSession) -> Table:
    table = Table(title="TexAdmin caches", border_style="blue")
    table.add_column("Cache", style="cyan")
    table.add_column("Fast tier")
    table.add_column("Durable tier")
    table.add_column("Updated", style="dim")
    for name, info in session.caches.info().items():
        table.add_row(
            name,
            "[green]yes[/green]" if info.has_fast_tier else "-",
            "[green]yes[/green]" if info.has_durable_tier else "-",
            info.updated_at or "-",
        )
    return table


def main() -> int:
    parser = argparse.ArgumentParser(description="TexAdmin cache tool.")
    parser.add_argument("command", choices=["status", "clear", "load"])
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    parser.add_argument("--force", action="store_true", help="load: clear caches first")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = resolve_settings(config_path=Path(args.config))
    if settings.metadata_url:
        client = HttpMetadataClient(settings.metadata_url, timeout=settings.metadata_timeout)
    else:
        client = LocalMetadataClient(MetadataStore(settings.metadata_path))
    session = AdminSession(
        TextureSource(settings.texture_dir),
        client,
        settings.cache_dir,
        image_prefix=settings.static_url_prefix,
        page_size=settings.page_size,
    )

    if args.command == "clear":
        session.synchronizer.clear_caches()
        console.print("[green]Caches cleared[/green]")
    elif args.command == "load":
        ok = session.synchronizer.load(force_refresh=bool(args.force), trigger="cli")
        if not ok:
            console.print(f"[red]Load failed: {session.synchronizer.last_error}[/red]")
            return 1
        snap = session.synchronizer.snapshot
        console.print(f"Loaded [bold]{len(snap.items)}[/bold] textures, {len(snap.categories)} categories")

    console.print(_status_table(session))
    return 0


if __name__ == "__main__":
    sys.exit(main())
