#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Run TexAdmin server (FastAPI + Uvicorn).

Usage:
  python3 devtools/serve_texadmin.py --dev --host 0.0.0.0 --port 20001 --no-open
"""

from __future__ import annotations

import argparse
import logging
import socket
import sys
import webbrowser
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
for p in (PROJECT_ROOT / "apps",):
    if str(p) not in sys.path:
        sys.path.append(str(p))

import uvicorn  # type: ignore
from rich.console import Console

from texadmin.app import create_app  # type: ignore
from texadmin.config import DEFAULT_CONFIG_PATH, resolve_settings  # type: ignore

console = Console()


def _detect_lan_ip() -> str:
    """Best-effort LAN IP discovery (no external network required)."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        # doesn't need to be reachable; used to pick outbound interface
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


def main() -> None:
    parser = argparse.ArgumentParser(description="TexAdmin texture catalog admin (FastAPI) server.")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    parser.add_argument("--textures", default="", help="Texture directory (overrides config)")
    parser.add_argument("--metadata", default="", help="texture_data.json path (overrides config)")
    parser.add_argument("--cache-dir", default="", help="Durable cache directory (overrides config)")
    parser.add_argument("--metadata-url", default="", help="Remote texture-data endpoint base URL")
    parser.add_argument("--dev", action="store_true", help="Enable the admin page (development mode)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--root-path", default="", help="Reverse proxy mount path, e.g. /texadmin")
    parser.add_argument("--no-open", action="store_true", help="Do not open browser")
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug", "trace"])
    parser.add_argument("--cors-allow-origin", action="append", default=[], help="CORS allow origin (repeatable)")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.log_level in ("debug", "trace") else getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = resolve_settings(
        config_path=Path(args.config),
        texture_dir=args.textures or None,
        metadata_path=args.metadata or None,
        cache_dir=args.cache_dir or None,
        dev_mode=True if args.dev else None,
        metadata_url=args.metadata_url or None,
        root_path=args.root_path,
    )
    if not settings.texture_dir.is_dir():
        console.print(f"[red]Texture directory not found: {settings.texture_dir}[/red]")
        sys.exit(2)

    settings = replace(settings, cors_allow_origins=(args.cors_allow_origin or None))
    app = create_app(settings)

    host = str(args.host)
    port = int(args.port)

    rp = settings.root_path
    if host == "0.0.0.0":
        open_url = f"http://{_detect_lan_ip()}:{port}{rp}/admin"
        console.print(f"Open (local): http://127.0.0.1:{port}{rp}/admin")
    else:
        open_url = f"http://{host}:{port}{rp}/admin"
    console.print(f"[bold]TexAdmin[/bold]: {open_url}")
    console.print(f"Textures: {settings.texture_dir}")
    console.print(f"Texture data: {settings.metadata_url or settings.metadata_path}")
    if not settings.dev_mode:
        console.print("[yellow]Development mode is off: the admin page is disabled (use --dev).[/yellow]")

    if not args.no_open:
        try:
            webbrowser.open(open_url)
        except webbrowser.Error:
            pass

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=args.log_level,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
