# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse

from .api import router as api_router
from .api import texture_file
from .metadata_client import HttpMetadataClient, LocalMetadataClient
from .metadata_store import MetadataStore
from .session import AdminSession
from .settings import TexAdminSettings
from .texture_source import TextureSource
from .ui import render_admin_html, render_restricted_html

logger = logging.getLogger(__name__)


def create_app(settings: TexAdminSettings, *, metadata_client: Optional[Any] = None, load_on_startup: bool = True) -> FastAPI:
    """FastAPI app factory.

    The development-mode gate is evaluated once here: with dev_mode off the
    admin page renders a placeholder and the admin API answers 403, while the
    texture-data endpoints stay available.
    """

    rp = TexAdminSettings.normalize_root_path(settings.root_path)

    app = FastAPI(
        title="TexAdmin API",
        version="1.0",
        root_path=rp,
        docs_url="/docs",
        redoc_url=None,
    )

    # state
    app.state.settings = settings
    app.state.dev_mode = bool(settings.dev_mode)
    app.state.metadata_store = MetadataStore(settings.metadata_path)
    app.state.texture_source = TextureSource(settings.texture_dir)

    client = metadata_client
    if client is None:
        if settings.metadata_url:
            client = HttpMetadataClient(settings.metadata_url, timeout=settings.metadata_timeout)
        else:
            client = LocalMetadataClient(app.state.metadata_store)
    app.state.metadata_client = client

    app.state.session = None
    if app.state.dev_mode:
        app.state.session = AdminSession(
            app.state.texture_source,
            client,
            settings.cache_dir,
            image_prefix=settings.static_url_prefix,
            page_size=settings.page_size,
        )
        if load_on_startup:
            app.state.session.mount()
    else:
        logger.info("Development mode is off; admin page disabled")

    # middleware
    if settings.gzip_minimum_size and settings.gzip_minimum_size > 0:
        app.add_middleware(GZipMiddleware, minimum_size=int(settings.gzip_minimum_size))

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # routes
    app.include_router(api_router)
    app.add_api_route(
        settings.static_url_prefix.rstrip("/") + "/{rel_path:path}",
        texture_file,
        methods=["GET"],
        name="texture-file",
    )

    @app.on_event("shutdown")
    def _shutdown() -> None:
        close = getattr(app.state.metadata_client, "close", None)
        if callable(close):
            close()

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "dev_mode": bool(app.state.dev_mode)}

    @app.get("/admin", response_class=HTMLResponse)
    def admin(request: Request):
        if not app.state.dev_mode:
            return HTMLResponse(render_restricted_html())
        # root_path is already applied by FastAPI; still need it for frontend URL prefixing
        root = request.scope.get("root_path") or ""
        return HTMLResponse(render_admin_html(app_root=str(root)))

    return app
