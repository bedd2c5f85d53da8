# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from .errors import FetchError, ValidationError
from .metadata_store import MetadataStore
from .session import AdminSession
from .texture_source import TextureSource
from .view import ALL_CATEGORIES

logger = logging.getLogger(__name__)


def get_store(request: Request) -> MetadataStore:
    """Resolve the texture-data store from app state."""
    store: MetadataStore = request.app.state.metadata_store  # type: ignore[attr-defined]
    return store


def get_source(request: Request) -> TextureSource:
    return request.app.state.texture_source  # type: ignore[attr-defined]


def get_session(request: Request) -> AdminSession:
    """Admin session; 403 when the development-mode gate is closed."""
    if not bool(getattr(request.app.state, "dev_mode", False)):
        raise HTTPException(status_code=403, detail="admin is only available in development mode")
    return request.app.state.session  # type: ignore[attr-defined]


def _json(data: Dict[str, Any], *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=data, status_code=status_code, headers={"Cache-Control": "no-store"})


router = APIRouter(prefix="/api")


class TextureDataWrite(BaseModel):
    textureId: str = Field(..., min_length=1)
    name: str = ""
    category: str = ""


class CategoryCreate(BaseModel):
    category: str = ""


class TextureEdit(BaseModel):
    name: str = ""
    category: str = ""
    new_category: bool = False


# ----------------- texture data (metadata store) -----------------


@router.get("/texture-data")
def texture_data(store: MetadataStore = Depends(get_store)):
    try:
        return _json(store.snapshot())
    except FetchError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=503, detail="texture data unreadable")


@router.post("/texture-data")
def texture_data_write(
    req: TextureDataWrite,
    request: Request,
    store: MetadataStore = Depends(get_store),
):
    source: Optional[TextureSource] = getattr(request.app.state, "texture_source", None)
    if source is not None and bool(getattr(request.app.state, "validate_ids", True)):
        try:
            known = set(source.ids())
        except (FetchError, OSError) as e:
            logger.error("Texture enumeration failed: %s", e)
            raise HTTPException(status_code=503, detail="texture enumeration failed")
        if req.textureId not in known:
            raise HTTPException(status_code=404, detail=f"Texture not found: {req.textureId}")
    try:
        row = store.set_texture(req.textureId, req.name, req.category)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=503, detail="texture data unreadable")
    return _json({"ok": True, "textureId": req.textureId, **row})


@router.post("/texture-data/categories")
def texture_category_create(req: CategoryCreate, store: MetadataStore = Depends(get_store)):
    try:
        created = store.add_category(req.category)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=503, detail="texture data unreadable")
    return _json({"ok": True, "created": created, "categories": store.categories()})


# ----------------- admin page -----------------


@router.get("/admin/view")
def admin_view(
    session: AdminSession = Depends(get_session),
    q: str = Query(""),
    category: str = Query(ALL_CATEGORIES),
    page: int = Query(1, ge=1),
):
    session.set_search(q)
    session.set_category(category)
    session.set_page(page)
    view = session.view()
    snap = session.synchronizer.snapshot
    out = view.to_dict()
    out.update(
        {
            "q": session.state.search_term,
            "category": session.state.selected_category,
            "categories": snap.categories,
            "total": len(snap.items),
            "cache": session.synchronizer.cache_info.to_public_dict(),
        }
    )
    return _json(out)


@router.post("/admin/reload")
def admin_reload(session: AdminSession = Depends(get_session)):
    ok = session.reload()
    return _json({"ok": ok, "total": len(session.synchronizer.snapshot.items), "error": session.synchronizer.last_error})


@router.get("/admin/cache")
def admin_cache(session: AdminSession = Depends(get_session)):
    return _json(session.cache_status())


@router.post("/admin/cache/clear")
def admin_cache_clear(session: AdminSession = Depends(get_session)):
    ok = session.clear_cache()
    return _json({"ok": ok, **session.cache_status()})


@router.post("/admin/textures/{texture_id}")
def admin_texture_edit(texture_id: str, req: TextureEdit, session: AdminSession = Depends(get_session)):
    try:
        result = session.edit(texture_id, req.name, req.category, new_category=bool(req.new_category))
    except ValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    notices = [n.to_dict() for n in session.notifier.peek()]
    if result is None:
        return _json({"ok": False, "validation_failed": True, "notices": notices}, status_code=422)
    item = session.synchronizer.snapshot.get(texture_id)
    body = {
        "ok": result.ok,
        "textureId": texture_id,
        "name": result.name,
        "category": result.category,
        "reloaded": result.reloaded,
        "item": item.to_dict() if item else None,
        "notices": notices,
    }
    return _json(body, status_code=200 if result.ok else 502)


@router.post("/admin/edit/retry")
def admin_edit_retry(session: AdminSession = Depends(get_session)):
    draft = session.retry_edit()
    if draft is None:
        raise HTTPException(status_code=404, detail="no failed edit to retry")
    item = session.synchronizer.snapshot.get(draft.texture_id)
    return _json({"draft": draft.to_dict(), "item": item.to_dict() if item else None})


@router.get("/admin/notices")
def admin_notices(session: AdminSession = Depends(get_session)):
    return _json({"notices": [n.to_dict() for n in session.notifier.drain()]})


# ----------------- thumbnails -----------------


def texture_file(rel_path: str, source: TextureSource = Depends(get_source)):
    """Serve one texture thumbnail (route registered under the configured prefix)."""
    p = source.resolve(rel_path)
    if p is None:
        raise HTTPException(status_code=404, detail=f"Texture not found: {rel_path}")
    return FileResponse(path=str(p))
