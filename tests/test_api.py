# -*- coding: utf-8 -*-
import os

import pytest
from fastapi.testclient import TestClient

from texadmin.app import create_app
from texadmin.errors import FetchError
from texadmin.metadata_client import LocalMetadataClient
from texadmin.metadata_store import MetadataStore
from texadmin.settings import TexAdminSettings


def _settings(texture_dir, metadata_path, tmp_path, **kw):
    return TexAdminSettings(
        texture_dir=texture_dir,
        metadata_path=metadata_path,
        cache_dir=tmp_path / "cache",
        dev_mode=kw.pop("dev_mode", True),
        **kw,
    )


@pytest.fixture
def api(texture_dir, metadata_path, tmp_path):
    app = create_app(_settings(texture_dir, metadata_path, tmp_path))
    with TestClient(app) as c:
        yield c


def test_healthz(api):
    assert api.get("/healthz").json() == {"ok": True, "dev_mode": True}


def test_texture_data_read(api):
    body = api.get("/api/texture-data").json()
    assert body["textures"]["a"] == {"name": "Sword", "category": "Weapons"}
    assert body["categories"] == ["Weapons", "Armor", "Misc", "Empty"]


def test_texture_data_write(api):
    r = api.post("/api/texture-data", json={"textureId": "b", "name": "Buckler", "category": "Armor"})
    assert r.status_code == 200
    assert api.get("/api/texture-data").json()["textures"]["b"]["name"] == "Buckler"


def test_texture_data_write_validation(api):
    assert api.post("/api/texture-data", json={"textureId": "b", "name": " ", "category": "Armor"}).status_code == 400
    assert api.post("/api/texture-data", json={"textureId": "nope", "name": "x", "category": "y"}).status_code == 404
    assert api.post("/api/texture-data", json={"name": "x"}).status_code == 422


def test_create_empty_category(api):
    r = api.post("/api/texture-data/categories", json={"category": "Relics"})
    assert r.json()["created"] is True
    assert "Relics" in api.get("/api/texture-data").json()["categories"]
    assert api.post("/api/texture-data/categories", json={"category": ""}).status_code == 400


def test_admin_view_filters_and_pages(api):
    body = api.get("/api/admin/view", params={"q": "shi"}).json()
    assert [it["id"] for it in body["items"]] == ["b"]
    assert body["totalPages"] == 1
    assert body["total"] == 3
    assert body["cache"]["label"] == "fast cache"

    body = api.get("/api/admin/view", params={"category": "Weapons"}).json()
    assert [it["id"] for it in body["items"]] == ["a"]

    body = api.get("/api/admin/view", params={"q": "zzz", "page": 3}).json()
    assert body["items"] == [] and body["page"] == 1


def test_admin_edit_roundtrip(api):
    r = api.post("/api/admin/textures/a", json={"name": "Longsword", "category": "Weapons"})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["item"]["name"] == "Longsword"
    assert api.get("/api/admin/view", params={"q": "longsword"}).json()["items"][0]["id"] == "a"
    notices = api.get("/api/admin/notices").json()["notices"]
    assert notices == [{"type": "success", "message": "Saved"}]
    assert api.get("/api/admin/notices").json()["notices"] == []


def test_admin_edit_validation(api):
    r = api.post("/api/admin/textures/a", json={"name": "", "category": "Weapons"})
    assert r.status_code == 422
    assert r.json()["validation_failed"] is True
    assert api.post("/api/admin/textures/nope", json={"name": "x", "category": "y"}).status_code == 404


def test_admin_cache_clear_and_status(api):
    status = api.get("/api/admin/cache").json()
    assert status["catalog"]["hasFastTierCache"] is True
    body = api.post("/api/admin/cache/clear").json()
    assert body["ok"] is True
    assert body["catalog"]["hasFastTierCache"] is True
    assert set(body["caches"]) == {"catalog", "metadata", "categories"}


def test_admin_reload(api):
    body = api.post("/api/admin/reload").json()
    assert body == {"ok": True, "total": 3, "error": None}


def test_admin_page_and_thumbnails(api):
    html = api.get("/admin").text
    assert "TexAdmin" in html
    assert '<option value="">Choose a category</option>' in html
    assert 'id="retryEdit"' in html
    assert "repeat(8, minmax(0, 1fr))" in html
    r = api.get("/textures/weapons/axe.png")
    assert r.status_code == 200
    assert r.content == b"\x89PNG axe"
    assert api.get("/textures/notes.txt").status_code == 404


def test_dev_gate_closed(texture_dir, metadata_path, tmp_path):
    app = create_app(_settings(texture_dir, metadata_path, tmp_path, dev_mode=False))
    with TestClient(app) as c:
        assert "Access restricted" in c.get("/admin").text
        assert c.get("/api/admin/view").status_code == 403
        assert c.post("/api/admin/cache/clear").status_code == 403
        assert c.get("/api/texture-data").status_code == 200
    assert app.state.session is None
    assert not (tmp_path / "cache").exists()


class _RejectingSaves:
    def __init__(self, inner):
        self.inner = inner

    def fetch(self):
        return self.inner.fetch()

    def save(self, texture_id, name, category):
        raise FetchError("texture data write failed: HTTP 500", status_code=500)


def test_admin_edit_failure_can_be_retried(texture_dir, metadata_path, tmp_path):
    client = _RejectingSaves(LocalMetadataClient(MetadataStore(metadata_path)))
    app = create_app(_settings(texture_dir, metadata_path, tmp_path), metadata_client=client)
    with TestClient(app) as c:
        assert c.post("/api/admin/edit/retry").status_code == 404

        r = c.post("/api/admin/textures/a", json={"name": "Longsword", "category": "Weapons"})
        assert r.status_code == 502
        assert r.json()["item"]["name"] == "Sword"

        body = c.post("/api/admin/edit/retry").json()
        assert body["item"]["id"] == "a"
        assert body["draft"]["name"] == "Longsword"
        assert body["draft"]["category"] == "Weapons"


def test_unreadable_store_answers_503(api, metadata_path):
    before = metadata_path.stat().st_mtime_ns
    metadata_path.write_text("{not json", encoding="utf-8")
    os.utime(metadata_path, ns=(before + 10**9, before + 10**9))

    assert api.get("/api/texture-data").status_code == 503
    r = api.post("/api/texture-data", json={"textureId": "b", "name": "Buckler", "category": "Armor"})
    assert r.status_code == 503
    assert metadata_path.read_text(encoding="utf-8") == "{not json"

    body = api.post("/api/admin/reload").json()
    assert body["ok"] is False
    assert body["total"] == 3
