# -*- coding: utf-8 -*-
import json
import os

import httpx
import pytest

from texadmin.errors import FetchError, ValidationError
from texadmin.metadata_client import HttpMetadataClient, LocalMetadataClient, MetadataSnapshot
from texadmin.metadata_store import MetadataStore, normalize_doc
from texadmin.session import AdminSession
from texadmin.texture_source import TextureSource


def test_missing_file_is_empty(tmp_path):
    store = MetadataStore(tmp_path / "none.json")
    assert store.snapshot() == {"textures": {}, "categories": []}


def test_set_texture_persists_and_adds_category(store, metadata_path):
    store.set_texture("b", " Buckler ", "Shields")
    doc = json.loads(metadata_path.read_text(encoding="utf-8"))
    assert doc["textures"]["b"] == {"name": "Buckler", "category": "Shields"}
    assert doc["categories"] == ["Weapons", "Armor", "Misc", "Empty", "Shields"]

    # reopening sees the same data
    assert MetadataStore(metadata_path).get("b") == {"name": "Buckler", "category": "Shields"}


def test_set_texture_rejects_blank(store):
    with pytest.raises(ValidationError):
        store.set_texture("a", "", "Weapons")


def test_add_category_is_idempotent(store):
    assert store.add_category("Relics") is True
    assert store.add_category("Relics") is False
    assert store.categories()[-1] == "Relics"


def test_external_edit_is_picked_up(store, metadata_path):
    doc = json.loads(metadata_path.read_text(encoding="utf-8"))
    doc["textures"]["a"]["name"] = "Rapier"
    metadata_path.write_text(json.dumps(doc), encoding="utf-8")
    assert store.load(force=True) is True
    assert store.get("a")["name"] == "Rapier"


def test_normalize_doc_drops_junk():
    doc = normalize_doc({"textures": {"a": {"name": "A"}, "b": "junk", "": {}}, "categories": ["x", "x", 3, "y"]})
    assert doc == {"textures": {"a": {"name": "A", "category": ""}}, "categories": ["x", "y"]}


def test_local_client_maps_validation_to_fetch_error(store):
    client = LocalMetadataClient(store)
    with pytest.raises(FetchError) as exc:
        client.save("a", "", "x")
    assert exc.value.status_code == 400
    assert client.fetch().categories == ["Weapons", "Armor", "Misc", "Empty"]


def _http_client(handler):
    return HttpMetadataClient("http://meta.test", transport=httpx.MockTransport(handler))


def test_http_fetch_and_save():
    seen = []

    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json={"textures": {"a": {"name": "Sword", "category": "Weapons"}}, "categories": ["Weapons"]})
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True})

    with _http_client(handler) as client:
        snap = client.fetch()
        assert snap == MetadataSnapshot(textures={"a": {"name": "Sword", "category": "Weapons"}}, categories=["Weapons"])
        client.save("a", "Longsword", "Weapons")
    assert seen == [{"textureId": "a", "name": "Longsword", "category": "Weapons"}]


def test_http_save_non_2xx_is_fetch_error():
    with _http_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(FetchError) as exc:
            client.save("a", "x", "y")
    assert exc.value.status_code == 500


def test_http_transport_error_is_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with _http_client(handler) as client:
        with pytest.raises(FetchError):
            client.fetch()
        with pytest.raises(FetchError):
            client.save("a", "x", "y")


def test_http_fetch_rejects_bad_payload():
    with _http_client(lambda request: httpx.Response(200, text="[1, 2]")) as client:
        with pytest.raises(FetchError):
            client.fetch()
    with _http_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(FetchError):
            client.fetch()


def _corrupt(path):
    before = path.stat().st_mtime_ns
    path.write_text("{not json", encoding="utf-8")
    os.utime(path, ns=(before + 10**9, before + 10**9))


def test_normalize_doc_lists_record_categories():
    doc = normalize_doc({"textures": {"a": {"category": "Weapons"}, "b": {"category": "Armor"}}, "categories": ["Armor"]})
    assert doc["categories"] == ["Armor", "Weapons"]


def test_unlisted_record_category_reaches_snapshot(tmp_path, texture_dir):
    path = tmp_path / "texture_data.json"
    path.write_text(json.dumps({"textures": {"a": {"name": "Sword", "category": "Weapons"}}, "categories": []}), encoding="utf-8")
    session = AdminSession(TextureSource(texture_dir), LocalMetadataClient(MetadataStore(path)), tmp_path / "cache")
    assert session.mount() is True
    assert session.synchronizer.snapshot.categories == ["Weapons"]


def test_malformed_file_raises_and_keeps_last_good(store, metadata_path):
    before = store.snapshot()
    _corrupt(metadata_path)
    with pytest.raises(FetchError):
        store.load(force=True)
    with pytest.raises(FetchError):
        store.snapshot()
    assert store.get("a") == before["textures"]["a"]


def test_malformed_file_refuses_writes(store, metadata_path):
    _corrupt(metadata_path)
    with pytest.raises(FetchError):
        store.set_texture("b", "Buckler", "Armor")
    with pytest.raises(FetchError):
        store.add_category("Relics")
    assert metadata_path.read_text(encoding="utf-8") == "{not json"


def test_non_object_file_is_unreadable(tmp_path):
    path = tmp_path / "texture_data.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = MetadataStore(path)
    with pytest.raises(FetchError):
        store.snapshot()

    path.write_text(json.dumps({"textures": {}, "categories": ["Misc"]}), encoding="utf-8")
    assert store.snapshot()["categories"] == ["Misc"]


def test_malformed_file_fails_reload_and_keeps_snapshot(session, metadata_path):
    session.mount()
    good = session.synchronizer.snapshot
    _corrupt(metadata_path)

    assert session.reload() is False
    assert session.synchronizer.snapshot is good
    assert session.synchronizer.snapshot.get("a").name == "Sword"
    assert "Unreadable texture data" in session.synchronizer.last_error

    result = session.flow.commit("b", "Buckler", "Armor")
    assert result.ok is False
    assert metadata_path.read_text(encoding="utf-8") == "{not json"
