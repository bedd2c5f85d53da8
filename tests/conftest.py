# -*- coding: utf-8 -*-
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT / "apps") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "apps"))

from texadmin.errors import FetchError  # noqa: E402
from texadmin.metadata_client import LocalMetadataClient  # noqa: E402
from texadmin.metadata_store import MetadataStore  # noqa: E402
from texadmin.session import AdminSession  # noqa: E402
from texadmin.texture_source import TextureSource  # noqa: E402


class CountingClient:
    """Wraps a metadata client; counts calls and can be told to fail."""

    def __init__(self, inner):
        self.inner = inner
        self.fetches = 0
        self.saves = 0
        self.fail_fetch = False
        self.fail_save = False

    def fetch(self):
        self.fetches += 1
        if self.fail_fetch:
            raise FetchError("metadata store unreachable")
        return self.inner.fetch()

    def save(self, texture_id, name, category):
        self.saves += 1
        if self.fail_save:
            raise FetchError("texture data write failed: HTTP 500", status_code=500)
        return self.inner.save(texture_id, name, category)


@pytest.fixture
def texture_dir(tmp_path):
    root = tmp_path / "textures"
    (root / "weapons").mkdir(parents=True)
    (root / "a.png").write_bytes(b"\x89PNG a")
    (root / "b.png").write_bytes(b"\x89PNG b")
    (root / "weapons" / "axe.png").write_bytes(b"\x89PNG axe")
    (root / "notes.txt").write_text("not a texture", encoding="utf-8")
    return root


@pytest.fixture
def metadata_path(tmp_path):
    path = tmp_path / "texture_data.json"
    doc = {
        "textures": {
            "a": {"name": "Sword", "category": "Weapons"},
            "b": {"name": "Shield", "category": "Armor"},
            "ghost": {"name": "Gone", "category": "Misc"},
        },
        "categories": ["Weapons", "Armor", "Misc", "Empty"],
    }
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


@pytest.fixture
def store(metadata_path):
    return MetadataStore(metadata_path)


@pytest.fixture
def client(store):
    return CountingClient(LocalMetadataClient(store))


@pytest.fixture
def session(texture_dir, client, tmp_path):
    return AdminSession(TextureSource(texture_dir), client, tmp_path / "cache")
