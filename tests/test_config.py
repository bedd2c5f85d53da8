# -*- coding: utf-8 -*-
import pytest

from texadmin.config import PROJECT_ROOT, parse_bool, resolve_settings
from texadmin.settings import TexAdminSettings


def test_defaults_without_config_file(tmp_path, monkeypatch):
    for key in ("TEXTURE_DIR", "METADATA_PATH", "CACHE_DIR", "DEV_MODE", "METADATA_URL", "PAGE_SIZE"):
        monkeypatch.delenv(f"TEXADMIN_{key}", raising=False)
    s = resolve_settings(config_path=tmp_path / "missing.ini")
    assert s.texture_dir == PROJECT_ROOT / "data" / "textures"
    assert s.dev_mode is False
    assert s.page_size == 60
    assert s.metadata_url is None
    assert s.static_url_prefix == "/textures"


def test_ini_env_and_args_precedence(tmp_path, monkeypatch):
    ini = tmp_path / "settings.ini"
    ini.write_text(
        "[TEXADMIN]\n"
        f"texture_dir = {tmp_path / 'ini_textures'}\n"
        "metadata_path = rel/texture_data.json\n"
        "dev_mode = false\n"
        "page_size = 24\n"
        "static_url_prefix = thumbs/\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TEXADMIN_DEV_MODE", "1")
    monkeypatch.delenv("TEXADMIN_TEXTURE_DIR", raising=False)
    monkeypatch.delenv("TEXADMIN_METADATA_PATH", raising=False)
    monkeypatch.delenv("TEXADMIN_PAGE_SIZE", raising=False)

    s = resolve_settings(config_path=ini, cache_dir=str(tmp_path / "c"), root_path="texadmin/")
    assert s.texture_dir == tmp_path / "ini_textures"
    assert s.metadata_path == PROJECT_ROOT / "rel" / "texture_data.json"
    assert s.cache_dir == tmp_path / "c"
    assert s.dev_mode is True
    assert s.page_size == 24
    assert s.static_url_prefix == "/thumbs"
    assert s.root_path == "/texadmin"

    assert resolve_settings(config_path=ini, dev_mode=False).dev_mode is False


def test_bad_page_size(tmp_path, monkeypatch):
    monkeypatch.setenv("TEXADMIN_PAGE_SIZE", "many")
    with pytest.raises(SystemExit):
        resolve_settings(config_path=tmp_path / "missing.ini")


@pytest.mark.parametrize("raw,expected", [("1", True), ("development", True), ("yes", True), ("0", False), ("", False), (None, False)])
def test_parse_bool(raw, expected):
    assert parse_bool(raw) is expected


def test_normalize_root_path():
    assert TexAdminSettings.normalize_root_path(" /a/ ") == "/a"
    assert TexAdminSettings.normalize_root_path("") == ""
