import json

import pytest

from botplugins.config import (
    Config,
    DefaultList,
    ListInfo,
    PlaylistBinding,
    default_config,
)


def test_default_config_values():
    cfg = default_config("/bot")
    assert cfg.music_path == "/bot/data/guessmusic/music/"
    assert cfg.playlist == [PlaylistBinding("这里是歌单名称,id为网易云歌单ID", 123456)]
    assert cfg.default_lists == [DefaultList(123456, "这里是歌单名称,gid是群号")]
    assert cfg.api is True
    assert cfg.local is True
    assert cfg.api_url == ""
    assert cfg.cookie == ""


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "config.json"
    cfg = default_config("/bot")
    cfg.api_url = "http://localhost/"
    cfg.cookie = "placeholder"
    cfg.save(path)
    assert Config.load(path) == cfg


def test_saved_json_uses_source_keys(tmp_path):
    path = tmp_path / "config.json"
    default_config("/bot").save(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert list(data) == [
        "musicPath",
        "apiURL",
        "playlist",
        "defaultlist",
        "local",
        "api",
        "cookie",
    ]
    assert data["playlist"][0] == {"name": "这里是歌单名称,id为网易云歌单ID", "id": 123456}
    assert data["defaultlist"][0] == {"gid": 123456, "name": "这里是歌单名称,gid是群号"}


def test_saved_file_keeps_unicode(tmp_path):
    path = tmp_path / "config.json"
    default_config("/bot").save(path)
    assert "这里是歌单名称" in path.read_text(encoding="utf-8")


def test_load_missing_fields_default(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"musicPath": "/m/", "playlist": null}', encoding="utf-8")
    cfg = Config.load(path)
    assert cfg.music_path == "/m/"
    assert cfg.playlist == []
    assert cfg.default_lists == []
    assert cfg.api is False
    assert cfg.local is False


def test_load_invalid_json_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        Config.load(path)


def test_load_non_object_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        Config.load(path)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "absent.json")


def test_default_list_for_finds_first_match():
    cfg = Config(
        default_lists=[DefaultList(1, "rock"), DefaultList(2, "pop"), DefaultList(1, "jazz")]
    )
    assert cfg.default_list_for(1) == "rock"
    assert cfg.default_list_for(2) == "pop"
    assert cfg.default_list_for(3) is None


def test_list_info_default_id():
    info = ListInfo("rock", 3)
    assert info.id == 0
    assert info.number == 3
    assert info.name == "rock"