import pytest

from botplugins.config import Config, PlaylistBinding
from botplugins.library import (
    NO_PLAYLISTS,
    PLAYLIST_EXISTS,
    UNKNOWN_BINDING,
    UNKNOWN_PLAYLIST,
    create_playlist,
    delete_playlist,
    is_supported_music,
    list_playlists,
    normalize_music_path,
    set_default_list,
    unbind_playlist,
)


@pytest.fixture
def config(tmp_path):
    root = tmp_path / "music"
    (root / "alpha").mkdir(parents=True)
    (root / "alpha" / "one - singer.mp3").write_bytes(b"x")
    (root / "alpha" / "two - singer.mp3").write_bytes(b"x")
    (root / "beta").mkdir()
    (root / "loose.txt").write_text("x")
    return Config(
        music_path=str(root) + "/",
        playlist=[PlaylistBinding("alpha", 42), PlaylistBinding("gone", 7)],
    )


def test_normalize_music_path_converts_backslashes():
    assert normalize_music_path("C:\\music\\lib") == "C:/music/lib/"


def test_normalize_music_path_keeps_trailing_slash():
    assert normalize_music_path("/data/music/") == "/data/music/"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("song - singer.mp3", True),
        ("song - singer.WAV", True),
        ("song - singer.3gpp", True),
        ("song - singer.flac", False),
        ("song - singer.ogg", False),
    ],
)
def test_is_supported_music(name, expected):
    assert is_supported_music(name) is expected


def test_list_playlists_reports_folders_counts_and_ids(config):
    result = list_playlists(config)
    assert [(i.name, i.number, i.id) for i in result] == [
        ("alpha", 2, 42),
        ("beta", 0, 0),
    ]


def test_list_playlists_empty_library_raises_and_creates(tmp_path):
    root = tmp_path / "new"
    with pytest.raises(ValueError, match=NO_PLAYLISTS):
        list_playlists(Config(music_path=str(root) + "/"))
    assert root.is_dir()


def test_create_playlist_then_listed(config):
    path = create_playlist(config, "gamma")
    assert path.is_dir()
    assert "gamma" in [i.name for i in list_playlists(config)]


def test_create_existing_playlist_raises(config):
    with pytest.raises(FileExistsError, match=PLAYLIST_EXISTS):
        create_playlist(config, "alpha")


def test_delete_playlist_removes_folder_and_binding(config):
    assert delete_playlist(config, "alpha") is True
    assert [i.name for i in list_playlists(config)] == ["beta"]
    assert [b.name for b in config.playlist] == ["gone"]


def test_delete_unbound_playlist_leaves_config(config):
    assert delete_playlist(config, "beta") is False
    assert len(config.playlist) == 2
    assert [i.name for i in list_playlists(config)] == ["alpha"]


def test_delete_empty_name_refused(config):
    with pytest.raises(ValueError):
        delete_playlist(config, "")


def test_unbind_playlist_removes_binding(config):
    removed = unbind_playlist(config, "alpha")
    assert removed == PlaylistBinding("alpha", 42)
    assert [b.name for b in config.playlist] == ["gone"]
    assert list_playlists(config)[0].id == 0


@pytest.mark.parametrize("name", ["beta", "missing"])
def test_unbind_unbound_playlist_raises(config, name):
    with pytest.raises(LookupError, match=UNKNOWN_BINDING):
        unbind_playlist(config, name)
    assert len(config.playlist) == 2


def test_set_default_list(config):
    entry = set_default_list(config, 1001, "beta")
    assert entry.group_id == 1001 and entry.name == "beta"
    assert config.default_list_for(1001) == "beta"


def test_set_default_list_missing_raises(config):
    with pytest.raises(FileNotFoundError, match=UNKNOWN_PLAYLIST):
        set_default_list(config, 1001, "missing")
    assert config.default_list_for(1001) is None