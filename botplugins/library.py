"""Manage the local playlists of the music guessing game: one folder each."""

from __future__ import annotations

import os
import shutil
from os import PathLike
from pathlib import Path

from .config import Config, DefaultList, ListInfo, PlaylistBinding

# Formats ffmpeg handles. Extensions are matched as substrings of this list.
MUSIC_TYPES = "mp3;MP3;wav;WAV;amr;AMR;3gp;3GP;3gpp;3GPP;acc;ACC"

NO_PLAYLISTS = "所设置的歌库不存在任何歌单！"
PLAYLIST_EXISTS = "歌单已存在！"
UNKNOWN_BINDING = (
    "歌单名称错误或者该歌单并没有绑定网易云,可以发送“歌单列表”获取歌单名称"
)
UNKNOWN_PLAYLIST = "歌单名称错误，可以发送“歌单列表”获取歌单名称"


def normalize_music_path(path: str) -> str:
    """Use forward slashes and end the path with one."""
    path = path.replace("\\", "/")
    if not path.endswith("/"):
        path += "/"
    return path


def is_supported_music(file_name: str) -> bool:
    """Whether the text after the last dot is one of the supported formats."""
    extension = file_name.split(".")[-1]
    return extension in MUSIC_TYPES


def _playlist_dir(config: Config, name: str) -> Path:
    return Path(config.music_path + name)


def list_playlists(
    config: Config, music_path: str | PathLike[str] | None = None
) -> list[ListInfo]:
    """The playlist folders under the library, with file counts and bound ids.

    The library folder is created when missing. Raises ValueError when it
    holds nothing at all.
    """
    root = Path(config.music_path if music_path is None else music_path)
    bound = {binding.name: binding.id for binding in config.playlist}
    root.mkdir(parents=True, exist_ok=True)
    entries = sorted(os.scandir(root), key=lambda e: e.name)
    if not entries:
        raise ValueError(NO_PLAYLISTS)
    playlists = []
    for entry in entries:
        if not entry.is_dir():
            continue
        try:
            count = sum(1 for _ in os.scandir(entry.path))
        except OSError:
            continue
        playlists.append(ListInfo(entry.name, count, bound.get(entry.name, 0)))
    return playlists


def create_playlist(config: Config, name: str) -> Path:
    """Create an empty playlist folder; FileExistsError when it exists."""
    path = _playlist_dir(config, name)
    if path.exists():
        raise FileExistsError(PLAYLIST_EXISTS)
    path.mkdir(parents=True)
    return path


def delete_playlist(config: Config, name: str) -> bool:
    """Delete a playlist folder with its songs and drop its online binding.

    Returns whether a binding was removed, i.e. whether the config changed.
    """
    if not name:
        raise ValueError("playlist name must not be empty")
    path = _playlist_dir(config, name)
    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()
    for index, binding in enumerate(config.playlist):
        if binding.name == name:
            del config.playlist[index]
            return True
    return False


def unbind_playlist(config: Config, name: str) -> PlaylistBinding:
    """Remove the online binding of a local playlist and return it.

    Raises LookupError when the playlist does not exist or is not bound.
    """
    play_id = next(
        (info.id for info in list_playlists(config) if info.name == name), 0
    )
    if play_id == 0:
        raise LookupError(UNKNOWN_BINDING)
    for index, binding in enumerate(config.playlist):
        if binding.id == play_id:
            return config.playlist.pop(index)
    raise LookupError(UNKNOWN_BINDING)


def set_default_list(config: Config, group_id: int, name: str) -> DefaultList:
    """Record a group's default playlist; FileNotFoundError when it is missing."""
    if not _playlist_dir(config, name).exists():
        raise FileNotFoundError(UNKNOWN_PLAYLIST)
    entry = DefaultList(group_id, name)
    config.default_lists.append(entry)
    return entry