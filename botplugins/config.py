"""Settings of the music guessing game, stored as JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

DEFAULT_PLAYLIST_NAME = "这里是歌单名称,id为网易云歌单ID"
DEFAULT_GROUP_LIST_NAME = "这里是歌单名称,gid是群号"
DEFAULT_PLACEHOLDER_ID = 123456


@dataclass
class PlaylistBinding:
    """A local playlist bound to an online playlist id."""

    name: str
    id: int

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "id": self.id}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> PlaylistBinding:
        return cls(name=str(data.get("name", "")), id=int(data.get("id", 0) or 0))


@dataclass
class DefaultList:
    """The playlist a group plays by default."""

    group_id: int
    name: str

    def to_json(self) -> dict[str, Any]:
        return {"gid": self.group_id, "name": self.name}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> DefaultList:
        return cls(group_id=int(data.get("gid", 0) or 0), name=str(data.get("name", "")))


@dataclass
class ListInfo:
    """A local playlist: its name, how many files it holds and its bound id."""

    name: str
    number: int
    id: int = 0


def _objects(value: Any, key: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValueError(f"{key} must be a list of objects")
    return value


@dataclass
class Config:
    """User settings of the game."""

    music_path: str = ""
    api_url: str = ""
    playlist: list[PlaylistBinding] = field(default_factory=list)
    default_lists: list[DefaultList] = field(default_factory=list)
    local: bool = False
    api: bool = False
    cookie: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "musicPath": self.music_path,
            "apiURL": self.api_url,
            "playlist": [p.to_json() for p in self.playlist],
            "defaultlist": [d.to_json() for d in self.default_lists],
            "local": self.local,
            "api": self.api,
            "cookie": self.cookie,
        }

    @classmethod
    def from_json(cls, data: Any) -> Config:
        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")
        return cls(
            music_path=str(data.get("musicPath") or ""),
            api_url=str(data.get("apiURL") or ""),
            playlist=[
                PlaylistBinding.from_json(p)
                for p in _objects(data.get("playlist"), "playlist")
            ],
            default_lists=[
                DefaultList.from_json(d)
                for d in _objects(data.get("defaultlist"), "defaultlist")
            ],
            local=bool(data.get("local", False)),
            api=bool(data.get("api", False)),
            cookie=str(data.get("cookie") or ""),
        )

    @classmethod
    def load(cls, path: str | PathLike[str]) -> Config:
        """Read settings from a JSON file."""
        with open(path, encoding="utf-8") as fh:
            return cls.from_json(json.load(fh))

    def save(self, path: str | PathLike[str]) -> None:
        """Write settings to a JSON file, replacing it."""
        text = json.dumps(self.to_json(), ensure_ascii=False, separators=(",", ":"))
        Path(path).write_text(text + "\n", encoding="utf-8")

    def default_list_for(self, group_id: int) -> str | None:
        """Name of the group's default playlist, or None when none is set."""
        for entry in self.default_lists:
            if entry.group_id == group_id:
                return entry.name
        return None


def default_config(bot_path: str) -> Config:
    """Settings used when no configuration file exists yet."""
    return Config(
        music_path=bot_path + "/data/guessmusic/music/",
        playlist=[PlaylistBinding(DEFAULT_PLAYLIST_NAME, DEFAULT_PLACEHOLDER_ID)],
        default_lists=[DefaultList(DEFAULT_PLACEHOLDER_ID, DEFAULT_GROUP_LIST_NAME)],
        api=True,
        local=True,
    )