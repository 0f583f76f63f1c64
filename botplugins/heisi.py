"""Packed 10-byte picture records and random picks from them."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

ITEM_SIZE = 10
_UPLOADS = "http://hs.heisiwu.com/wp-content/uploads/"
_EXTENSIONS = (".jpg", ".png", ".webp")

COMMANDS = {
    "来点黑丝": "heisi.bin",
    "来点白丝": "baisi.bin",
    "来点jk": "jk.bin",
    "来点巨乳": "jur.bin",
    "来点足控": "zuk.bin",
    "来点网红": "mcn.bin",
}
DATA_FILES = tuple(COMMANDS.values())


@dataclass(frozen=True)
class PicItem:
    """One picture, encoded as ten bytes."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ITEM_SIZE:
            raise ValueError(f"item must be {ITEM_SIZE} bytes, got {len(self.raw)}")

    def url(self) -> str:
        """Restore the picture URL, or "invalid ext" for an unknown extension."""
        b = self.raw
        year = ((b[0] >> 4) & 0x0F) + 2021
        month = b[0] & 0x0F
        if year == 2021:
            num = int.from_bytes(b[1:5], "big")
            digest = b[5:9].hex()
            return (
                f"{_UPLOADS}{year:4d}/{month:02d}/"
                f"{year:4d}{month:02d}16{num:06d}-611a3{digest:>8}.jpg"
            )
        d = int.from_bytes(b[1:9], "big")
        scaled = b[9] & 0x80 != 0
        num = b[9] & 0x7F
        result = f"{_UPLOADS}{year:4d}/{month:02d}/{d & 0x0FFFFFFF_FFFFFFFF:015x}"
        if num > 0:
            result += f"-{num}"
        if scaled:
            result += "-scaled"
        ext = d >> 60
        if ext >= len(_EXTENSIONS):
            return "invalid ext"
        return result + _EXTENSIONS[ext]

    def __str__(self) -> str:
        return self.url()


def load_items(data: bytes) -> list[PicItem]:
    """Split a data file into its ten-byte items."""
    if len(data) % ITEM_SIZE != 0:
        raise ValueError("invalid data")
    return [PicItem(bytes(data[i : i + ITEM_SIZE])) for i in range(0, len(data), ITEM_SIZE)]


def choose_url(
    command: str,
    galleries: Mapping[str, Sequence[PicItem]],
    rng: random.Random | None = None,
) -> str:
    """Pick a random picture URL for a command from the loaded galleries.

    ``galleries`` maps data file names to their items.
    """
    try:
        file_name = COMMANDS[command]
    except KeyError:
        raise ValueError(f"unknown command: {command}") from None
    items = galleries.get(file_name)
    if not items:
        raise ValueError(f"no pictures loaded for {command}")
    return (rng or random).choice(list(items)).url()