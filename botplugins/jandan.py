"""Store of picture URLs keyed by their CRC-64 (ISO) checksum."""

from __future__ import annotations

import sqlite3
import threading
from os import PathLike

_ISO_POLY = 0xD800000000000000
_MASK = (1 << 64) - 1


def _make_table() -> list[int]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            crc = (crc >> 1) ^ _ISO_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return table


_TABLE = _make_table()


def crc64_iso(data: bytes) -> int:
    """CRC-64 with the ISO polynomial, reflected, init and final xor all ones."""
    crc = _MASK
    for byte in data:
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK


def picture_id(url: str) -> int:
    """The id of a picture: the CRC-64 of its URL."""
    return crc64_iso(url.encode("utf-8"))


def _to_signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


class PictureStore:
    """SQLite table of pictures, one row per distinct URL."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS picture (id INTEGER PRIMARY KEY, url TEXT)"
        )
        self._db.commit()

    def __enter__(self) -> PictureStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add(self, url: str) -> bool:
        """Insert a URL; False when it was already stored."""
        key = _to_signed(picture_id(url))
        with self._lock:
            cursor = self._db.execute(
                "INSERT OR IGNORE INTO picture (id, url) VALUES (?, ?)", (key, url)
            )
            self._db.commit()
            return cursor.rowcount == 1

    def contains(self, url: str) -> bool:
        key = _to_signed(picture_id(url))
        with self._lock:
            row = self._db.execute("SELECT 1 FROM picture WHERE id = ?", (key,)).fetchone()
        return row is not None

    def count(self) -> int:
        with self._lock:
            (n,) = self._db.execute("SELECT COUNT(*) FROM picture").fetchone()
        return n

    def random_url(self) -> str:
        """A random stored URL; LookupError when the store is empty."""
        with self._lock:
            row = self._db.execute(
                "SELECT url FROM picture ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError("no pictures stored")
        return row[0]

    def close(self) -> None:
        with self._lock:
            self._db.close()