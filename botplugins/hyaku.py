"""The Ogura Hyakunin Isshu: one hundred poems read from CSV."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import astuple, dataclass

POEM_COUNT = 100
IMAGE_BASE = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"

_LABELS = ("番号", "歌人", "上の句", "下の句", "上の句ひらがな", "下の句ひらがな")
_MARKERS = ("●", "◉", "○", "○", "◎", "◎")


@dataclass(frozen=True)
class Poem:
    number: str
    poet: str
    upper: str
    lower: str
    upper_kana: str
    lower_kana: str

    def __str__(self) -> str:
        return "".join(
            f"{marker}{label}：{value}\n"
            for marker, label, value in zip(_MARKERS, _LABELS, astuple(self))
        )


def load_poems(stream: Iterable[str]) -> list[Poem]:
    """Read the CSV (with a title row); it must hold poems 1 to 100 in order."""
    records = list(csv.reader(stream))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for index, record in enumerate(records, start=1):
        if len(record) != len(_LABELS):
            raise ValueError("invalid csvfile")
        if int(record[0]) != index:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*record))
    return poems


def image_names(number: int) -> tuple[str, str]:
    """The card picture and the text picture of poem ``number``."""
    if not 1 <= number <= POEM_COUNT:
        raise ValueError("超出范围")
    return f"img/{number:03d}.jpg", f"img/{number:03d}.png"