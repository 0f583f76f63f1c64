"""Group reminder timers whose schedule is packed into one integer."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

_ENABLED = 0x800000
_MONTH = (0x780000, 19, 0b1111)
_DAY = (0x07C000, 14, 0b11111)
_WEEK = (0x003800, 11, 0b111)
_HOUR = (0x0007C0, 6, 0b11111)
_MINUTE = (0x00003F, 0, 0b111111)


def _unpack(packed: int, spec: tuple[int, int, int]) -> int:
    mask, shift, all_ones = spec
    value = (packed & mask) >> shift
    return -1 if value == all_ones else value


def _pack(packed: int, spec: tuple[int, int, int], value: int) -> int:
    mask, shift, _ = spec
    return ((value << shift) & mask) | (packed & (0xFFFFFF & ~mask))


@dataclass
class Timer:
    """A reminder for one group.

    ``packed`` holds, from the high bit down: enabled (1 bit), month (4),
    day (5), weekday (3, Sunday is 0), hour (5) and minute (6). A field whose
    bits are all ones reads as -1, meaning "every".
    """

    id: int = 0
    packed: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    @property
    def enabled(self) -> bool:
        return self.packed & _ENABLED != 0

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value:
            self.packed |= _ENABLED
        else:
            self.packed &= 0x7FFFFF

    @property
    def month(self) -> int:
        return _unpack(self.packed, _MONTH)

    @month.setter
    def month(self, value: int) -> None:
        self.packed = _pack(self.packed, _MONTH, value)

    @property
    def day(self) -> int:
        return _unpack(self.packed, _DAY)

    @day.setter
    def day(self, value: int) -> None:
        self.packed = _pack(self.packed, _DAY, value)

    @property
    def week(self) -> int:
        return _unpack(self.packed, _WEEK)

    @week.setter
    def week(self, value: int) -> None:
        self.packed = _pack(self.packed, _WEEK, value)

    @property
    def hour(self) -> int:
        return _unpack(self.packed, _HOUR)

    @hour.setter
    def hour(self, value: int) -> None:
        self.packed = _pack(self.packed, _HOUR, value)

    @property
    def minute(self) -> int:
        return _unpack(self.packed, _MINUTE)

    @minute.setter
    def minute(self, value: int) -> None:
        self.packed = _pack(self.packed, _MINUTE, value)

    def info(self) -> str:
        """Canonical description of the schedule, prefixed by the group."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month}月{self.day}日{self.week}周"
            f"{self.hour}:{self.minute}"
        )

    def timer_id(self) -> int:
        """Stable id: the first four bytes of the MD5 of ``info()``, little endian."""
        digest = hashlib.md5(self.info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")