"""Build reminder timers from the pieces of a Chinese date command."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from .timer import Timer

log = logging.getLogger(__name__)

_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"
_ASCII_INT = re.compile(r"[+-]?[0-9]+")


def chinese_char_to_int(c: str) -> int:
    """Map one Chinese numeral to 0..10; 日/天 (Sunday) map to 7, others to 0."""
    if c in ("日", "天"):
        return 7
    index = _DIGITS.find(c)
    return index if index >= 0 else 0


def chinese_num_to_int(text: str) -> int:
    """Convert a one or two character number, Arabic or Chinese.

    "每" alone is -1 and "每" followed by a numeral n is -n.
    """
    if not text:
        raise ValueError("empty number")
    if text[0].isdecimal():
        return int(text) if _ASCII_INT.fullmatch(text) else 0
    if text[0] == _EVERY:
        return -chinese_char_to_int(text[1]) if len(text) == 2 else -1
    if len(text) == 1:
        return chinese_char_to_int(text[0])
    ten = chinese_char_to_int(text[0])
    if ten != 10:
        ten *= 10
    unit = chinese_char_to_int(text[1])
    if unit == 10:
        unit = 0
    return ten + unit


def _drop_middle_ten(text: str) -> str:
    return text[0] + text[2] if len(text) == 3 else text


def filled_timer(
    date_strs: Sequence[str], bot_id: int, group_id: int, match_date_only: bool
) -> Timer:
    """Fill a timer from regex groups: month, day/week, hour, minute, url, alert.

    An invalid field leaves the timer disabled with the reason in ``alert``.
    """
    month_str, day_week, hour_str, minute_str = (
        date_strs[1],
        date_strs[2],
        date_strs[3],
        date_strs[4],
    )
    t = Timer()
    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        t.alert = "月份非法！"
        return t
    t.month = month

    if len(day_week) == 4:
        day = chinese_num_to_int(day_week[0] + day_week[2])
        if (day != -1 and day <= 0) or day > 31:
            t.alert = "日期非法1！"
            return t
        t.day = day
    elif day_week[-1] == "日":
        day = chinese_num_to_int(day_week[:-1])
        if (day != -1 and day <= 0) or day > 31:
            t.alert = "日期非法2！"
            return t
        t.day = day
    elif day_week[0] == _EVERY:
        t.week = -1
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if week < 0 or week > 6:
            t.alert = "星期非法！"
            return t
        t.week = week

    hour = chinese_num_to_int(_drop_middle_ten(hour_str))
    if hour < -1 or hour > 23:
        t.alert = "小时非法！"
        return t
    t.hour = hour

    minute = chinese_num_to_int(_drop_middle_ten(minute_str))
    if minute < -1 or minute > 59:
        t.alert = "分钟非法！"
        return t
    t.minute = minute

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            # Drop the leading "用", three bytes in UTF-8.
            t.url = url_str.encode("utf-8")[3:].decode("utf-8", "replace")
            log.debug("reminder image url %s", t.url)
            if not t.url.startswith("http"):
                t.url = "illegal"
                log.debug("illegal reminder url")
                return t
        t.alert = date_strs[6]
        t.enabled = True
    t.self_id = bot_id
    t.group_id = group_id
    return t


def filled_cron_timer(
    cron: str, alert: str, url: str, bot_id: int, group_id: int
) -> Timer:
    """A timer driven by a cron expression."""
    return Timer(self_id=bot_id, group_id=group_id, alert=alert, cron=cron, url=url)