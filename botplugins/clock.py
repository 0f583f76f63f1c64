"""Run group reminders, both date-based and cron-driven, and keep them in SQLite."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import datetime, time, timedelta
from os import PathLike

from .schedule import is_due, next_wake_time
from .timer import Timer

log = logging.getLogger(__name__)

Segment = dict[str, object]
Sender = Callable[[int, int, list[Segment]], object]

_CREATE = (
    "CREATE TABLE IF NOT EXISTS timer ("
    "id INTEGER PRIMARY KEY, emdwhm INTEGER, sid INTEGER, gid INTEGER, "
    "alert TEXT, cron TEXT, url TEXT)"
)

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_MONTH_NAMES = {
    name: i + 1
    for i, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
    )
}
_DOW_NAMES = {
    name: i for i, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}
_SEARCH_DAYS = 366 * 5


def alert_message(timer: Timer) -> list[Segment]:
    """Message segments sent when a reminder fires: @all, the text, then the image."""
    segments: list[Segment] = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


def _field_value(text: str, names: dict[str, int]) -> int:
    lowered = text.lower()
    if lowered in names:
        return names[lowered]
    return int(text)


def _parse_field(text: str, low: int, high: int, names: dict[str, int]) -> set[int]:
    values: set[int] = set()
    for part in text.split(","):
        step = 1
        stepped = "/" in part
        if stepped:
            part, step_text = part.split("/", 1)
            step = int(step_text)
            if step <= 0:
                raise ValueError(f"step must be positive: {text}")
        if part in ("*", "?"):
            start, end = low, high
        elif "-" in part:
            first, last = part.split("-", 1)
            start, end = _field_value(first, names), _field_value(last, names)
        else:
            start = _field_value(part, names)
            end = high if stepped else start
        if not low <= start <= end <= high:
            raise ValueError(f"value out of range ({low}-{high}): {text}")
        values.update(range(start, end + 1, step))
    return values


class _CronSchedule:
    """A standard five-field cron expression."""

    def __init__(self, spec: str) -> None:
        spec = spec.strip()
        if spec.startswith("@"):
            try:
                spec = _DESCRIPTORS[spec.lower()]
            except KeyError:
                raise ValueError(f"unrecognized descriptor: {spec}") from None
        fields = spec.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {spec}")
        minute, hour, dom, month, dow = fields
        self.minutes = sorted(_parse_field(minute, 0, 59, {}))
        self.hours = sorted(_parse_field(hour, 0, 23, {}))
        self.doms = _parse_field(dom, 1, 31, {})
        self.months = _parse_field(month, 1, 12, _MONTH_NAMES)
        self.dows = _parse_field(dow, 0, 6, _DOW_NAMES)
        self.dom_star = dom[:1] in ("*", "?")
        self.dow_star = dow[:1] in ("*", "?")

    def _day_matches(self, day) -> bool:
        if day.month not in self.months:
            return False
        dom_ok = day.day in self.doms
        dow_ok = (day.weekday() + 1) % 7 in self.dows
        if self.dom_star or self.dow_star:
            return dom_ok and dow_ok
        return dom_ok or dow_ok

    def next_after(self, now: datetime) -> datetime:
        start = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
        for offset in range(_SEARCH_DAYS):
            day = start.date() + timedelta(days=offset)
            if not self._day_matches(day):
                continue
            for hour in self.hours:
                for minute in self.minutes:
                    candidate = datetime.combine(day, time(hour, minute))
                    if candidate >= start:
                        return candidate
        raise ValueError("cron expression never fires")


class Clock:
    """Holds the registered reminders, runs them in threads and stores them."""

    def __init__(self, db_path: str | PathLike[str], sender: Sender) -> None:
        self._sender = sender
        self._lock = threading.RLock()
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db.execute(_CREATE)
        self._db.commit()
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        rows = self._db.execute(
            "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer"
        ).fetchall()
        for row in rows:
            self.register(Timer(*row), save=False)

    def __enter__(self) -> Clock:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def register(self, timer: Timer, save: bool) -> bool:
        """Register a timer, storing it first when ``save`` is set.

        Returns whether the timer is now scheduled. A cron expression that does
        not parse leaves the reason in ``timer.alert``.
        """
        if save:
            timer.id = timer.timer_id()
        key = timer.id
        with self._lock:
            old = self._timers.get(key)
            if old is not None and old is not timer:
                old.enabled = False
                self._stop(key)
        log.info("registering timer %08x", key)
        if timer.cron:
            try:
                schedule = _CronSchedule(timer.cron)
            except ValueError as exc:
                timer.alert = str(exc)
                return False
            try:
                if save:
                    self._save(timer)
            except sqlite3.Error:
                log.exception("could not store timer %08x", key)
                return False
            self._remember(timer)
            self._start(key, self._run_cron, timer, schedule)
            return True
        if save:
            try:
                self._save(timer)
            except sqlite3.Error:
                log.exception("could not store timer %08x", key)
        self._remember(timer)
        if timer.enabled:
            self._start(key, self._run_dated, timer)
        return timer.enabled

    def cancel(self, key: int) -> bool:
        """Stop and forget a timer; False when no such timer exists."""
        with self._lock:
            timer = self._timers.pop(key, None)
            if timer is None:
                return False
            if not timer.cron:
                timer.enabled = False
            self._stop(key)
            try:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
            except sqlite3.Error:
                log.exception("could not delete timer %08x", key)
                return False
        return True

    def get(self, key: int) -> Timer | None:
        with self._lock:
            return self._timers.get(key)

    def list_timers(self, group_id: int) -> list[str]:
        """Readable schedules of the group's timers, one line each."""
        with self._lock:
            timers = [t for t in self._timers.values() if t.group_id == group_id]
        lines = []
        for timer in timers:
            info = timer.info()
            text = info[info.index("]") + 1 :] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def close(self) -> None:
        """Stop every running timer and close the database."""
        with self._lock:
            for stop in self._stops.values():
                stop.set()
            self._stops.clear()
            self._db.close()

    def _save(self, timer: Timer) -> None:
        with self._lock:
            self._db.execute(
                "INSERT OR REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.packed,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def _remember(self, timer: Timer) -> None:
        with self._lock:
            self._timers[timer.id] = timer

    def _start(self, key: int, target: Callable[..., None], *args: object) -> None:
        stop = threading.Event()
        with self._lock:
            self._stops[key] = stop
        thread = threading.Thread(
            target=target, args=(*args, stop), name=f"timer-{key:08x}", daemon=True
        )
        thread.start()

    def _stop(self, key: int) -> None:
        stop = self._stops.pop(key, None)
        if stop is not None:
            stop.set()

    def _send(self, timer: Timer) -> None:
        try:
            self._sender(timer.self_id, timer.group_id, alert_message(timer))
        except Exception:
            log.exception("sending reminder %08x failed", timer.id)

    def _run_dated(self, timer: Timer, stop: threading.Event) -> None:
        while timer.enabled and not stop.is_set():
            wake = next_wake_time(timer)
            delay = (wake - datetime.now()).total_seconds()
            log.debug("timer %08x sleeps %ds", timer.id, int(delay))
            if stop.wait(max(delay, 0.0)):
                return
            if timer.enabled and is_due(timer):
                self._send(timer)

    def _run_cron(
        self, timer: Timer, schedule: _CronSchedule, stop: threading.Event
    ) -> None:
        while not stop.is_set():
            try:
                wake = schedule.next_after(datetime.now())
            except ValueError:
                log.warning("cron timer %08x never fires", timer.id)
                return
            delay = (wake - datetime.now()).total_seconds()
            if stop.wait(max(delay, 0.0)):
                return
            self._send(timer)