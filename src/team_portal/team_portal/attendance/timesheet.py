"""Pure timesheet arithmetic: durations, formatting, week bucketing, breaks.

Only ``clock_in``/``clock_out`` are authoritative; everything here is derived
from them and a caller-supplied ``now``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import week_bounds
from .model import ClockEntry


def duration_minutes(clock_in: datetime, clock_out: Optional[datetime], now: datetime) -> int:
    """Whole minutes between clock-in and clock-out (or ``now`` if open), never negative."""
    end = clock_out if clock_out is not None else now
    seconds = (end - clock_in).total_seconds()
    return max(0, int(seconds // 60))


def entry_minutes(entry: ClockEntry, now: datetime) -> int:
    return duration_minutes(entry.clock_in, entry.clock_out, now)


def elapsed_seconds(clock_in: datetime, now: datetime) -> int:
    return max(0, int((now - clock_in).total_seconds()))


def format_duration(minutes: int) -> str:
    """``HH:MM:00``; hours may exceed 24."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}:00"


def format_elapsed(seconds: int) -> str:
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"


def hours(minutes: int, *, ndigits: int = 1) -> float:
    return round(minutes / 60, ndigits)


@dataclass(frozen=True)
class EntryRow:
    entry: ClockEntry
    minutes: int

    def to_dict(self) -> dict:
        out = self.entry.to_dict()
        out["durationMinutes"] = self.minutes
        out["duration"] = format_duration(self.minutes)
        return out


@dataclass(frozen=True)
class DaySummary:
    day: date
    rows: tuple[EntryRow, ...]

    @property
    def total_minutes(self) -> int:
        return sum(r.minutes for r in self.rows)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "entries": [r.to_dict() for r in self.rows],
            "totalMinutes": self.total_minutes,
            "total": format_duration(self.total_minutes),
        }


@dataclass(frozen=True)
class WeekSummary:
    week_start: date
    week_end: date
    days: tuple[DaySummary, ...]

    @property
    def total_minutes(self) -> int:
        return sum(d.total_minutes for d in self.days)

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "days": [d.to_dict() for d in self.days],
            "totalMinutes": self.total_minutes,
            "total": format_duration(self.total_minutes),
        }


def summarize_range(entries: Iterable[ClockEntry], start: date, end: date, now: datetime) -> tuple[DaySummary, ...]:
    """One DaySummary per calendar day in [start, end], entries bucketed by ``work_date``.

    Entries outside the range are ignored; rows within a day are ordered by clock-in.
    """
    buckets: dict[date, list[EntryRow]] = {}
    for e in entries:
        if start <= e.work_date <= end:
            buckets.setdefault(e.work_date, []).append(EntryRow(entry=e, minutes=entry_minutes(e, now)))

    days = []
    day = start
    while day <= end:
        rows = sorted(buckets.get(day, []), key=lambda r: r.entry.clock_in)
        days.append(DaySummary(day=day, rows=tuple(rows)))
        day += timedelta(days=1)
    return tuple(days)


def summarize_week(entries: Sequence[ClockEntry], any_day: date, now: datetime) -> WeekSummary:
    start, end = week_bounds(any_day)
    return WeekSummary(week_start=start, week_end=end, days=summarize_range(entries, start, end, now))


@dataclass
class BreakTimer:
    """Session-local break timer.

    Breaks are cosmetic: nothing is persisted and worked minutes are not
    reduced. ``breaks`` keeps finished (start, end) pairs for display.
    """

    started_at: Optional[datetime] = None
    breaks: list[tuple[datetime, datetime]] = field(default_factory=list)

    @property
    def is_on_break(self) -> bool:
        return self.started_at is not None

    def start_break(self, now: datetime) -> None:
        if self.started_at is None:
            self.started_at = now

    def resume_work(self, now: datetime) -> int:
        """End the current break; returns its length in seconds (0 if none)."""
        if self.started_at is None:
            return 0
        started, self.started_at = self.started_at, None
        self.breaks.append((started, now))
        return elapsed_seconds(started, now)

    def break_elapsed_seconds(self, now: datetime) -> int:
        if self.started_at is None:
            return 0
        return elapsed_seconds(self.started_at, now)

    def total_break_seconds(self, now: datetime) -> int:
        done = sum(elapsed_seconds(s, e) for s, e in self.breaks)
        return done + self.break_elapsed_seconds(now)
