from datetime import date, datetime

from src.team_portal.team_portal.attendance.model import ClockEntry
from src.team_portal.team_portal.attendance.timesheet import (
    BreakTimer,
    duration_minutes,
    format_duration,
    format_elapsed,
    summarize_week,
)


def _entry(eid, start, end=None):
    return ClockEntry(entry_id=eid, employee_id="e1", clock_in=start, clock_out=end, work_date=start.date())


def test_duration_is_floored_to_whole_minutes():
    assert duration_minutes(datetime(2026, 3, 2, 9, 0, 0), datetime(2026, 3, 2, 9, 1, 59), datetime(2026, 3, 2, 12)) == 1


def test_duration_never_negative():
    assert duration_minutes(datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 9)) == 0


def test_open_entry_counts_against_now():
    now = datetime(2026, 3, 2, 10, 15, 30)
    assert duration_minutes(datetime(2026, 3, 2, 9, 0), None, now) == 75


def test_formatting():
    assert format_duration(8 * 60 + 30) == "08:30:00"
    assert format_duration(25 * 60) == "25:00:00"
    assert format_elapsed(3 * 3600 + 4 * 60 + 5) == "03:04:05"


def test_full_day_shows_one_row_and_day_total():
    entries = [_entry("a", datetime(2026, 3, 4, 9, 0, 0), datetime(2026, 3, 4, 17, 30, 0))]
    week = summarize_week(entries, date(2026, 3, 4), now=datetime(2026, 3, 6, 12, 0))

    wednesday = week.days[2]
    assert wednesday.day == date(2026, 3, 4)
    assert len(wednesday.rows) == 1
    assert wednesday.to_dict()["total"] == "08:30:00"
    assert wednesday.rows[0].to_dict()["duration"] == "08:30:00"


def test_week_runs_monday_to_sunday_and_totals_add_up():
    now = datetime(2026, 3, 8, 11, 0)
    entries = [
        _entry("mon", datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 12, 0)),
        _entry("mon2", datetime(2026, 3, 2, 13, 0), datetime(2026, 3, 2, 17, 45)),
        _entry("thu", datetime(2026, 3, 5, 8, 0), datetime(2026, 3, 5, 16, 20)),
        _entry("sun-open", datetime(2026, 3, 8, 10, 0)),
        _entry("prev-week", datetime(2026, 3, 1, 9, 0), datetime(2026, 3, 1, 10, 0)),
    ]

    week = summarize_week(entries, date(2026, 3, 5), now)

    assert week.week_start == date(2026, 3, 2)
    assert week.week_end == date(2026, 3, 8)
    assert len(week.days) == 7
    assert week.total_minutes == sum(d.total_minutes for d in week.days)
    assert week.days[0].total_minutes == 180 + 285
    assert week.days[6].total_minutes == 60
    assert week.total_minutes == 180 + 285 + 500 + 60


def test_rows_within_a_day_are_ordered_by_clock_in():
    entries = [
        _entry("late", datetime(2026, 3, 2, 14, 0), datetime(2026, 3, 2, 15, 0)),
        _entry("early", datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 9, 0)),
    ]
    week = summarize_week(entries, date(2026, 3, 2), datetime(2026, 3, 2, 18))
    assert [r.entry.entry_id for r in week.days[0].rows] == ["early", "late"]


def test_break_timer_is_session_only():
    timer = BreakTimer()
    t0 = datetime(2026, 3, 2, 10, 0, 0)

    timer.start_break(t0)
    timer.start_break(datetime(2026, 3, 2, 10, 1, 0))  # already on break: ignored
    assert timer.is_on_break
    assert timer.break_elapsed_seconds(datetime(2026, 3, 2, 10, 5, 0)) == 300

    assert timer.resume_work(datetime(2026, 3, 2, 10, 10, 0)) == 600
    assert not timer.is_on_break
    assert timer.resume_work(datetime(2026, 3, 2, 10, 11, 0)) == 0
    assert timer.total_break_seconds(datetime(2026, 3, 2, 11, 0, 0)) == 600
