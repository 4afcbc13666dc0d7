"""
Tests for the date/hour picker logic behind the remind command.
"""
from datetime import date, timedelta

import pytest

from conftest import make_event, utc
from bot.events import (
    OutsideEventWindow,
    date_options,
    hour_options,
    reminder_plan,
    schedule_event_reminders,
)
from bot.tasks import ReminderScheduler


def test_date_options_cover_half_open_window():
    days = date_options(utc(2025, 3, 1), utc(2025, 3, 3))
    assert days == [date(2025, 3, 1), date(2025, 3, 2)]


def test_date_options_include_partial_last_day():
    days = date_options(utc(2025, 3, 1, 22), utc(2025, 3, 2, 1))
    assert days == [date(2025, 3, 1), date(2025, 3, 2)]


def test_date_options_truncate_at_25():
    days = date_options(utc(2025, 1, 1), utc(2025, 3, 1))
    assert len(days) == 25
    assert days[-1] == date(2025, 1, 1) + timedelta(days=24)


def test_date_options_empty_window():
    assert date_options(utc(2025, 3, 1), utc(2025, 3, 1)) == []


def test_hour_options_respect_window_edges():
    start, end = utc(2025, 3, 1, 21, 30), utc(2025, 3, 2, 3)
    assert hour_options(date(2025, 3, 1), start, end) == [22, 23]
    assert hour_options(date(2025, 3, 2), start, end) == [0, 1, 2]


def test_reminder_plan_skips_elapsed_leads():
    instant = utc(2025, 3, 1, 14)
    assert reminder_plan(instant, utc(2025, 3, 1, 13)) == [
        (30, utc(2025, 3, 1, 13, 30)),
        (10, utc(2025, 3, 1, 13, 50)),
    ]
    assert reminder_plan(instant, utc(2025, 3, 1, 13, 35)) == [(10, utc(2025, 3, 1, 13, 50))]
    assert reminder_plan(instant, utc(2025, 3, 1, 13, 30)) == [(10, utc(2025, 3, 1, 13, 50))]
    assert reminder_plan(instant, utc(2025, 3, 1, 13, 55)) == []


def test_selecting_hour_schedules_both_leads(state, sink):
    scheduler = ReminderScheduler(state, sink)
    event = make_event(start=utc(2025, 3, 1), end=utc(2025, 3, 3), summary="Spring Cup")

    created = schedule_event_reminders(scheduler, 999, event, date(2025, 3, 1), 14,
                                       ping="@everyone", now=utc(2025, 3, 1, 13))

    assert [r.fire_at_time for r in created] == [utc(2025, 3, 1, 13, 30), utc(2025, 3, 1, 13, 50)]
    assert created[0].message.startswith("@everyone\n⏰ **Spring Cup** starts in 30 minutes")
    assert len(state.scheduled) == 2


def test_selecting_hour_schedules_only_future_reminder(state, sink):
    scheduler = ReminderScheduler(state, sink)
    event = make_event(start=utc(2025, 3, 1), end=utc(2025, 3, 3), summary="Spring Cup")

    created = schedule_event_reminders(scheduler, 999, event, date(2025, 3, 1), 14,
                                       ping="@everyone", now=utc(2025, 3, 1, 13, 35))

    assert len(created) == 1
    assert created[0].fire_at_time == utc(2025, 3, 1, 13, 50)
    assert created[0].channel_id == 999
    assert created[0].message.startswith("@everyone\n⏰ **Spring Cup** starts in 10 minutes")
    assert [r.id for r in state.scheduled] == [created[0].id]


def test_selection_outside_window_is_rejected(state, sink):
    scheduler = ReminderScheduler(state, sink)
    event = make_event(start=utc(2025, 3, 1, 12), end=utc(2025, 3, 1, 18))
    with pytest.raises(OutsideEventWindow):
        schedule_event_reminders(scheduler, 1, event, date(2025, 3, 1), 18, now=utc(2025, 3, 1, 10))
    assert state.scheduled == []
