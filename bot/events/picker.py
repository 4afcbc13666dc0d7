"""
Date/hour picker logic behind the interactive reminder flow.

The Discord views only render what these functions return: the selectable
UTC days of an event window, the selectable hours of one of those days, and
the reminders to schedule once an hour has been chosen.
"""
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from utils.timezone_utils import UTC, to_utc, utcnow, format_utc

# Discord select menus accept at most 25 options
MAX_OPTIONS = 25

# Minutes before the chosen moment at which reminders go out
REMINDER_LEADS = (30, 10)


class OutsideEventWindow(ValueError):
    """The selected moment does not fall inside the event's [start, end) window."""


def date_options(start: datetime, end: datetime, limit: int = MAX_OPTIONS) -> List[date]:
    """UTC calendar days overlapping [start, end), earliest first, at most `limit`."""
    start, end = to_utc(start), to_utc(end)
    if end <= start:
        return []
    last_day = (end - timedelta(microseconds=1)).date()
    days = []
    day = start.date()
    while day <= last_day and len(days) < limit:
        days.append(day)
        day += timedelta(days=1)
    return days


def selected_instant(day: date, hour: int) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=UTC)


def hour_options(day: date, start: datetime, end: datetime) -> List[int]:
    """Hours of `day` whose UTC instant lies inside [start, end)."""
    start, end = to_utc(start), to_utc(end)
    return [h for h in range(24) if start <= selected_instant(day, h) < end]


def reminder_plan(instant: datetime, now: datetime,
                  leads: Tuple[int, ...] = REMINDER_LEADS) -> List[Tuple[int, datetime]]:
    """(lead minutes, fire time) pairs still in the future at `now`."""
    plan = []
    for lead in leads:
        fire_at = instant - timedelta(minutes=lead)
        if fire_at > now:
            plan.append((lead, fire_at))
    return plan


def reminder_message(summary: str, lead: int, instant: datetime, ping: str = "") -> str:
    body = f"⏰ **{summary or 'Event'}** starts in {lead} minutes ({format_utc(instant)})."
    return f"{ping}\n{body}" if ping else body


def schedule_event_reminders(scheduler, channel_id: int, event, day: date, hour: int,
                             ping: str = "", now: Optional[datetime] = None) -> list:
    """
    Schedule the lead-time reminders for `day`@`hour` UTC inside `event`.

    Raises OutsideEventWindow when the moment is not inside the event window.
    Reminders whose fire time already passed are skipped.
    Returns: the ScheduledReminder records that were created.
    """
    now = to_utc(now) if now else utcnow()
    instant = selected_instant(day, hour)
    if not (to_utc(event.start) <= instant < to_utc(event.end)):
        raise OutsideEventWindow(f"{format_utc(instant)} is outside the event window")

    created = []
    for lead, fire_at in reminder_plan(instant, now):
        message = reminder_message(getattr(event, "summary", ""), lead, instant, ping)
        reminder = scheduler.schedule(channel_id, fire_at, message, now=now)
        if reminder:
            created.append(reminder)
    return created
