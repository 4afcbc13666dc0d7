"""
Tests for the date and hour steps of the reminder picker views.
"""
import asyncio
from datetime import date
from types import SimpleNamespace

from conftest import StaticSource, make_event, utc
from bot.services import BotServices
from bot.tasks import AnnouncementScheduler, ReminderScheduler
from bot.views import DatePickerView, HourPickerView

AUTHOR_ID = 1234


class FakeResponse:
    def __init__(self):
        self.edits = []

    async def edit_message(self, content=None, view=None):
        self.edits.append((content, view))


def make_interaction(value):
    return SimpleNamespace(
        user=SimpleNamespace(id=AUTHOR_ID),
        data={"values": [value]},
        response=FakeResponse(),
    )


def make_services(state, sink):
    source = StaticSource()
    return BotServices(
        state=state,
        source=source,
        announcements=AnnouncementScheduler(state, source, sink),
        reminders=ReminderScheduler(state, sink),
        ping_fallback="@everyone",
    )


def pick(view_factory, value):
    async def scenario():
        view = view_factory()
        interaction = make_interaction(value)
        await view.select_callback(interaction)
        return interaction.response.edits[-1]

    return asyncio.run(scenario())


def test_date_step_offers_hours_inside_event(state, sink):
    services = make_services(state, sink)
    event = make_event(start=utc(2099, 1, 1, 21), end=utc(2099, 1, 2, 2))
    days = [date(2099, 1, 1), date(2099, 1, 2)]

    content, view = pick(lambda: DatePickerView(services, AUTHOR_ID, 500, event, days), "2099-01-02")

    assert isinstance(view, HourPickerView)
    assert "2099-01-02" in content
    assert [option.value for option in view.children[0].options] == ["0", "1"]


def test_hour_step_schedules_reminders(state, sink):
    services = make_services(state, sink)
    event = make_event(start=utc(2099, 1, 1), end=utc(2099, 1, 2), summary="Spring Cup")

    content, view = pick(
        lambda: HourPickerView(services, AUTHOR_ID, 500, event, date(2099, 1, 1), [14]), "14")

    assert view is None
    assert content.startswith("✅ Scheduled 2 reminder(s) in <#500>")
    assert [r.fire_at_time for r in services.reminders.pending()] == [
        utc(2099, 1, 1, 13, 30), utc(2099, 1, 1, 13, 50)]


def test_hour_step_outside_window_is_refused(state, sink):
    services = make_services(state, sink)
    event = make_event(start=utc(2099, 1, 1, 12), end=utc(2099, 1, 1, 18))

    content, view = pick(
        lambda: HourPickerView(services, AUTHOR_ID, 500, event, date(2099, 1, 1), [18]), "18")

    assert view is None
    assert content.startswith("❌") and "outside the event window" in content
    assert services.reminders.pending() == []


def test_hour_step_reports_elapsed_reminders(state, sink):
    services = make_services(state, sink)
    event = make_event(start=utc(2020, 1, 1), end=utc(2020, 1, 2))

    content, view = pick(
        lambda: HourPickerView(services, AUTHOR_ID, 500, event, date(2020, 1, 1), [14]), "14")

    assert view is None
    assert "already passed" in content
    assert services.reminders.pending() == []
