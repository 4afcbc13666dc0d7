"""
Tests for the access gate and the text command handlers.
"""
import asyncio
from types import SimpleNamespace

from conftest import StaticSource, make_event, utc
from bot.commands import (
    DENIED_MESSAGE,
    format_config,
    handle_check_now,
    handle_remind_command,
    handle_set_access_role,
    handle_set_channel,
    handle_set_ping,
    handle_show_config,
    is_authorized,
    upcoming_events,
)
from bot.services import BotServices
from bot.tasks import ANNOUNCEMENT_TASK, AnnouncementScheduler, ReminderScheduler, health
from config.state import BotState
from bot.views import EventPickerView


def run(coro):
    return asyncio.run(coro)


def member(admin=False, role_ids=()):
    return SimpleNamespace(
        id=1234,
        guild_permissions=SimpleNamespace(administrator=admin),
        roles=[SimpleNamespace(id=r) for r in role_ids],
    )


class FakeContext:
    def __init__(self, author, channel_id=300):
        self.author = author
        self.channel = SimpleNamespace(id=channel_id, mention=f"<#{channel_id}>")
        self.invoked_with = "test"
        self.messages = []

    async def send(self, content=None, **kwargs):
        self.messages.append((content, kwargs))


def make_services(state, sink, events=()):
    source = StaticSource(events)
    return BotServices(
        state=state,
        source=source,
        announcements=AnnouncementScheduler(state, source, sink, ping_text="@everyone"),
        reminders=ReminderScheduler(state, sink),
        ping_fallback="@everyone",
    )


def test_admin_only_until_access_role_configured():
    assert is_authorized(member(admin=True), None)
    assert not is_authorized(member(admin=False, role_ids=[7]), None)
    assert is_authorized(member(admin=False, role_ids=[7]), 7)
    assert not is_authorized(member(admin=True), 7)
    assert not is_authorized(None, None)


def test_denied_user_cannot_change_channel(state, sink):
    services = make_services(state, sink)
    ctx = FakeContext(member(admin=False))
    run(handle_set_channel(ctx, services))
    assert ctx.messages[0][0] == DENIED_MESSAGE
    assert state.get_config("announcement_channel_id") == 111


def test_set_channel_defaults_to_current_channel(state, backend, sink):
    services = make_services(state, sink)
    ctx = FakeContext(member(admin=True), channel_id=555)
    run(handle_set_channel(ctx, services))
    assert state.get_config("announcement_channel_id") == 555
    assert backend.document["config"]["announcement_channel_id"] == 555


def test_set_ping_and_clear(state, sink):
    services = make_services(state, sink)
    ctx = FakeContext(member(admin=True))
    run(handle_set_ping(ctx, services, SimpleNamespace(id=42, mention="<@&42>")))
    assert services.ping == "<@&42>"
    run(handle_set_ping(ctx, services, None))
    assert services.ping == "@everyone"


def test_access_role_takes_over_from_administrators(state, sink):
    services = make_services(state, sink)
    admin_ctx = FakeContext(member(admin=True))
    run(handle_set_access_role(admin_ctx, services, SimpleNamespace(id=9, mention="<@&9>")))
    assert state.get_config("access_role_id") == 9

    run(handle_show_config(admin_ctx, services))
    assert admin_ctx.messages[-1][0] == DENIED_MESSAGE

    role_ctx = FakeContext(member(role_ids=[9]))
    run(handle_show_config(role_ctx, services))
    assert "Current configuration" in role_ctx.messages[-1][0]


def test_format_config_lists_settings(state, sink):
    services = make_services(state, sink)
    text = format_config(services)
    assert "Announcement channel: <#111>" in text
    assert "Reminder channel: not set" in text
    assert "Pending reminders: 0" in text


def test_check_now_reports_announcements(state, sink):
    state.mark("seed")
    services = make_services(state, sink, [make_event("registration-window", start=utc(2020, 1, 1),
                                                      end=utc(2020, 1, 3))])
    ctx = FakeContext(member(admin=True))
    run(handle_check_now(ctx, services))
    assert "2 announcement(s)" in ctx.messages[-1][0]
    assert len(sink.sent) == 2


def test_upcoming_events_filters_and_orders():
    now = utc(2025, 3, 2)
    past = make_event(uid="past", start=utc(2025, 2, 1), end=utc(2025, 2, 2))
    later = make_event(uid="later", start=utc(2025, 3, 5), end=utc(2025, 3, 6))
    running = make_event(uid="running", start=utc(2025, 3, 1), end=utc(2025, 3, 3))
    assert [e.uid for e in upcoming_events([later, past, running], now)] == ["running", "later"]


def test_remind_without_events(state, sink):
    services = make_services(state, sink, [])
    ctx = FakeContext(member(admin=True))
    run(handle_remind_command(ctx, services))
    assert "no upcoming events" in ctx.messages[-1][0]


def test_remind_shows_event_picker(state, sink):
    events = [make_event(uid=f"e{i}", start=utc(2099, 1, 1 + i), end=utc(2099, 1, 2 + i)) for i in range(3)]
    services = make_services(state, sink, events)
    ctx = FakeContext(member(admin=True), channel_id=300)
    run(handle_remind_command(ctx, services))
    content, kwargs = ctx.messages[-1]
    view = kwargs["view"]
    assert isinstance(view, EventPickerView)
    assert len(view.events) == 3
    assert view.channel_id == 111  # announcement channel wins over the invoking channel


def test_check_now_without_channel_says_so(backend, sink):
    state = BotState(backend).load()
    services = make_services(state, sink, [make_event("registration-window", start=utc(2020, 1, 1),
                                                      end=utc(2020, 1, 3))])
    ctx = FakeContext(member(admin=True))
    run(handle_check_now(ctx, services))
    assert "No announcement channel is set" in ctx.messages[-1][0]
    assert "setchannel" in ctx.messages[-1][0]
    assert sink.sent == []
    assert services.source.calls == 0


def test_check_now_while_poll_in_flight(state, sink):
    services = make_services(state, sink, [make_event("registration-window")])
    health._task_locks[ANNOUNCEMENT_TASK] = True
    ctx = FakeContext(member(admin=True))
    run(handle_check_now(ctx, services))
    assert "already running" in ctx.messages[-1][0]
    assert services.source.calls == 0
