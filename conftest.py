"""
Shared fixtures: an in-memory state, a recording notification sink and a
static calendar source, so scheduler passes run without Discord or HTTP.
"""
import os
import tempfile
from datetime import datetime

import pytest

# Keep test runs from writing logs into the project tree
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "calendarannouncer-test-logs"))

from config.state import BotState, MemoryBackend
from bot.events import CalendarEvent, CalendarFetchError
from bot.tasks import health
from utils.timezone_utils import UTC


class RecordingSink:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send(self, channel_id, text):
        self.sent.append((channel_id, text))
        return not self.fail


class StaticSource:
    def __init__(self, events=None, error=None):
        self.events = list(events or [])
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error:
            raise CalendarFetchError(self.error)
        return list(self.events)


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def make_event(event_type=None, start=utc(2025, 3, 1), end=utc(2025, 3, 3), uid="evt-1",
               summary="Spring Cup", description=None, location=""):
    if description is None:
        description = f"Type: {event_type}" if event_type else ""
    return CalendarEvent(uid=uid, start=start, end=end, summary=summary,
                         description=description, location=location)


@pytest.fixture(autouse=True)
def reset_task_health():
    health._task_locks.clear()
    health._task_error_counts.clear()
    health._task_last_success.clear()
    yield


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def state(backend):
    return BotState(backend, defaults={"announcement_channel_id": 111}).load()


@pytest.fixture
def sink():
    return RecordingSink()
