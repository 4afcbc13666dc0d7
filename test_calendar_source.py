"""
Tests for the ICS feed boundary.
"""
import pytest
import requests

from conftest import utc
from bot.events import NO_UID, CalendarFetchError, IcsCalendarSource, get_event_type, parse_ics
from bot.events import calendar_source

ICS_TEXT = "\r\n".join([
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//test//announcer//EN",
    "BEGIN:VEVENT",
    "UID:mge-2025@example.com",
    "DTSTAMP:20250101T000000Z",
    "DTSTART:20250301T000000Z",
    "DTEND:20250303T000000Z",
    "SUMMARY:Mightiest Governor",
    "DESCRIPTION:Type: mge",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "DTSTAMP:20250101T000000Z",
    "DTSTART:20250310T120000Z",
    "DTEND:20250310T130000Z",
    "SUMMARY:No uid here",
    "END:VEVENT",
    "END:VCALENDAR",
    "",
])


def test_parse_ics_converts_events():
    events = parse_ics(ICS_TEXT)
    assert len(events) == 2
    first = events[0]
    assert first.uid == "mge-2025@example.com"
    assert first.start == utc(2025, 3, 1)
    assert first.end == utc(2025, 3, 3)
    assert first.summary == "Mightiest Governor"
    assert get_event_type(first) == "mge"


def test_generated_uid_is_replaced_by_sentinel():
    events = parse_ics(ICS_TEXT)
    assert events[1].uid == NO_UID


def test_invalid_ics_raises_fetch_error():
    with pytest.raises(CalendarFetchError):
        parse_ics("this is not a calendar")


def test_network_error_raises_fetch_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("unreachable")

    monkeypatch.setattr(calendar_source.requests, "get", boom)
    with pytest.raises(CalendarFetchError):
        IcsCalendarSource("https://example.invalid/cal.ics").fetch()


def test_fetch_parses_response(monkeypatch):
    class Response:
        text = ICS_TEXT
        encoding = None

        def raise_for_status(self):
            pass

    monkeypatch.setattr(calendar_source.requests, "get", lambda url, timeout: Response())
    events = IcsCalendarSource("https://example.invalid/cal.ics", timeout=3).fetch()
    assert [e.summary for e in events] == ["Mightiest Governor", "No uid here"]
