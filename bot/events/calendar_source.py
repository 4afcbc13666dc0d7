# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                         CALENDAR FEED SOURCE                             ║
# ║    Fetches the ICS feed and converts VEVENTs into CalendarEvent records   ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
calendar_source.py: ICS feed retrieval and parsing.

The announcement loop re-fetches the whole feed on every poll. A fetch or
parse failure raises CalendarFetchError so the caller can abandon that poll;
individual malformed events are skipped with a warning.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import requests
from ics import Calendar as ICS_Calendar

from utils.logging import logger
from utils.timezone_utils import to_utc

NO_UID = "no_uid"

# ics invents "<uuid4>@<first 4 chars>.org" for VEVENTs without a UID line.
# A fresh value on every parse would defeat the idempotency keys.
GENERATED_UID = re.compile(r"^[0-9a-f]{8}(-[0-9a-f]{4}){3}-[0-9a-f]{12}@[0-9a-f]{4}\.org$")


class CalendarFetchError(Exception):
    """The calendar feed could not be retrieved or parsed."""


@dataclass(frozen=True)
class CalendarEvent:
    uid: str
    start: datetime
    end: datetime
    summary: str = ""
    description: str = ""
    location: str = ""


# --- _arrow_to_utc ---
# ics exposes times as Arrow objects; all-day entries come back floating,
# which we read as UTC midnight boundaries.
def _arrow_to_utc(value) -> Optional[datetime]:
    if value is None:
        return None
    return to_utc(getattr(value, "datetime", value))


# --- _stable_uid ---
def _stable_uid(uid: Optional[str]) -> str:
    if not uid or GENERATED_UID.match(uid):
        return NO_UID
    return uid


# --- parse_ics ---
# Parses raw ICS text into CalendarEvent records sorted by start time.
# Events without a start are dropped; a missing end collapses to the start.
def parse_ics(text: str) -> List[CalendarEvent]:
    try:
        cal = ICS_Calendar(text)
    except Exception as e:
        raise CalendarFetchError(f"Could not parse ICS data: {e}") from e

    events = []
    for e in cal.events:
        try:
            start = _arrow_to_utc(e.begin)
            if start is None:
                continue
            end = _arrow_to_utc(e.end) or start
            events.append(CalendarEvent(
                uid=_stable_uid(e.uid),
                start=start,
                end=end,
                summary=e.name or "",
                description=e.description or "",
                location=e.location or "",
            ))
        except Exception as inner_e:
            logger.warning(f"Error processing individual ICS event: {inner_e}")
            continue

    events.sort(key=lambda ev: (ev.start, ev.uid))
    return events


class IcsCalendarSource:
    """Calendar source backed by a single ICS URL."""

    def __init__(self, url: str, timeout: int = 15):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> List[CalendarEvent]:
        """Download and parse the feed. Blocking; run it through asyncio.to_thread."""
        logger.debug(f"Fetching ICS events from {self.url}")
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise CalendarFetchError(f"Network error fetching ICS calendar: {e}") from e
        response.encoding = "utf-8"
        events = parse_ics(response.text)
        logger.debug(f"Parsed {len(events)} events from ICS calendar")
        return events
