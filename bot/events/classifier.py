"""
Event type classification.

Calendar entries opt into announcements by carrying a `Type: <token>` tag in
their description, summary or location. Entries without a tag are ignored.
"""
import re
from typing import Optional

TYPE_PATTERN = re.compile(r"Type:\s*([a-z0-9_-]+)", re.IGNORECASE)

# Fields searched in order; the first match wins
TEXT_FIELDS = ("description", "summary", "location")


def classify_text(text) -> Optional[str]:
    """Return the lower-cased type token found in `text`, or None."""
    if not isinstance(text, str) or not text:
        return None
    match = TYPE_PATTERN.search(text)
    return match.group(1).lower() if match else None


def get_event_type(event) -> Optional[str]:
    """Return the event's type token, or None when it carries no tag."""
    for field in TEXT_FIELDS:
        token = classify_text(getattr(event, field, None))
        if token:
            return token
    return None
