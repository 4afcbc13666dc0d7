# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                        ANNOUNCEMENT TRIGGER RULES                        ║
# ║    Declarative rule table mapping event types to timed announcements      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
rules.py: Trigger rule table and evaluation.

Every event type maps to a RuleSet: a key namespace plus a list of
TriggerRules. A rule is either a point rule, due from `anchor + offset`
onwards with no upper bound, or a window rule, due only inside
`[anchor + offset, until_anchor + until_offset)`.

Evaluation is stateless. Given an event and the current time it reports
which rules are due and the idempotency key of each; the caller decides
whether a key has already fired. A window that closes between two polls is
skipped rather than announced late.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, Optional, Tuple

from utils.logging import logger
from utils.timezone_utils import iso_date_utc, format_utc
from .calendar_source import NO_UID

START = "start"
END = "end"
ANCHORS = (START, END)


class RuleConfigError(Exception):
    """The rules file is missing, malformed or describes an invalid rule."""

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ RULE TYPES                                                                ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def _anchor_time(event, anchor: str) -> datetime:
    return event.start if anchor == START else event.end


@dataclass(frozen=True)
class TriggerRule:
    suffix: str
    message: str
    anchor: str = START
    offset: timedelta = timedelta(0)
    until_anchor: Optional[str] = None
    until_offset: timedelta = timedelta(0)

    def __post_init__(self):
        if self.anchor not in ANCHORS:
            raise RuleConfigError(f"Rule '{self.suffix}': unknown anchor '{self.anchor}'")
        if self.until_anchor is not None and self.until_anchor not in ANCHORS:
            raise RuleConfigError(f"Rule '{self.suffix}': unknown until_anchor '{self.until_anchor}'")
        if not self.suffix:
            raise RuleConfigError("Rule suffix must not be empty")

    @property
    def is_window(self) -> bool:
        return self.until_anchor is not None

    def opens_at(self, event) -> datetime:
        return _anchor_time(event, self.anchor) + self.offset

    def closes_at(self, event) -> Optional[datetime]:
        if not self.is_window:
            return None
        return _anchor_time(event, self.until_anchor) + self.until_offset

    def is_due(self, event, now: datetime) -> bool:
        if now < self.opens_at(event):
            return False
        closes = self.closes_at(event)
        return closes is None or now < closes


@dataclass(frozen=True)
class RuleSet:
    namespace: str
    rules: Tuple[TriggerRule, ...]

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CANONICAL RULE SHAPES                                                     ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def open_at(anchor: str, suffix: str, message: str) -> TriggerRule:
    """Fires once when `now >= anchor`."""
    return TriggerRule(suffix=suffix, message=message, anchor=anchor)


def open_after_end(hours: float, suffix: str, message: str) -> TriggerRule:
    """Fires once when `now >= end + hours`."""
    return TriggerRule(suffix=suffix, message=message, anchor=END, offset=timedelta(hours=hours))


def warn_before(anchor: str, hours: float, suffix: str, message: str) -> TriggerRule:
    """Fires once inside `[anchor - hours, anchor)`."""
    return TriggerRule(
        suffix=suffix,
        message=message,
        anchor=anchor,
        offset=-timedelta(hours=hours),
        until_anchor=anchor,
    )


def close_at(anchor: str, suffix: str, message: str) -> TriggerRule:
    """Fires once when `now >= anchor`."""
    return TriggerRule(suffix=suffix, message=message, anchor=anchor)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ DEFAULT RULE TABLE                                                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

DEFAULT_RULES: Dict[str, RuleSet] = {
    "registration-window": RuleSet("reg", (
        open_at(START, "open", "📢 Registration for **{summary}** is open!"),
        warn_before(END, 6, "warn_6h_before_end",
                    "⏳ Registration for **{summary}** closes in 6 hours. Don't forget to register!"),
        close_at(END, "close", "🔒 Registration for **{summary}** is now closed."),
    )),
    "post-event-registration": RuleSet("post", (
        open_after_end(0, "open_after_end", "📢 Registration for the next **{summary}** is open!"),
        warn_before(START, 24, "closed_24h_before_start",
                    "🔒 Registration for **{summary}** is now closed."),
    )),
    "single-warning": RuleSet("warn", (
        warn_before(START, 24, "24h_before_start", "⏰ **{summary}** starts in 1 day. Get ready!"),
    )),
    "ark_registration": RuleSet("aoo", (
        open_at(START, "open", "AoO registration is open! Reach out to AoO team to apply."),
        warn_before(END, 24, "24h_before_end",
                    "AoO registration ends in 1 day. Don't forget to register!"),
    )),
    "mge": RuleSet("mge", (
        open_after_end(0, "open_after_end", "MGE registration is open! Reach out to Harley Quinn."),
        warn_before(START, 24, "closed_24h_before_start", "MGE registration is now closed."),
    )),
    "goldhead": RuleSet("goldhead", (
        warn_before(START, 24, "24h_before_start", "20 Gold Head Event starts in 1 day. Get ready!"),
    )),
}

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ EVALUATION                                                                ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def make_key(namespace: str, event, suffix: str) -> str:
    """
    Idempotency key for one rule of one event instance.

    The start day separates recurring instances that share a UID.
    """
    uid = getattr(event, "uid", None) or NO_UID
    return f"{namespace}_{uid}_{iso_date_utc(event.start)}_{suffix}"


def due_triggers(event, rule_set: RuleSet, now: datetime) -> Iterator[Tuple[str, TriggerRule]]:
    """Yield (key, rule) for every rule of `rule_set` that is due for `event` at `now`."""
    for rule in rule_set.rules:
        if rule.is_due(event, now):
            yield make_key(rule_set.namespace, event, rule.suffix), rule


def render_message(rule: TriggerRule, event, ping: str = "") -> str:
    """Fill the rule's template and prepend the mention line."""
    fields = {
        "summary": getattr(event, "summary", "") or "Event",
        "start": format_utc(event.start),
        "end": format_utc(event.end),
    }
    try:
        body = rule.message.format(**fields)
    except (KeyError, IndexError, ValueError):
        logger.warning(f"Could not render template for rule '{rule.suffix}', sending it as-is")
        body = rule.message
    return f"{ping}\n{body}" if ping else body

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ RULES FILE                                                                ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def _parse_rule(data: Dict[str, Any]) -> TriggerRule:
    try:
        return TriggerRule(
            suffix=str(data["suffix"]),
            message=str(data["message"]),
            anchor=data.get("anchor", START),
            offset=timedelta(hours=float(data.get("offset_hours", 0))),
            until_anchor=data.get("until_anchor"),
            until_offset=timedelta(hours=float(data.get("until_offset_hours", 0))),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise RuleConfigError(f"Invalid rule definition {data!r}: {e}") from e


def parse_rules(data: Dict[str, Any]) -> Dict[str, RuleSet]:
    """
    Build a rule table from a decoded rules document.

    Format:
        {"<type>": {"namespace": "reg", "rules": [
            {"suffix": "open", "message": "...", "anchor": "start", "offset_hours": 0},
            {"suffix": "warn", "message": "...", "anchor": "end", "offset_hours": -6,
             "until_anchor": "end", "until_offset_hours": 0}
        ]}}
    """
    if not isinstance(data, dict) or not data:
        raise RuleConfigError("Rules document must be a non-empty object")

    table = {}
    namespaces = set()
    for event_type, entry in data.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("rules"), list):
            raise RuleConfigError(f"Type '{event_type}' needs a 'rules' list")
        namespace = str(entry.get("namespace") or event_type)
        if namespace in namespaces:
            raise RuleConfigError(f"Namespace '{namespace}' is used by more than one type")
        namespaces.add(namespace)
        rules = tuple(_parse_rule(rule) for rule in entry["rules"])
        suffixes = [rule.suffix for rule in rules]
        if len(set(suffixes)) != len(suffixes):
            raise RuleConfigError(f"Type '{event_type}' has duplicate rule suffixes")
        table[event_type.lower()] = RuleSet(namespace, rules)
    return table


def load_rules(path: Optional[str]) -> Dict[str, RuleSet]:
    """Load the rule table from `path`, or return the built-in table when no path is given."""
    if not path:
        return DEFAULT_RULES
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RuleConfigError(f"Could not read rules file {path}: {e}") from e
    table = parse_rules(data)
    logger.info(f"Loaded {len(table)} event types from {path}")
    return table
