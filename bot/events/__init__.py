"""
events package: calendar feed access, event classification, trigger rules
and the picker logic, re-exported from submodules.
"""
from .calendar_source import (
    NO_UID,
    CalendarEvent,
    CalendarFetchError,
    IcsCalendarSource,
    parse_ics,
)
from .classifier import classify_text, get_event_type
from .rules import (
    START,
    END,
    DEFAULT_RULES,
    RuleConfigError,
    RuleSet,
    TriggerRule,
    close_at,
    due_triggers,
    load_rules,
    make_key,
    open_after_end,
    open_at,
    parse_rules,
    render_message,
    warn_before,
)
from .picker import (
    MAX_OPTIONS,
    REMINDER_LEADS,
    OutsideEventWindow,
    date_options,
    hour_options,
    reminder_plan,
    schedule_event_reminders,
    selected_instant,
)

__all__ = [
    'NO_UID', 'CalendarEvent', 'CalendarFetchError', 'IcsCalendarSource', 'parse_ics',
    'classify_text', 'get_event_type',
    'START', 'END', 'DEFAULT_RULES', 'RuleConfigError', 'RuleSet', 'TriggerRule',
    'close_at', 'due_triggers', 'load_rules', 'make_key', 'open_after_end', 'open_at',
    'parse_rules', 'render_message', 'warn_before',
    'MAX_OPTIONS', 'REMINDER_LEADS', 'OutsideEventWindow', 'date_options', 'hour_options',
    'reminder_plan', 'schedule_event_reminders', 'selected_instant',
]
