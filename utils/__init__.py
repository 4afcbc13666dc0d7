"""
utils package: environment, logging and time helpers shared by the bot.
"""
from .timezone_utils import (
    UTC,
    utcnow,
    to_utc,
    iso_date_utc,
    parse_utc,
    format_utc,
)

__all__ = [
    "UTC",
    "utcnow",
    "to_utc",
    "iso_date_utc",
    "parse_utc",
    "format_utc",
]
