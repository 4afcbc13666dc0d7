# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                       ENVIRONMENT CONFIGURATION                            ║
# ║    Centralized access and type conversion for environment variables.       ║
# ║       Includes helpers for boolean, integer, and string values.            ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Standard library imports
import os
from typing import List, Optional

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ HELPER FUNCTIONS                                                           ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- get_bool_env ---
# Retrieves an environment variable and interprets it as a boolean.
# Considers '1', 'true', 'yes' (case-insensitive) as True.
def get_bool_env(var_name: str, default: bool = False) -> bool:
    val = os.getenv(var_name, str(default)).lower()
    return val in ("1", "true", "yes")

# --- get_int_env ---
# Retrieves an environment variable and converts it to an integer.
# Falls back to the default when unset or not a number.
def get_int_env(var_name: str, default: int = 0) -> int:
    val_str = os.getenv(var_name)
    if val_str is None:
        return default
    try:
        return int(val_str)
    except ValueError:
        return default

# --- get_optional_int_env ---
# Like get_int_env, but returns None for unset, empty or invalid values.
# Used for Discord snowflake IDs where 0 is never meaningful.
def get_optional_int_env(var_name: str) -> Optional[int]:
    val_str = (os.getenv(var_name) or "").strip()
    if not val_str:
        return None
    try:
        return int(val_str)
    except ValueError:
        return None

# --- get_str_env ---
# Retrieves an environment variable as a string.
def get_str_env(var_name: str, default: str = "") -> str:
    return os.getenv(var_name, default)

# --- get_first_env ---
# Value of the first variable in `var_names` that is set and non-empty.
def get_first_env(*var_names: str, default: Optional[str] = None) -> Optional[str]:
    for var_name in var_names:
        value = os.getenv(var_name)
        if value:
            return value
    return default

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CORE CONFIGURATION VARIABLES                                               ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Debug mode flag (controls verbose logging)
DEBUG: bool = get_bool_env("DEBUG", False)

# Discord Bot Token (required). DISCORD_TOKEN is accepted for older deployments.
DISCORD_BOT_TOKEN: Optional[str] = get_first_env("DISCORD_BOT_TOKEN", "DISCORD_TOKEN")

# ICS feed polled by the announcement loop (required)
ICS_URL: Optional[str] = get_str_env("ICS_URL", None)

# Default announcement channel, used until /setchannel overrides it
CHANNEL_ID: Optional[int] = get_optional_int_env("CHANNEL_ID")

# Mention text prepended to announcements when no ping role is configured
PING_TEXT: str = get_str_env("PING_TEXT", "@everyone")

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ ADDITIONAL CONFIGURATION VARIABLES                                         ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Poll intervals for the two background loops
CHECK_EVERY_MINUTES: int = max(1, get_int_env("CHECK_EVERY_MINUTES", 10))
REMINDER_CHECK_SECONDS: int = max(5, get_int_env("REMINDER_CHECK_SECONDS", 30))

# Command prefix for text commands (e.g., '!')
COMMAND_PREFIX: str = get_str_env("COMMAND_PREFIX", "!")

# Role allowed to run configuration commands; administrators only when unset
ACCESS_ROLE_ID: Optional[int] = get_optional_int_env("ACCESS_ROLE_ID")

# Location of the persisted state document
STATE_FILE: str = get_str_env("STATE_FILE", "state.json")

# Optional JSON file replacing the built-in trigger rule table
RULES_FILE: Optional[str] = get_str_env("RULES_FILE", None)

# Timeout for the calendar feed HTTP request
FETCH_TIMEOUT_SECONDS: int = get_int_env("FETCH_TIMEOUT_SECONDS", 15)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ VALIDATION                                                                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- validate_environment ---
# Returns the names of mandatory variables that are missing.
# An empty list means the process can start.
def validate_environment() -> List[str]:
    missing = []
    if not DISCORD_BOT_TOKEN:
        missing.append("DISCORD_BOT_TOKEN (or DISCORD_TOKEN)")
    if not ICS_URL:
        missing.append("ICS_URL")
    return missing
