"""
state.py: Persisted state for the announcer.

Everything the bot has to remember across restarts lives in one JSON
document:

    {
        "<namespace>_<uid>_<YYYY-MM-DD>_<suffix>": true,   # fired announcements
        "scheduled": [ {reminder}, ... ],                  # active one-shot reminders
        "config": { "announcement_channel_id": ..., ... }  # runtime configuration
    }

The document is rewritten wholesale after every mutation. Storage goes through
a small backend port so tests can swap the file for an in-memory dict.
"""

import os
import json
import copy
import tempfile
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Any, Optional

from utils.logging import logger
from utils.timezone_utils import parse_utc

SCHEDULED_KEY = "scheduled"
CONFIG_KEY = "config"
RESERVED_KEYS = (SCHEDULED_KEY, CONFIG_KEY)

# Configuration fields settable at runtime
CONFIG_FIELDS = (
    "announcement_channel_id",
    "reminder_channel_id",
    "ping_role_id",
    "access_role_id",
)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ STORAGE BACKENDS                                                          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class StateBackend:
    """Persistence port: reads and writes the whole state document."""

    def read(self) -> Dict[str, Any]:
        raise NotImplementedError

    def write(self, document: Dict[str, Any]) -> None:
        raise NotImplementedError


class JsonFileBackend(StateBackend):
    """Stores the state document as a JSON file on disk."""

    def __init__(self, path: str):
        self.path = path

    def read(self) -> Dict[str, Any]:
        """Load the document. Missing or corrupt files yield an empty document."""
        try:
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning(f"State file {self.path} does not contain an object. Starting fresh.")
        except json.JSONDecodeError:
            logger.warning(f"State file {self.path} is corrupted. Starting fresh.")
        except OSError as e:
            logger.exception(f"Error reading state file {self.path}: {e}")
        return {}

    def write(self, document: Dict[str, Any]) -> None:
        # Write to a temp file in the same directory, then swap it in,
        # so a crash mid-write never leaves a truncated state file behind.
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class MemoryBackend(StateBackend):
    """In-memory backend. Documents go through JSON so tests see what a file would hold."""

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        self.document = copy.deepcopy(document) if document else {}
        self.writes = 0

    def read(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self.document))

    def write(self, document: Dict[str, Any]) -> None:
        self.document = json.loads(json.dumps(document))
        self.writes += 1

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ SCHEDULED REMINDER RECORD                                                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝

@dataclass
class ScheduledReminder:
    id: str
    channel_id: int
    fire_at: str  # ISO-8601 UTC
    message: str
    fired: bool = False

    @property
    def fire_at_time(self) -> Optional[datetime]:
        return parse_utc(self.fire_at)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["ScheduledReminder"]:
        """Build a reminder from a persisted record, or None if the record is unusable."""
        try:
            return cls(
                id=str(data["id"]),
                channel_id=int(data["channel_id"]),
                fire_at=str(data["fire_at"]),
                message=str(data.get("message", "")),
                fired=bool(data.get("fired", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping malformed scheduled reminder {data!r}: {e}")
            return None

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ BOT STATE                                                                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class BotState:
    """
    Process-wide state shared by both schedulers and the command handlers.

    Holds the idempotency keys of fired announcements, the active reminder
    list and the runtime configuration. Every mutation is flushed to the
    backend before returning, so a suspension point never exposes state that
    only exists in memory. A failing flush is logged and the in-memory copy
    keeps serving reads for the rest of the process lifetime.
    """

    def __init__(self, backend: StateBackend, defaults: Optional[Dict[str, Any]] = None):
        self.backend = backend
        self.defaults = {k: v for k, v in (defaults or {}).items() if k in CONFIG_FIELDS}
        self.fired: Dict[str, bool] = {}
        self.scheduled: List[ScheduledReminder] = []
        self.config: Dict[str, Any] = dict(self.defaults)
        self.last_flush_ok = True

    # --- persistence ---

    def load(self) -> "BotState":
        document = self.backend.read()
        self.fired = {
            key: True
            for key, value in document.items()
            if key not in RESERVED_KEYS and value is True
        }
        self.scheduled = []
        for record in document.get(SCHEDULED_KEY) or []:
            reminder = ScheduledReminder.from_dict(record) if isinstance(record, dict) else None
            if reminder:
                self.scheduled.append(reminder)
        self.config = dict(self.defaults)
        stored_config = document.get(CONFIG_KEY)
        if isinstance(stored_config, dict):
            self.config.update({k: v for k, v in stored_config.items() if k in CONFIG_FIELDS})
        logger.info(
            f"Loaded state: {len(self.fired)} fired keys, "
            f"{len(self.scheduled)} scheduled reminders"
        )
        return self

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = dict(self.fired)
        document[SCHEDULED_KEY] = [r.to_dict() for r in self.scheduled]
        document[CONFIG_KEY] = dict(self.config)
        return document

    def flush(self) -> bool:
        try:
            self.backend.write(self.to_document())
            self.last_flush_ok = True
        except Exception as e:
            if self.last_flush_ok:
                logger.exception(f"Failed to persist state, continuing in memory: {e}")
            else:
                logger.error(f"Failed to persist state again: {e}")
            self.last_flush_ok = False
        return self.last_flush_ok

    # --- idempotency keys ---

    @property
    def is_fresh(self) -> bool:
        """True when no announcement has ever been recorded."""
        return not self.fired

    def has(self, key: str) -> bool:
        return self.fired.get(key, False)

    def mark(self, key: str) -> None:
        if key in RESERVED_KEYS:
            raise ValueError(f"'{key}' is reserved and cannot be used as an idempotency key")
        if self.fired.get(key):
            return
        self.fired[key] = True
        self.flush()

    # --- scheduled reminders ---

    def add_reminder(self, reminder: ScheduledReminder) -> None:
        self.scheduled.append(reminder)
        self.flush()

    def active_reminders(self) -> List[ScheduledReminder]:
        return [r for r in self.scheduled if not r.fired]

    def prune_fired(self) -> int:
        before = len(self.scheduled)
        self.scheduled = [r for r in self.scheduled if not r.fired]
        removed = before - len(self.scheduled)
        if removed:
            self.flush()
        return removed

    # --- configuration ---

    def get_config(self, name: str) -> Any:
        return self.config.get(name)

    def set_config(self, name: str, value: Any) -> None:
        if name not in CONFIG_FIELDS:
            raise KeyError(f"Unknown configuration field: {name}")
        self.config[name] = value
        logger.info(f"Configuration updated: {name} = {value}")
        self.flush()

    def ping_text(self, fallback: str = "") -> str:
        """Mention line for announcements: the ping role if configured, else `fallback`."""
        role_id = self.config.get("ping_role_id")
        return f"<@&{role_id}>" if role_id else fallback
