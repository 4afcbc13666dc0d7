# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      CONFIGURATION PACKAGE INITIALIZER                     ║
# ║                                                                            ║
# ║  This package holds the persisted state of the announcer: fired            ║
# ║  announcement keys, scheduled reminders and runtime configuration.         ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- Exports ---
from .state import (
    BotState,               # Process-wide state shared by schedulers and commands
    ScheduledReminder,      # One-shot reminder record
    StateBackend,           # Persistence port
    JsonFileBackend,        # JSON file implementation of the port
    MemoryBackend,          # In-memory implementation used by tests
    CONFIG_FIELDS,          # Configuration fields settable at runtime
)
