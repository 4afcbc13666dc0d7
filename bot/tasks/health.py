# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      BOT TASKS HEALTH MODULE                       ║
# ║    Provides the in-flight guard for background loops and tracks their    ║
# ║    last success and consecutive error counts.                            ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
Task health monitoring.

Handles:
- Skipping a loop iteration while the previous one is still in flight
- Tracking consecutive errors and the last successful run per task
"""
from datetime import datetime
from typing import Dict, Optional

from utils.logging import logger

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ SHARED TASK HEALTH STATE                                                  ║
# ╚════════════════════════════════════════════════════════════════════════════╝

_task_last_success: Dict[str, datetime] = {}
_task_locks: Dict[str, bool] = {}
_task_error_counts: Dict[str, int] = {}
_ERROR_WARNING_THRESHOLD = 3

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ TASK LOCKING MECHANISM                                                    ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- TaskLock (class) ---
# An asynchronous context manager to ensure only one instance of a task runs at a time.
# An overlapping tick is skipped, not queued.
# Exceptions raised inside the block are logged and counted, then suppressed
# so the surrounding loop keeps ticking.
class TaskLock:
    """Context manager for safely acquiring and releasing task locks"""
    def __init__(self, task_name: str):
        self.task_name = task_name
        self.acquired = False

    async def __aenter__(self):
        if _task_locks.get(self.task_name):
            logger.debug(f"Task {self.task_name} already running, skipping this iteration")
            return False

        _task_locks[self.task_name] = True
        self.acquired = True
        return True

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.acquired:
            _task_locks[self.task_name] = False
            self.acquired = False

        if exc_type and issubclass(exc_type, Exception):
            update_task_health(self.task_name, False)
            logger.error(f"Error in task {self.task_name}: {exc_val}", exc_info=(exc_type, exc_val, exc_tb))
            return True

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ TASK HEALTH UPDATING AND UTILITIES                                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- update_task_health ---
# Records the outcome of a task run.
# Success resets the error count; failure increments it and warns past the threshold.
def update_task_health(task_name: str, success: bool = True) -> None:
    if success:
        _task_last_success[task_name] = datetime.now()
        _task_error_counts[task_name] = 0
    else:
        error_count = _task_error_counts.get(task_name, 0) + 1
        _task_error_counts[task_name] = error_count
        if error_count >= _ERROR_WARNING_THRESHOLD:
            logger.warning(f"Task {task_name} has failed {error_count} consecutive times")

# --- is_task_running ---
def is_task_running(task_name: str) -> bool:
    return _task_locks.get(task_name, False)

# --- get_task_status ---
# Summarizes one task for the config command.
# Returns: dict with last_success (datetime or None) and error_count.
def get_task_status(task_name: str) -> Dict[str, Optional[object]]:
    return {
        "last_success": _task_last_success.get(task_name),
        "error_count": _task_error_counts.get(task_name, 0),
    }
