# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                       BOT TASKS PACKAGE INIT                         ║
# ║    Imports the scheduler modules and provides the setup function that     ║
# ║    starts both background loops.                                         ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
tasks package: background loops for calendar announcements and reminders.
"""
from .health import TaskLock, update_task_health, get_task_status, is_task_running
from .utilities import DiscordSink, DeliveryGuarantee, DELIVERY_GUARANTEES
from .announcements import (
    ANNOUNCEMENT_TASK,
    AnnouncementScheduler,
    create_announcement_loop,
)
from .reminders import (
    REMINDER_TASK,
    ReminderScheduler,
    create_reminder_loop,
)

from utils.logging import logger

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ TASK SETUP FUNCTIONS                                                      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- start_all_tasks ---
# Starts the announcement and reminder loops that are not already running.
# Args:
#     loops: the tasks.Loop objects created by create_*_loop.
# Returns: True if every loop is running afterwards.
def start_all_tasks(*loops):
    ok = True
    for loop in loops:
        try:
            if not loop.is_running():
                loop.start()
        except Exception as e:
            logger.exception(f"❌ Error starting task {loop.coro.__name__}: {e}")
            ok = False
    if ok:
        logger.info(
            "✅ All scheduled tasks started "
            f"(delivery: {', '.join(g.value for g in DELIVERY_GUARANTEES)})"
        )
    return ok


__all__ = [
    'TaskLock', 'update_task_health', 'get_task_status', 'is_task_running',
    'DiscordSink', 'DeliveryGuarantee', 'DELIVERY_GUARANTEES',
    'ANNOUNCEMENT_TASK', 'AnnouncementScheduler', 'create_announcement_loop',
    'REMINDER_TASK', 'ReminderScheduler', 'create_reminder_loop',
    'start_all_tasks',
]
