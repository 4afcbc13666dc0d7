# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      CALENDAR ANNOUNCER LOGGING SETUP                    ║
# ║ Configures asynchronous, rotating file logging and colored console output. ║
# ║ Includes fallback mechanisms for log directory permissions.                ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Standard library imports
import logging
import sys
import platform
import atexit
import os
import tempfile
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from queue import Queue

# Third-party imports
from colorlog import ColoredFormatter

# Local application imports
from utils.environ import DEBUG, get_str_env

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ LOGGING CONFIGURATION AND CONSTANTS                                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Preferred log directory (often mounted in Docker)
LOG_DIR = get_str_env("LOG_DIR", "/data/logs")
LOG_FILE_NAME = "announcer.log"

# Fallback directories if LOG_DIR is not writable
FALLBACK_DIRS = [
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs"),
    tempfile.gettempdir(),
]

LOG_LEVEL = logging.DEBUG if DEBUG else logging.INFO

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ LOG DIRECTORY SETUP                                                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- find_log_file ---
# Tries the preferred LOG_DIR first, then each fallback directory.
# Returns: the log file path to use, or None when nothing is writable.
def find_log_file():
    for directory in [LOG_DIR, *FALLBACK_DIRS]:
        try:
            os.makedirs(directory, exist_ok=True)
            if os.access(directory, os.W_OK):
                return os.path.join(directory, LOG_FILE_NAME)
        except OSError as e:
            print(f"Notice: Could not use log directory {directory}: {e}")
    print("CRITICAL WARNING: Could not find any writable log directory. File logging disabled.")
    return None

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ LOGGER INITIALIZATION AND CONFIGURATION                                    ║
# ╚════════════════════════════════════════════════════════════════════════════╝

logger = logging.getLogger("calendarannouncer")
logger.setLevel(LOG_LEVEL)

active_log_file = None

# --- Prevent Re-initialization ---
if not getattr(logger, "_initialized", False):
    handlers = []

    file_formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(name)s [%(filename)s:%(lineno)d]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_formatter = ColoredFormatter(
        "%(log_color)s[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
    )

    # --- Setup File Handler (daily rotation, keeps 7 backups) ---
    active_log_file = find_log_file()
    if active_log_file:
        try:
            file_handler = TimedRotatingFileHandler(
                active_log_file,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(LOG_LEVEL)
            handlers.append(file_handler)
        except OSError as e:
            print(f"ERROR: Failed to set up file logging handler: {e}")
            active_log_file = None

    # --- Setup Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(LOG_LEVEL)
    handlers.append(console_handler)

    # --- Start Queue Listener ---
    # Records go through a queue so the event loop never blocks on disk I/O
    log_queue = Queue(-1)
    logger.addHandler(QueueHandler(log_queue))
    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    listener.start()
    logger._listener = listener
    logger._initialized = True

    def cleanup():
        try:
            listener.stop()
            for handler in handlers:
                handler.close()
        except Exception as e:
            print(f"Error during logging cleanup: {e}")

    atexit.register(cleanup)

    logger.debug(f"--- Logging Initialized ({platform.system()} {platform.release()}) ---")
    if active_log_file:
        logger.debug(f"Log file: {active_log_file}")
    else:
        logger.warning("File logging is disabled.")

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ UTILITY FUNCTIONS                                                          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- get_log_file_location ---
# Returns the path to the currently active log file, or a console-only notice.
def get_log_file_location():
    return active_log_file or "Console only (File logging disabled)"
