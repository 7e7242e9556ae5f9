"""User-visible notices (toasts in a GUI, console lines in the CLI)."""
import logging
from typing import Callable

logger = logging.getLogger(__name__)

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"

Notifier = Callable[[str, str], None]

_LEVELS = {
    INFO: logging.INFO,
    SUCCESS: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


def log_notifier(message: str, level: str = INFO) -> None:
    """Default notifier: route notices to the log."""
    logger.log(_LEVELS.get(level, logging.INFO), message)
