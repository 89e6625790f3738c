# catalog_sync/config/logging_config.py

"""Per-run logging for catalog_sync.

Every launch gets ``logs/run_<YYYYMMDD_HHMMSS>.log``. All
``catalog_sync.*`` loggers propagate into it, so one file holds the
client's requests, the store's transitions and any saga rollbacks for
that run.

The stderr handler is optional: while the Textual TUI owns the
terminal, writing to stderr would corrupt the screen, so the TUI
launches with the file handler only.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from catalog_sync.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_level() -> int:
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL)
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(console: bool = True) -> Path:
    """Attach the per-run handlers to the ``catalog_sync`` logger.

    Args:
        console: Also echo records at ``Settings.CONSOLE_LOG_LEVEL``
            and above to stderr.

    Returns:
        Path of this run's log file.
    """
    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Settings.LOGS_DIR / f"run_{stamp}.log"

    root_logger = logging.getLogger("catalog_sync")
    root_logger.setLevel(logging.DEBUG)

    # Already configured for this process
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(file_handler)

    if console:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(_console_level())
        stderr_handler.setFormatter(logging.Formatter(_STDERR_FORMAT))
        root_logger.addHandler(stderr_handler)

    root_logger.debug("Run log opened at %s", log_file)
    return log_file
