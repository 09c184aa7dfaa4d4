"""
Process setup for the host monitor.

Configures the daily log file and verifies startup preconditions.
"""

import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from hostmon.core.exceptions import StartupError

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DailyFileHandler(logging.FileHandler):
    """
    Append-only log handler that writes one file per day.

    Files are named ``<prefix>_YYYYMMDD.log`` inside ``log_dir``. When the
    date changes the current file is closed and the next day's file opened.
    """

    def __init__(
        self,
        log_dir: Path,
        prefix: str = "monitor",
        today: Callable[[], date] = date.today,
    ):
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self._today = today
        self._current_day = today()
        super().__init__(self._path_for(self._current_day), mode="a", encoding="utf-8")

    def _path_for(self, day: date) -> Path:
        return self.log_dir / f"{self.prefix}_{day.strftime('%Y%m%d')}.log"

    @property
    def current_path(self) -> Path:
        """Path of the file currently being written."""
        return Path(self.baseFilename)

    def emit(self, record: logging.LogRecord) -> None:
        day = self._today()
        if day != self._current_day:
            self.acquire()
            try:
                if self.stream:
                    self.stream.close()
                    self.stream = None
                self._current_day = day
                self.baseFilename = os.path.abspath(self._path_for(day))
            finally:
                self.release()
        super().emit(record)


def setup_logging(
    log_dir: Path,
    level: str = "INFO",
    console: bool = True,
) -> DailyFileHandler:
    """
    Configure root logging for a monitor run.

    Args:
        log_dir: Directory for daily log files (created if missing)
        level: Log level name
        console: Also log to stderr

    Returns:
        The installed file handler

    Raises:
        StartupError: If the log directory cannot be created or written
    """
    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = DailyFileHandler(log_dir)
    except OSError as e:
        raise StartupError(f"Cannot write logs to {log_dir}: {e}") from e

    # Log lines read [INFO], [WARN], [ERROR]
    logging.addLevelName(logging.WARNING, "WARN")

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Replace handlers from an earlier call in the same process
    for old in [h for h in root.handlers if getattr(h, "_hostmon", False)]:
        root.removeHandler(old)
        old.close()

    handler._hostmon = True
    root.addHandler(handler)

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        stream._hostmon = True
        root.addHandler(stream)

    return handler


def ensure_privileges(require_root: bool, euid: Optional[int] = None) -> None:
    """
    Verify the process may query and restart system services.

    Raises:
        StartupError: If root is required and the effective uid is not 0
    """
    if not require_root:
        return
    if euid is None:
        euid = os.geteuid()
    if euid != 0:
        raise StartupError("This program must be run as root to manage services")
