"""Unit tests for logging setup and startup checks."""

import logging
from datetime import date

import pytest

from hostmon.core.exceptions import StartupError
from hostmon.core.runtime import DailyFileHandler, ensure_privileges, setup_logging


@pytest.fixture
def clean_root_logger():
    """Remove handlers added by setup_logging after the test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.addLevelName(logging.WARNING, "WARNING")


class TestDailyFileHandler:
    """Tests for DailyFileHandler class."""

    def test_file_named_by_day(self, tmp_path):
        """Test the log file name carries the date."""
        handler = DailyFileHandler(tmp_path, today=lambda: date(2024, 3, 9))
        try:
            assert handler.current_path == tmp_path / "monitor_20240309.log"
        finally:
            handler.close()

    def test_switches_file_on_new_day(self, tmp_path):
        """Test records after midnight go to the next day's file."""
        days = [date(2024, 3, 9)]
        handler = DailyFileHandler(tmp_path, today=lambda: days[0])
        handler.setFormatter(logging.Formatter("%(message)s"))
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "first", None, None)
        try:
            handler.emit(record)
            days[0] = date(2024, 3, 10)
            record.msg = "second"
            handler.emit(record)
        finally:
            handler.close()

        assert (tmp_path / "monitor_20240309.log").read_text() == "first\n"
        assert (tmp_path / "monitor_20240310.log").read_text() == "second\n"

    def test_appends(self, tmp_path):
        """Test an existing day file is appended to."""
        path = tmp_path / "monitor_20240309.log"
        path.write_text("old\n")
        handler = DailyFileHandler(tmp_path, today=lambda: date(2024, 3, 9))
        handler.setFormatter(logging.Formatter("%(message)s"))
        try:
            handler.emit(logging.LogRecord("t", logging.INFO, __file__, 1, "new", None, None))
        finally:
            handler.close()

        assert path.read_text() == "old\nnew\n"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_log_dir(self, tmp_path, clean_root_logger):
        """Test the log directory is created and written."""
        log_dir = tmp_path / "nested" / "logs"

        handler = setup_logging(log_dir, "INFO", console=False)
        logging.getLogger("hostmon.test").warning("disk high")
        handler.flush()

        content = handler.current_path.read_text()
        assert "[WARN] disk high" in content
        assert clean_root_logger.level == logging.INFO

    def test_level_names(self, tmp_path, clean_root_logger):
        """Test log lines use the INFO, WARN and ERROR labels."""
        handler = setup_logging(tmp_path, "INFO", console=False)
        log = logging.getLogger("hostmon.test")
        log.info("cycle start")
        log.warning("memory high")
        log.error("nginx down")
        handler.flush()

        lines = handler.current_path.read_text().splitlines()
        assert [line.split("] ", 1)[1] for line in lines] == [
            "[INFO] cycle start",
            "[WARN] memory high",
            "[ERROR] nginx down",
        ]
        assert "WARNING" not in handler.current_path.read_text()

    def test_replaces_previous_handlers(self, tmp_path, clean_root_logger):
        """Test a second call does not duplicate handlers."""
        setup_logging(tmp_path, console=False)
        setup_logging(tmp_path, console=False)

        ours = [h for h in clean_root_logger.handlers if getattr(h, "_hostmon", False)]
        assert len(ours) == 1

    def test_unwritable_dir_is_startup_error(self, tmp_path):
        """Test a log dir that cannot be created raises StartupError."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        with pytest.raises(StartupError):
            setup_logging(blocker / "logs", console=False)


class TestEnsurePrivileges:
    """Tests for ensure_privileges function."""

    def test_root_ok(self):
        """Test uid 0 passes."""
        ensure_privileges(True, euid=0)

    def test_non_root_fails(self):
        """Test non-root uid is a startup error."""
        with pytest.raises(StartupError):
            ensure_privileges(True, euid=1000)

    def test_not_required(self):
        """Test the check can be disabled."""
        ensure_privileges(False, euid=1000)
