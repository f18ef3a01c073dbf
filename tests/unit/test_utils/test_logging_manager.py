"""
Unit tests for logging utilities
"""

import logging
import pytest

from utils.logging_manager import (
    LogConfig, LogContext, LoggingManager, ModuleLoggers, TokenRedactingFilter, logging_manager,
)


@pytest.mark.unit
class TestLogContext:
    """Test cases for LogContext"""

    @pytest.fixture(autouse=True)
    def reset_metrics(self):
        logging_manager.reset_metrics()
        yield
        logging_manager.reset_metrics()

    def test_success_metrics(self):
        with LogContext("Database", "find", collection="ilmora.quotes"):
            pass

        metrics = logging_manager.get_metrics()
        assert metrics["Database.find_started"] == 1
        assert metrics["Database.find_completed"] == 1
        assert "Database.find_failed" not in metrics

    def test_failure_is_logged_and_propagated(self, caplog):
        """Test errors are recorded without being swallowed"""
        with caplog.at_level(logging.ERROR, logger="Database"):
            with pytest.raises(RuntimeError):
                with LogContext("Database", "insert", id=None):
                    raise RuntimeError("write failed")

        assert logging_manager.get_metrics()["Database.insert_failed"] == 1
        assert any("write failed" in record.getMessage() for record in caplog.records)

    def test_context_string_skips_none(self):
        context = LogContext("Database", "delete", id="abc", extra=None)
        assert context._get_context_str() == "Database.delete.id:abc"


@pytest.mark.unit
class TestModuleLoggers:
    """Test cases for module logger registry"""

    def test_singleton(self):
        assert LoggingManager() is logging_manager

    def test_named_loggers(self):
        assert ModuleLoggers.API.name == "API"
        assert ModuleLoggers.get_logger("Auth") is ModuleLoggers.Auth


@pytest.mark.unit
class TestTokenRedactingFilter:
    """Test cases for token redaction"""

    def _record(self, msg, args=None):
        return logging.LogRecord("API", logging.INFO, __file__, 1, msg, args, None)

    def test_redacts_bearer_token(self):
        record = self._record("[API] header was Bearer eyJhbGciOi.abc-def_123")
        assert TokenRedactingFilter().filter(record) is True
        assert record.getMessage() == "[API] header was Bearer ***"

    def test_redacts_formatted_args(self):
        record = self._record("[Auth] %s", ("Bearer secret-token",))
        TokenRedactingFilter().filter(record)
        assert "secret-token" not in record.getMessage()

    def test_leaves_other_messages(self):
        record = self._record("[API] GET /quotes - 200")
        TokenRedactingFilter().filter(record)
        assert record.getMessage() == "[API] GET /quotes - 200"


@pytest.mark.unit
class TestConsoleOutput:
    """Test cases for console handler placement"""

    def test_console_logging_leaves_stdout_clean(self, capsys):
        """Test log lines go to stderr so command output on stdout stays parseable"""
        logging_manager.configure(LogConfig(enable_file=False))
        try:
            logging.getLogger("ConsoleCheck").warning("[ConsoleCheck] console check")
        finally:
            logging_manager.configure(LogConfig(enable_console=False, enable_file=False))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[ConsoleCheck] console check" in captured.err
