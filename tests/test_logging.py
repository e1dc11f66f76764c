"""
Tests for structured logging
"""

import json
import logging

from transfer_system.logging_config import (
    JSONFormatter, RequestIDFilter, get_request_id, log_action,
    reset_request_id, set_request_id, setup_logging
)


class ListHandler(logging.Handler):
    """Collects formatted records"""

    def __init__(self):
        super().__init__()
        self.lines = []

    def emit(self, record):
        self.lines.append(self.format(record))


def capture(name):
    logger = setup_logging("DEBUG", "json", logger_name=name)
    handler = ListHandler()
    handler.setFormatter(JSONFormatter(hostname="test-host"))
    handler.addFilter(RequestIDFilter())
    logger.handlers = [handler]
    return logger, handler


class TestJSONLogging:
    """Test JSON log output"""

    def test_log_action_fields(self):
        """Test that structured fields land in the JSON entry"""
        logger, handler = capture("test.logging.fields")

        log_action(
            logger, "info", "Transfer completed",
            action="transfer", resource="transfer:7",
            extra={"amount": "25.50"}
        )

        entry = json.loads(handler.lines[0])
        assert entry["message"] == "Transfer completed"
        assert entry["level"] == "INFO"
        assert entry["action"] == "transfer"
        assert entry["resource"] == "transfer:7"
        assert entry["extra"] == {"amount": "25.50"}
        assert entry["host"] == "test-host"
        assert "request_id" not in entry

    def test_context_request_id(self):
        """Test that the context request ID is attached to every record"""
        logger, handler = capture("test.logging.context")

        token = set_request_id("rid-42")
        try:
            assert get_request_id() == "rid-42"
            logger.info("plain message")
            log_action(logger, "warning", "structured message")
        finally:
            reset_request_id(token)

        assert get_request_id() is None
        entries = [json.loads(line) for line in handler.lines]
        assert [entry["request_id"] for entry in entries] == ["rid-42", "rid-42"]

    def test_exception_info(self):
        logger, handler = capture("test.logging.exception")

        try:
            raise ValueError("boom")
        except ValueError:
            log_action(logger, "error", "failed", exc_info=True)

        entry = json.loads(handler.lines[0])
        assert "ValueError: boom" in entry["exception"]

    def test_setup_logging_replaces_handlers(self):
        """Test that repeated setup does not duplicate handlers"""
        setup_logging("INFO", "text", logger_name="test.logging.setup")
        logger = setup_logging("WARNING", "json", logger_name="test.logging.setup")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.WARNING
        assert logger.propagate is False
