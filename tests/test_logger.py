"""Tests for the logging setup module."""

import io
import logging

import pytest

from certscan.utils.logger import (
    DocumentLogger,
    get_document_logger,
    get_logger,
    setup_logging,
)


@pytest.fixture
def bare_root():
    """Root logger without handlers, restored after the test."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers.clear()
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    """Tests for root logger configuration."""

    def test_writes_formatted_records(self, bare_root: logging.Logger) -> None:
        buf = io.StringIO()
        setup_logging("INFO", stream=buf)

        get_logger("certscan.cascade").info("Accepted %s", "cloud_vision")

        assert "certscan.cascade - INFO - Accepted cloud_vision" in buf.getvalue()
        assert bare_root.level == logging.INFO

    def test_level_is_case_insensitive(self, bare_root: logging.Logger) -> None:
        setup_logging("debug", stream=io.StringIO())
        assert bare_root.level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self, bare_root: logging.Logger) -> None:
        setup_logging("CHATTY", stream=io.StringIO())
        assert bare_root.level == logging.INFO

    def test_existing_handlers_are_kept(self, bare_root: logging.Logger) -> None:
        setup_logging("INFO", stream=io.StringIO())
        handlers = bare_root.handlers[:]

        setup_logging("DEBUG", stream=io.StringIO())

        assert bare_root.handlers == handlers
        assert bare_root.level == logging.INFO

    def test_third_party_loggers_quieted(self, bare_root: logging.Logger) -> None:
        setup_logging("DEBUG", stream=io.StringIO())
        assert logging.getLogger("pdfminer").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING


class TestDocumentLogger:
    """Tests for per-document log prefixes."""

    def test_prefixes_document_index(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="certscan.batch")
        doc_logger = get_document_logger(get_logger("certscan.batch"), 3)

        doc_logger.info("Failed: %s", "cannot open document")

        assert isinstance(doc_logger, DocumentLogger)
        assert caplog.records[-1].getMessage() == "[doc 3] Failed: cannot open document"
        assert caplog.records[-1].name == "certscan.batch"

    def test_same_name_returns_same_logger(self) -> None:
        assert get_logger("certscan.same") is get_logger("certscan.same")
