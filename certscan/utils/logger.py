"""Logging setup for the credential document pipeline.

``setup_logging`` configures the root logger once. Modules log through
``get_logger(__name__)``; work on one document of a batch logs through a
``DocumentLogger`` so interleaved records from worker threads can be told
apart.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty loggers of the PDF, imaging, and HTTP libraries.
_NOISY_LOGGERS: tuple[str, ...] = (
    "pdfminer",
    "PIL",
    "urllib3",
    "google",
    "httpx",
)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure the root logger, unless something already has.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        stream: Destination stream. Defaults to stdout.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    quiet_level = max(numeric_level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
    """
    return logging.getLogger(name)


class DocumentLogger(logging.LoggerAdapter):
    """Prefixes every message with the batch index of its document."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[doc {self.extra['document']}] {msg}", kwargs


def get_document_logger(logger: logging.Logger, index: int) -> DocumentLogger:
    return DocumentLogger(logger, {"document": index})
