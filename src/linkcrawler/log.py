"""
Logging setup for the command line and embedding applications.

Library modules only create module loggers; handlers are attached here.
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Optional


class CrawlFormatter(logging.Formatter):
    """
    One line per record:
    [ Tue Jan 06 05:32:41 AM 2026 ] : INFO : linkcrawler.core : Message
    """
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%a %b %d %I:%M:%S %p %Y")
        message = f"[ {timestamp} ] : {record.levelname} : {record.name} : {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logger(
    name: str = "linkcrawler",
    log_file: Optional[str] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the package logger once."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if setup_logger is called multiple times
    if logger.handlers:
        return logger

    formatter = CrawlFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
