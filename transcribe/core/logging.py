"""
Logging configuration for the transcribe tool
"""

import datetime
import json
import logging
import sys
from typing import Optional, TextIO


class JsonFormatter(logging.Formatter):
    """One JSON object per log record"""

    def __init__(self, service_name: Optional[str] = None):
        super().__init__()
        self.service_name = service_name

    def format(self, record):
        log_entry = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if self.service_name:
            log_entry["service"] = self.service_name

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry)


def configure_logging(
    level: str = "INFO",
    format_type: str = "text",
    service_name: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure logging for the command line tool

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_type: Format type ("json" or "text")
        service_name: Service name to include in logs
        stream: Output stream, stderr by default so stdout only carries results
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Clear any existing handlers
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)

    if format_type == "json":
        formatter = JsonFormatter(service_name)
    else:
        format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        if service_name:
            format_string = f"%(asctime)s [%(levelname)s] {service_name}.%(name)s: %(message)s"
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root.setLevel(log_level)
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


class ExtraFieldsAdapter(logging.LoggerAdapter):
    """Attach a fixed set of structured fields to every record"""

    def process(self, msg, kwargs):
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        kwargs["extra"]["extra_fields"] = self.extra
        return msg, kwargs


def get_logger(name: str, extra_fields: Optional[dict] = None) -> logging.Logger:
    """
    Get a logger with optional extra fields for structured logging

    Args:
        name: Logger name
        extra_fields: Extra fields to include in all log messages

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if extra_fields:
        return ExtraFieldsAdapter(logger, extra_fields)

    return logger
