# 📄 File: members_api/shared/utils/logging.py

# 🧭 Purpose (Layman Explanation):
# Sets up the logging system that records what the members service does in a structured way,
# while making sure personal data like emails never shows up in full in the logs.

# 🧪 Purpose (Technical Summary):
# Structured logging with JSON formatting (python-json-logger), request context variables,
# a StructuredLogger wrapper for extra fields, and PII masking helpers for identity tokens.

# 🔗 Dependencies:
# - python-json-logger: JSON log formatting
# - logging: Python standard logging
# - contextvars: Request context tracking

# 🔄 Connected Modules / Calls From:
# Used by: application factory (setup), domain services, store adapters, API routers

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Global logging configuration
_logging_configured = False
_loggers_cache = {}

SERVICE_NAME = 'members-api'


class ContextualFormatter(logging.Formatter):
    """
    Text formatter that adds the request ID and service name to every record.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hostname = os.uname().nodename if hasattr(os, 'uname') else 'unknown'

    def format(self, record):
        record.request_id = request_id_var.get('')
        record.hostname = self.hostname
        record.service = SERVICE_NAME
        record.timestamp = datetime.now(timezone.utc).isoformat()
        return super().format(record)


class JSONFormatter(JsonFormatter):
    """
    JSON formatter for structured logging.

    Flattens the ``extra_fields`` dict attached by StructuredLogger into
    the top-level JSON object.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = SERVICE_NAME

        if request_id_var.get():
            log_record['request_id'] = request_id_var.get()

        extra_fields = log_record.pop('extra_fields', None)
        if extra_fields:
            for key, value in extra_fields.items():
                log_record.setdefault(key, value)


class StructuredLogger:
    """
    Logger wrapper with structured extra fields.

    Keyword arguments other than exc_info/stack_info become extra fields
    on the emitted record.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, message: str, extra: Dict = None, **kwargs):
        """Log debug message with extra fields."""
        self._log(logging.DEBUG, message, extra, **kwargs)

    def info(self, message: str, extra: Dict = None, **kwargs):
        """Log info message with extra fields."""
        self._log(logging.INFO, message, extra, **kwargs)

    def warning(self, message: str, extra: Dict = None, **kwargs):
        """Log warning message with extra fields."""
        self._log(logging.WARNING, message, extra, **kwargs)

    def error(self, message: str, extra: Dict = None, exc_info: bool = False, **kwargs):
        """Log error message with extra fields."""
        self._log(logging.ERROR, message, extra, exc_info=exc_info, **kwargs)

    def _log(self, level: int, message: str, extra: Dict = None, **kwargs):
        extra_fields = dict(extra or {})

        for key, value in kwargs.items():
            if key not in ['exc_info', 'stack_info', 'stacklevel']:
                extra_fields[key] = value

        clean_kwargs = {k: v for k, v in kwargs.items()
                        if k in ['exc_info', 'stack_info', 'stacklevel']}

        if extra_fields:
            clean_kwargs['extra'] = {'extra_fields': extra_fields}

        self.logger.log(level, message, **clean_kwargs)

    def log_business_event(
        self,
        event_type: str,
        description: str,
        entity_id: str = None,
        extra: Dict = None
    ):
        """Log business events (profile migrated, duplicate removed...)."""
        extra_fields = {
            'event_type': 'business_event',
            'business_event_type': event_type,
            **(extra or {})
        }

        if entity_id:
            extra_fields['entity_id'] = entity_id

        self.info(description, extra=extra_fields)


def mask_email(value: Optional[str]) -> str:
    """
    Mask an identity token for log output.

    ``"ana.souza@example.com"`` becomes ``"a***@example.com"``; opaque ids
    keep their first two characters.
    """
    if not value:
        return ''
    value = str(value)
    if '@' in value:
        local, _, domain = value.partition('@')
        return f"{local[:1]}***@{domain}"
    return f"{value[:2]}***"


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    enable_console: bool = True
) -> logging.Logger:
    """
    Setup application logging configuration.

    Args:
        log_level: Root log level name
        log_format: 'json' or 'text'
        enable_console: Attach a stdout handler

    Returns:
        The startup logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger("startup")

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format.lower() == 'json':
        formatter = JSONFormatter('%(message)s')
    else:
        formatter = ContextualFormatter('%(timestamp)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    _logging_configured = True
    return logging.getLogger("startup")


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = StructuredLogger(name)
    _loggers_cache[name] = logger

    return logger


@contextmanager
def log_context(request_id: str = None):
    """
    Context manager binding a request ID to every log line emitted inside it.

    Args:
        request_id: Request identifier (generated when omitted)
    """
    if request_id is None:
        request_id = str(uuid4())

    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)
