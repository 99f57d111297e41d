"""
Scorecard engine logging

Structured logging for the scorecard engine: request context enrichment,
redaction of sensitive keys, JSON or key/value rendering, and a small
context-carrying adapter used by services and repositories.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger import jsonlogger

# Correlation id of the request being served, bound by RequestIDMiddleware
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

SERVICE_NAME = 'scorecard-engine'


class RequestContextProcessor:
    """Stamp request id, timestamp, service and environment on each record"""

    def __init__(self, environment: str = "development"):
        self.environment = environment

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict['request_id'] = req_id

        event_dict.setdefault('timestamp', datetime.now(timezone.utc).isoformat())
        event_dict['service'] = SERVICE_NAME
        event_dict['environment'] = self.environment

        return event_dict


class SecurityLogProcessor:
    """Mask sensitive values before they reach a handler"""

    SENSITIVE_KEYS = (
        'password', 'token', 'secret', 'credentials',
        'authorization', 'cookie', 'session',
    )

    def __call__(self, logger, method_name, event_dict):
        if any(keyword in str(event_dict.get('event', '')).lower()
               for keyword in ('auth', 'permission', 'forbidden', 'denied')):
            event_dict['security_event'] = True

        self._sanitize_event_dict(event_dict)
        return event_dict

    def _sanitize_event_dict(self, event_dict: Dict[str, Any]):
        for key in list(event_dict.keys()):
            if any(sensitive in str(key).lower() for sensitive in self.SENSITIVE_KEYS):
                event_dict[key] = '[REDACTED]'
            elif isinstance(event_dict[key], dict):
                self._sanitize_event_dict(event_dict[key])


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter sharing the structlog enrichment processors"""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self._processors = (RequestContextProcessor(environment), SecurityLogProcessor())

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['event'] = record.getMessage()

        for processor in self._processors:
            processor(None, record.levelname.lower(), log_record)


def _build_formatter(log_format: str, environment: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s',
            environment=environment,
        )

    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.KeyValueRenderer(
            key_order=['timestamp', 'level', 'logger', 'event'],
        ),
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            RequestContextProcessor(environment),
            SecurityLogProcessor(),
        ],
    )


def configure_logging(
    level: str = "INFO",
    log_format: str = "text",
    environment: str = "development",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure root logging for the application.

    Args:
        level: Root log level name
        log_format: "json" for python-json-logger output, "text" for key/value
        environment: Environment name stamped on every record
        log_file: Optional path of a rotating log file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers.clear()

    formatter = _build_formatter(log_format, environment)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf8',
        )
        file_handler.setLevel(getattr(logging, level))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Library loggers stay at WARNING unless explicitly raised
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)


class LoggerAdapter:
    """Thin adapter over a stdlib logger that merges bound context into ``extra``"""

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self._context = dict(context or {})

    def _log(self, level: int, message: str, *args, **kwargs):
        extra = dict(self._context)
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra

        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)


def get_logger(name: Optional[str] = None, **context: Any) -> LoggerAdapter:
    """
    Return a context-carrying logger.

    Args:
        name: Logger name (defaults to the scorecard engine root logger)
        **context: Fields attached to every record logged through the adapter

    Returns:
        LoggerAdapter bound to ``context``
    """
    return LoggerAdapter(logging.getLogger(name or "scorecard_engine"), context)
