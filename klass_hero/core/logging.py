"""
Logging Configuration and Utilities

Structured logging for the enrollment service: stdlib handlers with a JSON
or colored console formatter, structlog routed through stdlib, and a
context-aware logger adapter used by services and repositories.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog
import structlog
from pythonjsonlogger import jsonlogger

from klass_hero.config.settings import settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
identity_id: ContextVar[Optional[str]] = ContextVar('identity_id', default=None)

SENSITIVE_KEYS = (
    'password', 'token', 'secret', 'credentials', 'authorization', 'cookie',
)


class RequestContextProcessor:
    """Add request context to structlog event dicts"""

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict['request_id'] = req_id

        uid = identity_id.get()
        if uid:
            event_dict['identity_id'] = uid

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'klass-hero'
        event_dict['environment'] = settings.ENVIRONMENT

        return event_dict


class SecurityLogProcessor:
    """Mask sensitive values before they reach a renderer"""

    def __call__(self, logger, method_name, event_dict):
        self._sanitize_event_dict(event_dict)
        return event_dict

    def _sanitize_event_dict(self, event_dict: Dict[str, Any]):
        for key in list(event_dict.keys()):
            if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
                event_dict[key] = '[REDACTED]'
            elif isinstance(event_dict[key], dict):
                self._sanitize_event_dict(event_dict[key])


class RequestContextFilter(logging.Filter):
    """Attach the current request id to stdlib log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'request_id'):
            record.request_id = request_id.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['environment'] = settings.ENVIRONMENT

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


_PLAIN_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
_LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _build_formatter(colored: bool) -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return CustomJsonFormatter('%(asctime)s %(name)s %(levelname)s %(message)s')
    if colored:
        return colorlog.ColoredFormatter('%(log_color)s' + _PLAIN_FORMAT, log_colors=_LOG_COLORS)
    return logging.Formatter(_PLAIN_FORMAT)


class LoggingConfig:
    """Process-wide logging setup, applied once from the app factory"""

    _configured = False

    @staticmethod
    def configure_structured_logging():
        renderer = (
            structlog.processors.JSONRenderer()
            if settings.LOG_FORMAT == "json"
            else structlog.processors.KeyValueRenderer()
        )
        structlog.configure(
            processors=[
                RequestContextProcessor(),
                SecurityLogProcessor(),
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def configure_standard_logging():
        level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handlers = [logging.StreamHandler(sys.stdout)]
        handlers[0].setFormatter(_build_formatter(colored=settings.is_development()))

        if settings.LOG_FILE:
            log_path = Path(settings.LOG_FILE)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding='utf8',
            )
            file_handler.setFormatter(_build_formatter(colored=False))
            handlers.append(file_handler)

        for handler in handlers:
            handler.setLevel(level)
            handler.addFilter(RequestContextFilter())
            root_logger.addHandler(handler)

        # Third-party noise
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(
            logging.INFO if settings.DB_ECHO else logging.WARNING
        )

    @classmethod
    def configure(cls, force: bool = False):
        if cls._configured and not force:
            return
        cls.configure_standard_logging()
        cls.configure_structured_logging()
        cls._configured = True


class LoggerAdapter:
    """
    Thin wrapper over a stdlib logger that merges bound context into the
    `extra` of every call.
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        self.logger = logger
        self._context: Dict[str, Any] = dict(context)

    def bind(self, **context: Any) -> "LoggerAdapter":
        """New adapter carrying this one's context plus `context`."""
        return LoggerAdapter(self.logger, **{**self._context, **context})

    def _log(self, level: int, message: str, *args, **kwargs):
        kwargs['extra'] = {**self._context, **(kwargs.get('extra') or {})}
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


def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name))


def get_structured_logger(name: Optional[str] = None):
    """structlog logger routed through the stdlib logger of the same name"""
    return structlog.get_logger(name or 'klass_hero')
