import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(funcName)s:%(lineno)d %(message)s'
SIMPLE_FORMAT = '%(asctime)s %(levelname)s %(message)s'

# Extra record attributes copied into structured log lines
CONTEXT_FIELDS = ('content_path', 'locale', 'schema_location', 'xpath', 'skipped')


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    enable_structured_logging: bool = False,
) -> None:
    """Configure logging with optional file rotation and structured output."""

    env_level = os.getenv('XMLCONTENT_LOG_LEVEL', '').upper()
    if env_level in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
        level = getattr(logging, env_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if enable_structured_logging:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        if enable_structured_logging:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    configure_content_loggers(level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured - Level: {logging.getLevelName(level)}")
    if log_file:
        logger.info(f"Log file: {log_file}")


def configure_content_loggers(level: int) -> None:
    """Align the content pipeline loggers with the root level."""

    content_loggers = [
        'xmlcontent_api.content.definition',
        'xmlcontent_api.content.document',
        'xmlcontent_api.content.tree',
        'xmlcontent_api.content.renderer',
        'xmlcontent_api.content.cache',
        'xmlcontent_api.content.repository',
        'xmlcontent_api.content.router',
    ]

    for logger_name in content_loggers:
        logging.getLogger(logger_name).setLevel(level)


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for production logging."""

    def format(self, record: logging.LogRecord) -> str:
        import json
        from datetime import datetime, timezone

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, ensure_ascii=False)


def get_content_logger(name: str) -> logging.Logger:
    """Get a logger for a content pipeline component."""
    return logging.getLogger(f'xmlcontent_api.content.{name}')


def log_content_operation(
    logger: logging.Logger,
    operation: str,
    content_path: Optional[str] = None,
    locale: Optional[str] = None,
    schema_location: Optional[str] = None,
    level: int = logging.INFO,
    **kwargs
) -> None:
    """Log a content operation with structured context."""
    extra = {}
    if content_path:
        extra['content_path'] = content_path
    if locale:
        extra['locale'] = locale
    if schema_location:
        extra['schema_location'] = schema_location

    extra.update(kwargs)

    logger.log(level, operation, extra=extra)
