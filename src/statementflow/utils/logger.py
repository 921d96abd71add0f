"""Logging infrastructure with statement context."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = "statementflow"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [statement:%(statement_id)s] %(message)s"

# Silent until the application configures handlers
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


class StatementContextFilter(logging.Filter):
    """Add statement context to log records."""

    def filter(self, record):
        """Default statement_id when no adapter supplied one."""
        if not hasattr(record, "statement_id"):
            record.statement_id = "-"
        return True


class StatementFlowLogger:
    """Centralized logging manager."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 30,
        enabled: bool = True,
    ):
        self.context_filter = StatementContextFilter()

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Remove existing handlers
        self.logger.handlers.clear()

        if not enabled:
            self.logger.addHandler(logging.NullHandler())
            return

        formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        # Console goes to stderr so extraction JSON on stdout stays clean
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(self.context_filter)
        self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.context_filter)
            self.logger.addHandler(file_handler)

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 30,
    enabled: bool = True,
) -> logging.Logger:
    """Attach handlers to the package logger. Only applications call this."""
    return StatementFlowLogger(
        log_level=log_level,
        log_file=log_file,
        max_file_size_mb=max_file_size_mb,
        backup_count=backup_count,
        enabled=enabled,
    ).get_logger()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger or one of its children."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def statement_logger(logger: logging.Logger, statement_id: str) -> logging.LoggerAdapter:
    """Bind a statement id to every record emitted through the returned adapter."""
    return logging.LoggerAdapter(logger, {"statement_id": statement_id})


def log_event(logger: Any, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured pipeline event."""
    details = " ".join(f"{key}={value}" for key, value in fields.items())
    message = f"{event} {details}" if details else event
    logger.log(level, message, extra={"event": event, "event_fields": fields})
