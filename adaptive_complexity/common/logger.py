"""
Engine Logger

Package logger for the adaptive complexity engine. Engine modules log through
children of ``app_logger``; profile operations tag their messages with the
user and subject through a context adapter, and the JSON formatter flattens
that context into each emitted object.

The logger starts from ``LOG_LEVEL``/``LOG_JSON``/``LOG_FILE`` at import time
and is reconfigured from the loaded configuration by
``adaptive_complexity.common.init.setup_logging``.
"""

import os
import sys
import json
import time
import logging
import datetime
import functools
from typing import Any, Callable, Dict, Optional, TypeVar, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER_NAME = "adaptive_complexity"

F = TypeVar('F', bound=Callable[..., Any])


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the record's ``data`` merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        data = getattr(record, "data", None)
        if isinstance(data, dict):
            payload.update(data)

        return json.dumps(payload, default=str)


def configure_logger(
    level: Union[str, int] = logging.INFO,
    use_json: bool = False,
    log_file: Optional[str] = None,
    name: str = APP_LOGGER_NAME
) -> logging.Logger:
    """
    (Re)configure a logger, replacing any handlers it already has.

    Args:
        level: Level name or number
        use_json: Emit JSON objects instead of formatted lines
        log_file: Also write to this file when given
        name: Logger to configure

    Returns:
        The configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if use_json else logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        directory = os.path.dirname(log_file)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}")

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adds fixed context (user id, subject id, ...) to every record's ``data``."""

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs = kwargs.copy()
        extra = dict(kwargs.get('extra') or {})
        data = dict(extra.get('data') or {})
        data.update(self.extra)
        extra['data'] = data
        kwargs['extra'] = extra
        return msg, kwargs

    def with_context(self, **context) -> 'LoggerAdapter':
        """A new adapter carrying this adapter's context plus ``context``."""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def with_context(name: Optional[str] = None, **context) -> LoggerAdapter:
    """Adapter over the named logger (the package logger by default)."""
    return LoggerAdapter(logging.getLogger(name) if name else app_logger, context)


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Log how long the decorated function took, at DEBUG level.

    Failures are logged at ERROR with the elapsed time and re-raised.
    """
    def decorator(func: F) -> F:
        target = logger or app_logger

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                target.error(f"{func.__name__} failed after {time.perf_counter() - start:.4f}s: {e}")
                raise
            target.debug(f"{func.__name__} took {time.perf_counter() - start:.4f}s")
            return result

        return wrapper  # type: ignore[return-value]
    return decorator


app_logger = logging.getLogger(APP_LOGGER_NAME)
if not app_logger.handlers:
    configure_logger(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        use_json=os.environ.get("LOG_JSON", "false").lower() == "true",
        log_file=os.environ.get("LOG_FILE")
    )
