"""
Process-wide logging setup.

Handlers sit behind a queue so request handlers never block on disk or
stdout. The listener thread owns the console and rotating file handlers.
"""

import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .context import RequestContextFilter
from .formatters import build_formatter

APP_LOGGER_NAME = "rentora_backend"

# Third-party loggers and the level they are allowed to speak at
_LIBRARY_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "asyncmy": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
}


class LogPipeline:
    """Owns the queue listener for the lifetime of the process."""

    def __init__(self):
        self._listener: QueueListener | None = None
        self._queue_handler: QueueHandler | None = None

    @property
    def running(self) -> bool:
        return self._listener is not None

    def _handlers(self, config) -> list[logging.Handler]:
        formatter = build_formatter(config.log_format)
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if config.log_to_file:
            directory = os.path.dirname(config.log_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    config.log_file_path,
                    maxBytes=config.log_max_bytes,
                    backupCount=config.log_backup_count,
                    encoding="utf-8",
                )
            )
        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def start(self, config) -> None:
        if self.running:
            return
        level = logging.getLevelName(config.log_level.upper())

        log_queue: queue.Queue = queue.Queue(-1)
        self._queue_handler = QueueHandler(log_queue)
        # Context vars are read on the calling thread, before the queue hop
        self._queue_handler.addFilter(RequestContextFilter())
        self._listener = QueueListener(log_queue, *self._handlers(config))
        self._listener.start()

        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(self._queue_handler)
        root.setLevel(level)
        logging.getLogger(APP_LOGGER_NAME).setLevel(level)

        for name, library_level in _LIBRARY_LEVELS.items():
            library_logger = logging.getLogger(name)
            library_logger.handlers.clear()
            library_logger.propagate = True
            library_logger.setLevel(library_level)
        logging.captureWarnings(True)

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
        if self._queue_handler is not None:
            logging.getLogger().removeHandler(self._queue_handler)
            self._queue_handler = None


_pipeline = LogPipeline()


def setup_logging(config) -> logging.Logger:
    """Start logging from the loaded settings. Repeated calls are no-ops."""
    _pipeline.start(config)
    return get_logger()


def shutdown_logging() -> None:
    """Flush queued records and detach the handlers."""
    _pipeline.stop()


def get_logger(name: str | None = None) -> logging.Logger:
    """Application logger, namespaced under the package name."""
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}" if name else APP_LOGGER_NAME)
