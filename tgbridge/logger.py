"""JSON logging for applications that embed ``tgbridge``.

The library modules only call ``logging.getLogger("tgbridge.<module>")``.
Handlers are attached here, once, when an application asks
:meth:`TgBridgeLogger.get_logger` for the ``tgbridge`` logger.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import List, Optional


class _JsonFormatter(logging.Formatter):
    """Render a record as one JSON line.

    The fixed keys are timestamp, level, logger, message, module and
    func_name.  Whatever the call site put in ``extra=`` (``api_endpoint``,
    ``attempt``, ``status`` and so on) is appended, and a traceback is added
    under ``exc_info`` when the record carries one::

        {"timestamp": "…", "level": "WARNING", "logger": "tgbridge.client", …, "attempt": 2}
    """

    # attribute names every LogRecord has; the rest came from extra=
    _RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in self._RECORD_ATTRS and key not in entry:
                entry[key] = value

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class TgBridgeLogger:
    """Process-wide setup of the ``tgbridge`` logger.

    The first :meth:`get_logger` call decides the level and whether a log file
    is written; later calls hand back the same configured logger::

        logger = TgBridgeLogger.get_logger(log_file="logs/tgbridge.log")
        logger.info("Client ready")
    """

    _instance: Optional["TgBridgeLogger"] = None
    _logger: Optional[logging.Logger] = None

    LOGGER_NAME: str = "tgbridge"

    _MAX_BYTES: int = 5 * 1024 * 1024
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: int = logging.INFO, log_file: Optional[str] = None) -> "TgBridgeLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._configure(level, log_file)
        return cls._instance

    def _configure(self, level: int, log_file: Optional[str]) -> None:
        self._logger = logging.getLogger(self.LOGGER_NAME)
        self._logger.setLevel(level)

        # keep handlers the application attached itself
        if self._logger.handlers:
            return

        formatter = _JsonFormatter()
        for handler in self._build_handlers(log_file):
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def _build_handlers(self, log_file: Optional[str]) -> List[logging.Handler]:
        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if log_file:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(RotatingFileHandler(
                log_file,
                maxBytes=self._MAX_BYTES,
                backupCount=self._BACKUP_COUNT,
                encoding="utf-8",
            ))
        return handlers

    @staticmethod
    def get_logger(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
        """Return the ``tgbridge`` logger, configuring it on first use.

        *level* and *log_file* only matter on the first call.
        """
        instance = TgBridgeLogger(level, log_file)
        assert instance._logger is not None
        return instance._logger

    @classmethod
    def reset(cls) -> None:
        """Drop the configured handlers so the next call starts fresh."""
        if cls._instance is not None:
            cls._instance.cleanup()
        cls._instance = None

    def cleanup(self) -> None:
        """Flush, close and detach every handler on the logger."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
